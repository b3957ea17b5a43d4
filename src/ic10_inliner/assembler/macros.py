"""
Inline Macro Evaluation
=======================

IC10 programs refer to prefabs, names and short strings through numeric
constants. Two inline macros compute those constants from readable text:

| Macro        | Result                                              |
|--------------|-----------------------------------------------------|
| HASH("Name") | CRC-32 of the ASCII bytes, unsigned decimal         |
| STR("text")  | first 6 ASCII bytes packed big-endian, decimal      |

Technical Details
-----------------
- HASH uses the standard CRC-32 (polynomial 0x04C11DB7, reflected, initial
  value and final XOR 0xFFFFFFFF), the same checksum as zlib.
- STR shifts each byte in from the right: "abc" -> 0x616263 = 6382179.

Usage
-----
    from ic10_inliner.assembler.macros import expand_macro

    expand_macro('HASH("abc")')  # '891568578'
    expand_macro('STR("abc")')   # '6382179'
"""

from typing import Final, Optional
import zlib

from ic10_inliner.assembler.grammar import is_macro


# Maximum number of characters STR() packs into one value
STR_MAX_CHARS: Final[int] = 6

_UINT64_MASK: Final[int] = 0xFFFFFFFFFFFFFFFF


def compute_hash(text: str) -> int:
    """
    CRC-32 of the ASCII bytes of `text`.

    Returns:
        Unsigned 32-bit checksum
    """
    return zlib.crc32(text.encode("ascii", errors="replace")) & 0xFFFFFFFF


def compute_string(text: str) -> int:
    """
    Pack up to six ASCII bytes of `text` into one integer, big-endian.

    Returns:
        Unsigned 64-bit value
    """
    output = 0
    for byte in text[:STR_MAX_CHARS].encode("ascii", errors="replace"):
        output = ((output << 8) | byte) & _UINT64_MASK
    return output


def macro_argument(token: str) -> str:
    """Text between the quotes of a macro call."""
    start = token.index('"') + 1
    end = token.rindex('"')
    return token[start:end]


def evaluate_macro(token: str) -> Optional[int]:
    """
    Evaluate a HASH("...") or STR("...") call.

    Returns:
        The computed value, or None if `token` is not a macro call
    """
    if not is_macro(token):
        return None

    argument = macro_argument(token)
    if token[:4].lower() == "hash":
        return compute_hash(argument)
    return compute_string(argument)


def expand_macro(token: str) -> str:
    """Replace a macro call by its decimal value; other tokens are unchanged."""
    value = evaluate_macro(token)
    return token if value is None else str(value)
