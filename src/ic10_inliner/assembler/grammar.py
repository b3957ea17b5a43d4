"""
IC10 Line Grammar
=================

This module recognises one physical line of IC10 source and splits it into
its parts. IC10 is strictly line oriented, so there is no token stream:
each line is matched as a whole.

Line Shapes
-----------
A non-blank line is one of:

1. **Directive line**: `alias`, `define` or `section` followed by parameters
   ```
   alias sensor d0
   define MaxTemp 300
   section main requires init
   ```

2. **Code line**: optional label, optional opcode, parameters
   ```
   loop: add r0 r0 1
   yield
   start:
   ```

3. **Comment-only line**: `# ...` or `; ...`

Anything else is a syntax error.

Parameter Tokens
----------------
| Shape          | Example                          |
|----------------|----------------------------------|
| Atom           | r0, d1:0, -5, 0.25, Setting      |
| Hex atom       | 0xFF, $FF                        |
| Macro call     | HASH("StructureVolumePump")      |
|                | STR("hello")                     |

Directive names and macro keywords are case-insensitive; every other
identifier is case-sensitive. A trailing backslash is accepted and ignored
(lines are never continued).

Example
-------
>>> from ic10_inliner.assembler.grammar import match_line
>>> match = match_line("loop: add r0 r0 1 # count")
>>> match.label, match.opcode, match.params, match.comment
('loop', 'add', ['r0', 'r0', '1'], 'count')
"""

from dataclasses import dataclass, field
from typing import Optional
import re


# =============================================================================
# Token Shape Patterns
# =============================================================================

# Case-insensitive macro keyword; string contents run to the next quote
_MACRO_CALL = r'(?i:hash|str)\("[^"]*"\)'

# Bare atom, optionally hex-prefixed
_ATOM = r"(?:0x|\$)?[A-Za-z0-9_\-.:]+"

# Macro first so that "HASH(" is not consumed as the atom "HASH"
_PARAM = rf"(?:{_MACRO_CALL}|{_ATOM})"

PARAM_PATTERN = re.compile(_PARAM)

LINE_PATTERN = re.compile(
    r"^\s*"
    r"(?:"
    r"(?P<directive>(?i:alias|section|define))"
    r"|"
    r"(?:(?P<label>[A-Za-z_][A-Za-z0-9_]*):\s*)?(?P<opcode>[A-Za-z][A-Za-z0-9]*)?"
    r")"
    rf"(?P<params>(?:[^\S\r\n]+{_PARAM})*)"
    r"(?:\s*[#;]\s*(?P<comment>.*))?"
    r"\s*\\?$"
)

# Registers: sp, ra, r0-r15 and indirect forms such as rr0
REGISTER_PATTERN = re.compile(r"^(?:sp|r+(?:[0-9a]|1[0-5]))$")

# Device pins: db, d0-d5 and indirect forms such as dr0, optional :channel
DEVICE_PIN_PATTERN = re.compile(r"^d(?:b|[0-5]|r+(?:[0-9a]|1[0-5]))(?::\d)?$")

MACRO_PATTERN = re.compile(rf"^{_MACRO_CALL}$")

_DECIMAL_PATTERN = re.compile(
    r"^[+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)$"
)
_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
_HEX_DIGITS_PATTERN = re.compile(r"^[0-9A-Fa-f]+$")


# =============================================================================
# Line Match Result
# =============================================================================

@dataclass
class LineMatch:
    """
    The parts of one successfully matched source line.

    Attributes:
        directive: Lower-cased directive name, or None for code lines
        label: Label defined on this line (without the colon)
        opcode: Instruction mnemonic as written
        params: Parameter tokens in source order
        comment: Trailing comment text (without the marker)
    """
    directive: Optional[str] = None
    label: Optional[str] = None
    opcode: Optional[str] = None
    params: list[str] = field(default_factory=list)
    comment: Optional[str] = None


def match_line(line: str) -> Optional[LineMatch]:
    """
    Match one physical line against the IC10 line grammar.

    Args:
        line: Source text of the line (a blank line matches as empty)

    Returns:
        LineMatch on success, None if the line is not valid syntax
    """
    match = LINE_PATTERN.match(line)
    if match is None:
        return None

    directive = match.group("directive")
    return LineMatch(
        directive=directive.lower() if directive else None,
        label=match.group("label"),
        opcode=match.group("opcode") or None,
        params=PARAM_PATTERN.findall(match.group("params")),
        comment=match.group("comment") or None,
    )


# =============================================================================
# Token Predicates
# =============================================================================

def is_register(token: str) -> bool:
    """True for register tokens (r0-r15, ra, sp, rr0...)."""
    return REGISTER_PATTERN.match(token) is not None


def is_device_pin(token: str) -> bool:
    """True for device pin tokens (d0-d5, db, dr0, d0:1...)."""
    return DEVICE_PIN_PATTERN.match(token) is not None


def is_macro(token: str) -> bool:
    """True for HASH("...") / STR("...") macro calls."""
    return MACRO_PATTERN.match(token) is not None


def is_number(token: str) -> bool:
    """True for decimal numbers, integer or floating point."""
    return _DECIMAL_PATTERN.match(token) is not None


def parse_number(token: str) -> Optional[float]:
    """Parse a decimal number, returning None if the token is not one."""
    if not is_number(token):
        return None
    return float(token)


def parse_int(token: str) -> Optional[int]:
    """Parse a signed decimal integer, returning None if the token is not one."""
    if _INTEGER_PATTERN.match(token) is None:
        return None
    return int(token)


def parse_hex(token: str) -> Optional[int]:
    """
    Parse a hex literal written as 0xFF or $FF.

    Returns:
        The integer value, or None if the token is not a hex literal
    """
    if token.startswith("0x"):
        digits = token[2:]
    elif token.startswith("$"):
        digits = token[1:]
    else:
        return None

    if _HEX_DIGITS_PATTERN.match(digits) is None:
        return None
    return int(digits, 16)


def format_number(value: float) -> str:
    """
    Render a numeric value the way IC10 source writes it.

    Whole numbers lose their fractional part (16.0 -> "16").
    """
    if float(value).is_integer():
        return str(int(value))
    return repr(value)
