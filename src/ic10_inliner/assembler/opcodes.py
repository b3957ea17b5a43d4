"""
IC10 Instruction Set Definition
===============================

This module defines the IC10 instruction signatures: for every mnemonic,
the ordered list of parameter constraints. The assemble pass uses the table
to check parameter counts, to check what kind of token each parameter may
be, and to decide which parameters are rewritten (alias substitution,
relative branch targets).

Parameter Constraints
---------------------
Each constraint is a `ParameterType` bit-set:

| Flag                   | Meaning                                         |
|------------------------|-------------------------------------------------|
| CONSTANT               | number, macro, define or label                  |
| DEVICE                 | device pin (d0-d5, db, dr0)                     |
| REGISTER               | register (r0-r15, ra, sp, rr0)                  |
| ALLOW_UNKNOWN_SYMBOL   | unresolved names are accepted (logic types...)  |
| NO_SUBSTITUTION        | token is left exactly as written                |
| BRANCH_RELATIVE        | absolute target is rewritten to a displacement  |

Instruction Families
--------------------
- Utility and stack: alias, yield, sleep, hcf, move, push, pop, peek, poke...
- Device I/O: l, s, ls, ss, lr, ld, sd, get, put, clr, rmap...
- Batch I/O: lb, sb, lbn, sbn, lbs, sbs, lbns
- Arithmetic and logic: add, sub, mul, div, sll, and, or, xor...
- Comparison and select: seq, sgt, sap, snan, select, sdse...
- Branching: j, jal, jr, b*, b*al, br*

Reference
---------
- Stationeers IC10 in-game instruction reference (Stationpedia)
"""

from dataclasses import dataclass
from enum import IntFlag
from typing import Iterable, Iterator, Optional

from ic10_inliner.errors import InstructionTableError


# =============================================================================
# Parameter Types
# =============================================================================

class ParameterType(IntFlag):
    """Allowed token kinds and handling rules for one parameter."""
    CONSTANT = 0x01
    DEVICE = 0x02
    REGISTER = 0x04
    ALLOW_UNKNOWN_SYMBOL = 0x08
    NO_SUBSTITUTION = 0x10
    BRANCH_RELATIVE = 0x20

    # Used for classification results only: a token that matched nothing
    UNKNOWN_SYMBOL = 0x00


# Shorthands for the table below
R = ParameterType.REGISTER                                   # output register
V = ParameterType.REGISTER | ParameterType.CONSTANT          # value
D = ParameterType.DEVICE                                     # device pin
E = (ParameterType.CONSTANT | ParameterType.REGISTER
     | ParameterType.ALLOW_UNKNOWN_SYMBOL)                   # enumeration
J = ParameterType.REGISTER | ParameterType.CONSTANT          # absolute target
B = (ParameterType.REGISTER | ParameterType.CONSTANT
     | ParameterType.BRANCH_RELATIVE)                        # relative target


# =============================================================================
# Instruction Signatures
# =============================================================================

@dataclass(frozen=True)
class InstructionSignature:
    """
    Signature of one mnemonic.

    Attributes:
        mnemonic: Canonical (lower-case) mnemonic
        parameters: One constraint per parameter, in order
    """
    mnemonic: str
    parameters: tuple[ParameterType, ...]

    @property
    def arity(self) -> int:
        return len(self.parameters)

    def __repr__(self) -> str:
        return f"InstructionSignature({self.mnemonic!r}, arity={self.arity})"


class InstructionTable:
    """
    Case-insensitive mapping from mnemonic to signature.

    The assemble pass only ever calls `lookup`, so any object offering
    that method can stand in for this class.

    Usage:
        table = InstructionTable.default()
        table.lookup("ADD")
        InstructionSignature('add', arity=3)
    """

    def __init__(self, entries: Optional[dict[str, Iterable[ParameterType]]] = None):
        self._signatures: dict[str, InstructionSignature] = {}
        if entries:
            self.extend(entries)

    @classmethod
    def default(cls) -> "InstructionTable":
        """Table with the full IC10 instruction set."""
        return cls(IC10_INSTRUCTIONS)

    def add(self, mnemonic: str, parameters: Iterable[ParameterType]) -> InstructionSignature:
        """
        Register (or replace) one mnemonic.

        Raises:
            InstructionTableError: If the mnemonic is empty or a constraint
                is not a ParameterType
        """
        if not mnemonic or not mnemonic.strip():
            raise InstructionTableError("mnemonic must not be empty")

        params = tuple(parameters)
        for param in params:
            if not isinstance(param, ParameterType):
                raise InstructionTableError(
                    f"invalid parameter constraint {param!r} for mnemonic '{mnemonic}'"
                )

        signature = InstructionSignature(mnemonic.strip().lower(), params)
        self._signatures[signature.mnemonic] = signature
        return signature

    def extend(self, entries: dict[str, Iterable[ParameterType]]) -> None:
        """Register several mnemonics at once."""
        for mnemonic, parameters in entries.items():
            self.add(mnemonic, parameters)

    def lookup(self, mnemonic: str) -> Optional[InstructionSignature]:
        """Find the signature of a mnemonic (case-insensitive)."""
        return self._signatures.get(mnemonic.lower())

    def __contains__(self, mnemonic: object) -> bool:
        return isinstance(mnemonic, str) and mnemonic.lower() in self._signatures

    def __iter__(self) -> Iterator[InstructionSignature]:
        return iter(self._signatures.values())

    def __len__(self) -> int:
        return len(self._signatures)


# =============================================================================
# IC10 Instruction Table
# =============================================================================
# Key: mnemonic
# Value: parameter constraints in order
# =============================================================================

IC10_INSTRUCTIONS: dict[str, tuple[ParameterType, ...]] = {
    # =========================================================================
    # UTILITY
    # =========================================================================
    # Device aliases are kept in the output because the chip binds them at
    # runtime; the name and pin are passed through untouched.
    "alias": (ParameterType.ALLOW_UNKNOWN_SYMBOL | ParameterType.NO_SUBSTITUTION,
              ParameterType.DEVICE | ParameterType.NO_SUBSTITUTION),
    "hcf": (),
    "sleep": (V,),
    "yield": (),
    "move": (R, V),

    # =========================================================================
    # STACK
    # =========================================================================
    "push": (V,),
    "pop": (R,),
    "peek": (R,),
    "poke": (V, V),
    "get": (R, D, V),
    "getd": (R, V, V),
    "put": (D, V, V),
    "putd": (V, V, V),
    "clr": (D,),
    "clrd": (V,),

    # =========================================================================
    # DEVICE I/O
    # =========================================================================
    "l": (R, D, E),
    "s": (D, E, V),
    "ls": (R, D, V, E),
    "ss": (D, V, E, V),
    "lr": (R, D, E, E),
    "ld": (R, V, E),
    "sd": (V, E, V),
    "rmap": (R, D, V),

    # =========================================================================
    # BATCH I/O
    # =========================================================================
    "lb": (R, V, E, E),
    "sb": (V, E, V),
    "lbn": (R, V, V, E, E),
    "sbn": (V, V, E, V),
    "lbs": (R, V, V, E, E),
    "sbs": (V, V, E, V),
    "lbns": (R, V, V, V, E, E),

    # =========================================================================
    # ARITHMETIC
    # =========================================================================
    "add": (R, V, V),
    "sub": (R, V, V),
    "mul": (R, V, V),
    "div": (R, V, V),
    "mod": (R, V, V),
    "pow": (R, V, V),
    "max": (R, V, V),
    "min": (R, V, V),
    "abs": (R, V),
    "ceil": (R, V),
    "floor": (R, V),
    "round": (R, V),
    "trunc": (R, V),
    "sqrt": (R, V),
    "exp": (R, V),
    "log": (R, V),
    "rand": (R,),
    "sin": (R, V),
    "cos": (R, V),
    "tan": (R, V),
    "asin": (R, V),
    "acos": (R, V),
    "atan": (R, V),
    "atan2": (R, V, V),
    "lerp": (R, V, V, V),

    # =========================================================================
    # LOGIC AND BITWISE
    # =========================================================================
    "and": (R, V, V),
    "or": (R, V, V),
    "xor": (R, V, V),
    "nor": (R, V, V),
    "not": (R, V),
    "sll": (R, V, V),
    "srl": (R, V, V),
    "sla": (R, V, V),
    "sra": (R, V, V),
    "ext": (R, V, V, V),
    "ins": (R, V, V, V),

    # =========================================================================
    # COMPARISON AND SELECT
    # =========================================================================
    "select": (R, V, V, V),
    "seq": (R, V, V),
    "sne": (R, V, V),
    "sgt": (R, V, V),
    "sge": (R, V, V),
    "slt": (R, V, V),
    "sle": (R, V, V),
    "seqz": (R, V),
    "snez": (R, V),
    "sgtz": (R, V),
    "sgez": (R, V),
    "sltz": (R, V),
    "slez": (R, V),
    "sap": (R, V, V, V),
    "sna": (R, V, V, V),
    "sapz": (R, V, V),
    "snaz": (R, V, V),
    "snan": (R, V),
    "snanz": (R, V),
    "sdse": (R, D),
    "sdns": (R, D),

    # =========================================================================
    # JUMPS
    # =========================================================================
    "j": (J,),
    "jal": (J,),
    "jr": (B,),

    # =========================================================================
    # ABSOLUTE BRANCHES (and -al variants storing the return address)
    # =========================================================================
    "beq": (V, V, J),
    "bne": (V, V, J),
    "bgt": (V, V, J),
    "bge": (V, V, J),
    "blt": (V, V, J),
    "ble": (V, V, J),
    "beqz": (V, J),
    "bnez": (V, J),
    "bgtz": (V, J),
    "bgez": (V, J),
    "bltz": (V, J),
    "blez": (V, J),
    "bap": (V, V, V, J),
    "bna": (V, V, V, J),
    "bapz": (V, V, J),
    "bnaz": (V, V, J),
    "bnan": (V, J),
    "bdse": (D, J),
    "bdns": (D, J),
    "beqal": (V, V, J),
    "bneal": (V, V, J),
    "bgtal": (V, V, J),
    "bgeal": (V, V, J),
    "bltal": (V, V, J),
    "bleal": (V, V, J),
    "beqzal": (V, J),
    "bnezal": (V, J),
    "bgtzal": (V, J),
    "bgezal": (V, J),
    "bltzal": (V, J),
    "blezal": (V, J),
    "bapal": (V, V, V, J),
    "bnaal": (V, V, V, J),
    "bapzal": (V, V, J),
    "bnazal": (V, V, J),
    "bdseal": (D, J),
    "bdnsal": (D, J),

    # =========================================================================
    # RELATIVE BRANCHES
    # =========================================================================
    "breq": (V, V, B),
    "brne": (V, V, B),
    "brgt": (V, V, B),
    "brge": (V, V, B),
    "brlt": (V, V, B),
    "brle": (V, V, B),
    "breqz": (V, B),
    "brnez": (V, B),
    "brgtz": (V, B),
    "brgez": (V, B),
    "brltz": (V, B),
    "brlez": (V, B),
    "brap": (V, V, V, B),
    "brna": (V, V, V, B),
    "brapz": (V, V, B),
    "brnaz": (V, V, B),
    "brnan": (V, B),
    "brdse": (D, B),
    "brdns": (D, B),
}

