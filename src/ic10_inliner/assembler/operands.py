"""
IC10 Operand Classification
===========================

IC10 source has no type annotations, so the kind of each parameter token is
inferred from its text. Classification is a closed function with a fixed
precedence; the first rule that matches wins:

| Order | Test                              | Kind      | Token becomes      |
|-------|-----------------------------------|-----------|--------------------|
| 1     | decimal number or macro call      | CONSTANT  | unchanged          |
| 2     | device pin (d0, db, dr0, d0:1)    | DEVICE    | unchanged          |
| 3     | register (r0, ra, sp, rr0)        | REGISTER  | unchanged          |
| 4     | hex literal (0xFF, $FF)           | CONSTANT  | decimal value      |
| 5     | resolvable symbol                 | CONSTANT  | symbol value       |
| 6     | anything else                     | UNKNOWN   | unchanged          |

When substitution is off (NO_SUBSTITUTION parameters) a resolvable symbol is
left as written and stays UNKNOWN, so it is not checked against the
constraint.

Symbol lookup is supplied by the caller, because which symbols are visible
depends on where the referencing line sits in the assembled section order.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ic10_inliner.assembler.grammar import (
    is_device_pin,
    is_macro,
    is_number,
    is_register,
    parse_hex,
)
from ic10_inliner.assembler.opcodes import ParameterType
from ic10_inliner.assembler.program import Symbol


class OperandKind(Enum):
    """What a parameter token turned out to be."""
    CONSTANT = ParameterType.CONSTANT
    DEVICE = ParameterType.DEVICE
    REGISTER = ParameterType.REGISTER
    UNKNOWN = ParameterType.UNKNOWN_SYMBOL

    @property
    def flag(self) -> ParameterType:
        """The ParameterType bit this kind must find in a constraint."""
        return self.value


@dataclass(frozen=True)
class Operand:
    """
    A classified parameter.

    Attributes:
        kind: Classification result
        text: Token after hex/symbol substitution
        symbol: The symbol the token referred to, if any
    """
    kind: OperandKind
    text: str
    symbol: Optional[Symbol] = None

    def satisfies(self, constraint: ParameterType) -> bool:
        """
        Check the operand against a parameter constraint.

        Unknown operands are never rejected here: a token that did not
        resolve has already been reported (or tolerated) during lookup.
        """
        if self.kind is OperandKind.UNKNOWN:
            return True
        if constraint & ParameterType.ALLOW_UNKNOWN_SYMBOL:
            return True
        return bool(constraint & self.kind.flag)


# Symbol lookup: name -> Symbol, or None if not visible from this line
SymbolResolver = Callable[[str], Optional[Symbol]]


def classify_operand(
    token: str,
    resolve_symbol: SymbolResolver,
    substitute: bool = True,
) -> Operand:
    """
    Classify one parameter token.

    Args:
        token: The parameter, after alias substitution
        resolve_symbol: Looks up a symbol visible from the current line
        substitute: If False, a resolved symbol keeps its name and is
            classified UNKNOWN

    Returns:
        The classified operand
    """
    if is_number(token) or is_macro(token):
        return Operand(OperandKind.CONSTANT, token)

    if is_device_pin(token):
        return Operand(OperandKind.DEVICE, token)

    if is_register(token):
        return Operand(OperandKind.REGISTER, token)

    value = parse_hex(token)
    if value is not None:
        return Operand(OperandKind.CONSTANT, str(value))

    symbol = resolve_symbol(token)
    if symbol is None:
        return Operand(OperandKind.UNKNOWN, token)

    if not substitute:
        return Operand(OperandKind.UNKNOWN, token, symbol)

    return Operand(OperandKind.CONSTANT, symbol.resolve(), symbol)
