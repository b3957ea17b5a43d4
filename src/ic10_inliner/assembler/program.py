"""
IC10 Program Model
==================

In-memory representation of a parsed IC10 program.

Structure
---------
- **Program**: the whole compilation unit; an ordered list of sections plus
  the program-wide sets of symbol and alias names.
- **Section**: a named run of instruction lines with its own aliases and
  symbols and the names of the sections it requires.
- **Symbol**: a named constant (`define`) or a label.
- **ProgramLine**: one instruction kept for assembly.

The parser builds a Program once. Afterwards the only mutation is the
per-section `offset`, assigned by the assemble pass when sections are placed.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

from ic10_inliner.assembler.grammar import (
    format_number,
    parse_hex,
    parse_number,
)


DEFAULT_SECTION = "(default)"


# =============================================================================
# Symbols
# =============================================================================

class SymbolKind(Enum):
    """Kinds of named symbol."""
    CONSTANT = auto()  # define NAME VALUE (number, enum-style token or macro)
    LABEL = auto()     # name: marks the next instruction


@dataclass
class Symbol:
    """
    A named constant or label.

    Attributes:
        name: Symbol name (case-sensitive)
        kind: CONSTANT or LABEL
        section: Section that owns the symbol
        text: Raw text of the definition, used verbatim when not numeric
        value: Numeric value (constants) or in-section offset (labels)
    """
    name: str
    kind: SymbolKind
    section: "Section"
    text: str
    value: Optional[float] = None

    @classmethod
    def constant(cls, section: "Section", name: str, text: str) -> "Symbol":
        """
        Create a constant from its source text.

        Decimal, 0x-prefixed and $-prefixed hex values are recognised as
        numbers; anything else (e.g. `Temperature`, `HASH("Door")`) is kept
        as raw text.
        """
        value: Optional[float] = parse_hex(text)
        if value is None:
            value = parse_number(text)
        return cls(name=name, kind=SymbolKind.CONSTANT, section=section,
                   text=text, value=value)

    @classmethod
    def label(cls, section: "Section", name: str, offset: int) -> "Symbol":
        """Create a label pointing at `offset` within `section`."""
        return cls(name=name, kind=SymbolKind.LABEL, section=section,
                   text=name, value=offset)

    @property
    def is_label(self) -> bool:
        return self.kind is SymbolKind.LABEL

    def resolve(self) -> str:
        """
        Text that replaces a reference to this symbol.

        Labels resolve to their in-section offset plus the owning section's
        assigned offset; constants to their number, or their raw text.
        """
        if self.is_label:
            return str(int(self.value or 0) + self.section.offset)
        if self.value is not None:
            return format_number(self.value)
        return self.text


# =============================================================================
# Lines and Sections
# =============================================================================

@dataclass
class ProgramLine:
    """
    One instruction kept for assembly.

    Attributes:
        opcode: Mnemonic as written in the source
        params: Parameter tokens in source order
        source_line: 0-based source line number, for diagnostics
        section_offset: 0-based position within the owning section
        comment: Trailing comment, if any
    """
    opcode: str
    params: list[str] = field(default_factory=list)
    source_line: int = 0
    section_offset: int = 0
    comment: Optional[str] = None


@dataclass(eq=False)
class Section:
    """
    A named run of instructions.

    Attributes:
        name: Section name
        required_sections: Names from `section NAME requires A B ...`
        aliases: alias name -> target token
        symbols: symbol name -> Symbol
        lines: Instructions in source order
        offset: Absolute instruction index of the first line, assigned
            when the section is placed during assembly
    """
    name: str
    required_sections: list[str] = field(default_factory=list)
    aliases: dict[str, str] = field(default_factory=dict)
    symbols: dict[str, Symbol] = field(default_factory=dict)
    lines: list[ProgramLine] = field(default_factory=list)
    offset: int = 0

    @property
    def size(self) -> int:
        """Number of instruction lines."""
        return len(self.lines)

    @property
    def is_empty(self) -> bool:
        """No lines, no aliases and no symbols."""
        return not self.lines and not self.aliases and not self.symbols

    def __repr__(self) -> str:
        return f"Section({self.name!r}, size={self.size}, offset={self.offset})"


@dataclass
class Program:
    """
    A whole compilation unit.

    Attributes:
        sections: Sections in source order
        symbols: Every symbol name ever defined, for uniqueness checks
        aliases: Every alias name ever defined, for collision checks
    """
    sections: list[Section] = field(default_factory=list)
    symbols: set[str] = field(default_factory=set)
    aliases: set[str] = field(default_factory=set)

    @property
    def size(self) -> int:
        """Total number of instruction lines over all sections."""
        return sum(section.size for section in self.sections)
