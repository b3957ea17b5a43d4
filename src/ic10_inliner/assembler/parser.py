"""
IC10 Parse Pass
===============

This module implements the first pass: it walks the source line by line,
builds the Program model, registers symbols and aliases, validates directive
shapes and splits the source into sections.

Directives
----------
1. **define**: named constant
   ```
   define MaxPressure 5000
   define DoorHash HASH("StructureDoor")
   ```

2. **alias**: name for a register or device pin
   ```
   alias counter r0
   alias sensor d0
   ```
   Device pin aliases are also kept as `alias` instructions, since the chip
   binds devices at runtime.

3. **section**: starts a named section, optionally requiring earlier ones
   ```
   section init
   section main requires init
   ```

Every other line may define a label and/or hold one instruction.

Diagnostics
-----------
Problems never stop the pass; they are collected on the ParseResult, whose
`valid` flag is False as soon as one error was recorded. An invalid parse
must not be assembled.
"""

from dataclasses import dataclass, field
import logging

from ic10_inliner.assembler.grammar import (
    LineMatch,
    is_device_pin,
    is_register,
    match_line,
)
from ic10_inliner.assembler.program import (
    DEFAULT_SECTION,
    Program,
    ProgramLine,
    Section,
    Symbol,
)
from ic10_inliner.errors import Diagnostics

logger = logging.getLogger(__name__)


# =============================================================================
# Parse Result
# =============================================================================

@dataclass
class ParseResult:
    """
    Outcome of the parse pass.

    Attributes:
        program: The program model
        diagnostics: Warnings and errors found while parsing
        section_names: Distinct names of the sections closed so far, in
            source order
    """
    program: Program
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    section_names: list[str] = field(default_factory=list)

    @property
    def warnings(self) -> list[str]:
        return self.diagnostics.warnings

    @property
    def errors(self) -> list[str]:
        return self.diagnostics.errors

    @property
    def valid(self) -> bool:
        """True when no error was recorded."""
        return not self.diagnostics.has_errors()


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    Parses IC10 source into a Program.

    The running counters (current section, source line, offset within the
    section) are parser state advanced by each line in turn, because label
    offsets depend on every line before them.

    Usage:
        parser = Parser(source)
        result = parser.parse()
        if result.valid:
            ...
    """

    def __init__(self, source: str):
        """
        Initialize the parser.

        Args:
            source: IC10 source text
        """
        self._source = source
        self._program = Program()
        self._result = ParseResult(self._program)
        self._section = Section(DEFAULT_SECTION)
        self._section_declared = False
        self._source_line = -1
        self._section_offset = 0

    def parse(self) -> ParseResult:
        """
        Parse every line of the source.

        Returns:
            ParseResult with the program and all diagnostics
        """
        for line in self._source.split("\n"):
            self._source_line += 1
            line = line.strip()

            if not line:
                continue

            parsed = match_line(line)
            if parsed is None:
                self._error("Unrecognized formatting or syntax error")
                continue

            if parsed.directive == "define":
                self._parse_define(parsed)
            elif parsed.directive == "alias":
                self._parse_alias(parsed)
            elif parsed.directive == "section":
                self._parse_section(parsed)
            else:
                self._parse_code(parsed)

        self._close_section()

        logger.debug(
            "Parsed %d sections, %d lines, %d errors",
            len(self._program.sections), self._program.size,
            self._result.diagnostics.error_count(),
        )
        return self._result

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def _warning(self, message: str) -> None:
        self._result.diagnostics.warning(message, self._source_line)

    def _error(self, message: str) -> None:
        self._result.diagnostics.error(message, self._source_line)

    # =========================================================================
    # Program Building
    # =========================================================================

    def _add_symbol(self, symbol: Symbol) -> None:
        """Register a symbol; names are unique across the whole program."""
        if symbol.name in self._program.symbols:
            self._error(f"Duplicate Symbol {symbol.name}")
            return

        self._section.symbols[symbol.name] = symbol
        self._program.symbols.add(symbol.name)

    def _add_line(self, opcode: str, params: list[str], comment: str | None = None) -> None:
        """Append an instruction to the current section."""
        self._section.lines.append(ProgramLine(
            opcode=opcode,
            params=list(params),
            source_line=self._source_line,
            section_offset=self._section_offset,
            comment=comment,
        ))
        self._section_offset += 1

    def _close_section(self) -> None:
        """
        Finish the current section.

        Non-empty sections join the program. The name is recorded so that
        later sections may require it; the implicit default section is only
        recorded when it held something.
        """
        section = self._section
        if not section.is_empty:
            self._program.sections.append(section)
            logger.debug("Closed %r", section)
        elif not self._section_declared:
            return

        if section.name not in self._result.section_names:
            self._result.section_names.append(section.name)

    # =========================================================================
    # Directives
    # =========================================================================

    def _parse_define(self, parsed: LineMatch) -> None:
        """define NAME VALUE"""
        if len(parsed.params) != 2:
            self._error("Incorrect parameter count for define directive")
            return

        name, value = parsed.params
        self._add_symbol(Symbol.constant(self._section, name, value))

    def _parse_alias(self, parsed: LineMatch) -> None:
        """alias NAME TARGET"""
        if len(parsed.params) != 2:
            self._error("Incorrect parameter count for alias directive")
            return

        name, target = parsed.params
        device = is_device_pin(target)

        if name in self._section.aliases or name in self._program.aliases:
            # Re-aliasing a device pin is how devices are rebound at runtime
            if device:
                self._warning(f"Duplicate direct device pin alias {name}")
            else:
                self._error(f"Duplicate alias {name}")
        else:
            self._program.aliases.add(name)

        if device:
            self._add_line("alias", [name, target], parsed.comment)
        elif not is_register(target):
            self._warning(f"Possible invalid alias target {target}")

        self._section.aliases[name] = target

    def _parse_section(self, parsed: LineMatch) -> None:
        """section NAME [requires A B ...]"""
        if not parsed.params:
            self._error("Missing section name for section directive")
            return

        name = parsed.params[0]
        required: list[str] = []

        self._close_section()

        if len(parsed.params) == 2:
            self._error("Invalid parameter count for section directive")
        elif len(parsed.params) > 2:
            if parsed.params[1].lower() != "requires":
                self._error("Invalid section definition")
            else:
                required = parsed.params[2:]
                known = {seen.lower() for seen in self._result.section_names}
                missing = next((r for r in required if r.lower() not in known), None)
                if missing is not None:
                    self._error(f"Missing section prerequisite {missing}")

        self._section = Section(name, required)
        self._section_declared = True
        self._section_offset = 0

    # =========================================================================
    # Code Lines
    # =========================================================================

    def _parse_code(self, parsed: LineMatch) -> None:
        """[label:] [opcode [params...]]"""
        if parsed.label:
            self._add_symbol(Symbol.label(self._section, parsed.label, self._section_offset))

        if parsed.opcode:
            self._add_line(parsed.opcode, parsed.params, parsed.comment)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(source: str) -> ParseResult:
    """
    Parse IC10 source text.

    Args:
        source: IC10 source text

    Returns:
        ParseResult with the program and all diagnostics
    """
    return Parser(source).parse()
