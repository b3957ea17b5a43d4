"""
IC10 Assemble Pass
==================

This module implements the second pass: it takes a valid ParseResult and
produces the final, fully resolved instruction lines.

Section Placement
-----------------
Without a section filter every section is assembled in program order. With
a filter, the named sections plus everything they (transitively) require
are assembled, still in program order. Each placed section gets an
`offset`: the number of lines placed before it.

Per-Line Resolution
-------------------
For every instruction:

1. Look up the mnemonic; unknown mnemonics and wrong parameter counts are
   reported and the line is skipped.
2. For each parameter and its constraint:
   a. substitute aliases (unless NO_SUBSTITUTION)
   b. classify the token (see `operands.classify_operand`), replacing hex
      literals and symbols by their values
   c. check the classification against the constraint
   d. expand HASH()/STR() macros (unless macros are kept)
   e. rewrite BRANCH_RELATIVE targets from absolute to relative
3. Emit "opcode param param ...".

Scoping
-------
Aliases and symbols are visible from the section that defines them and from
every section placed after it. Scopes are searched in placement order and
the first match wins.
"""

from dataclasses import dataclass, field
from typing import Optional, Protocol
import logging
import os

from ic10_inliner.assembler.grammar import is_macro, is_register, parse_int
from ic10_inliner.assembler.macros import expand_macro
from ic10_inliner.assembler.opcodes import (
    InstructionSignature,
    InstructionTable,
    ParameterType,
)
from ic10_inliner.assembler.operands import Operand, classify_operand
from ic10_inliner.assembler.parser import ParseResult
from ic10_inliner.assembler.program import ProgramLine, Section, Symbol
from ic10_inliner.config import DEFAULT_SIZE_WARNINGS
from ic10_inliner.errors import Diagnostics

logger = logging.getLogger(__name__)


class SignatureLookup(Protocol):
    """Anything that can look up instruction signatures by mnemonic."""

    def lookup(self, mnemonic: str) -> Optional[InstructionSignature]:
        ...


# =============================================================================
# Options and Result
# =============================================================================

@dataclass
class AssemblyOptions:
    """
    Per-run assembly options.

    Attributes:
        include_sections: Only assemble these sections (and what they
            require); empty means every section
        keep_macros: Leave HASH()/STR() calls unexpanded
        include_comments: Append each line's trailing comment to the output
    """
    include_sections: list[str] = field(default_factory=list)
    keep_macros: bool = False
    include_comments: bool = False


@dataclass
class AssemblyResult:
    """
    Outcome of the assemble pass.

    Parse diagnostics are carried over so the result holds every message
    for the run.

    Attributes:
        output_lines: Resolved instruction lines
        diagnostics: Parse and assembly warnings and errors
        final_sections: The placed sections, in placement order
    """
    output_lines: list[str] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    final_sections: list[Section] = field(default_factory=list)

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

    @property
    def output(self) -> str:
        """Output lines joined with the platform line separator."""
        return os.linesep.join(self.output_lines)


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Turns a parsed program into resolved IC10 instructions.

    Usage:
        generator = CodeGenerator()
        result = generator.generate(parse_result, AssemblyOptions())
        print(result.output)

    Attributes:
        instructions: Signature table used to validate instructions
        size_warnings: (line count, message) advisories
    """

    def __init__(
        self,
        instructions: Optional[SignatureLookup] = None,
        size_warnings: tuple[tuple[int, str], ...] = DEFAULT_SIZE_WARNINGS,
    ):
        self.instructions = instructions if instructions is not None else InstructionTable.default()
        self.size_warnings = size_warnings

        # Per-run state
        self._program_symbols: set[str] = set()
        self._sections: list[Section] = []
        self._options = AssemblyOptions()
        self._result = AssemblyResult()
        self._scopes: list[Section] = []
        self._source_line = 0

    # =========================================================================
    # Entry Point
    # =========================================================================

    def generate(
        self,
        parse_result: ParseResult,
        options: Optional[AssemblyOptions] = None,
    ) -> AssemblyResult:
        """
        Assemble a parsed program.

        Args:
            parse_result: Result of the parse pass
            options: Assembly options (defaults if None)

        Returns:
            AssemblyResult with output lines and all diagnostics
        """
        self._program_symbols = parse_result.program.symbols
        self._options = options or AssemblyOptions()
        self._result = AssemblyResult()
        self._result.diagnostics.merge(parse_result.diagnostics)
        self._sections = []
        self._scopes = []
        self._source_line = 0

        if not parse_result.valid:
            self._result.diagnostics.error("Unable to assemble due to parse errors")
            return self._result

        sections = self.select_sections(parse_result, self._options.include_sections)
        self._sections = sections

        offset = 0
        for section in sections:
            section.offset = offset
            offset += section.size
            self._scopes.append(section)
            logger.debug("Placed %r", section)

            for line in section.lines:
                self._assemble_line(section, line)

        self._result.final_sections = sections

        logger.debug(
            "Assembled %d sections into %d lines, %d errors",
            len(sections), len(self._result.output_lines),
            self._result.diagnostics.error_count(),
        )
        return self._result

    # =========================================================================
    # Section Selection
    # =========================================================================

    @staticmethod
    def select_sections(parse_result: ParseResult, include: Optional[list[str]]) -> list[Section]:
        """
        Choose the sections to assemble.

        Args:
            parse_result: Result of the parse pass
            include: Section names to assemble; empty or None means all

        Returns:
            The selected sections in program order
        """
        sections = parse_result.program.sections
        if not include:
            return list(sections)

        # Close the filter over `requires`, by case-insensitive name
        wanted = {name.lower() for name in include}
        pending = list(wanted)
        while pending:
            name = pending.pop()
            for section in sections:
                if section.name.lower() != name:
                    continue
                for required in section.required_sections:
                    key = required.lower()
                    if key not in wanted:
                        wanted.add(key)
                        pending.append(key)

        return [section for section in sections if section.name.lower() in wanted]

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def _warning(self, message: str) -> None:
        self._result.diagnostics.warning(message, self._source_line)

    def _error(self, message: str) -> None:
        self._result.diagnostics.error(message, self._source_line)

    # =========================================================================
    # Scoped Lookup
    # =========================================================================

    def _resolve_alias(self, name: str) -> str:
        """Target of the first visible alias called `name`, else `name`."""
        for scope in self._scopes:
            target = scope.aliases.get(name)
            if target is not None:
                return target
        return name

    def _resolve_symbol(self, name: str, allow_unknown: bool) -> Optional[Symbol]:
        """
        First visible symbol called `name`.

        A name defined somewhere in the program but not visible here gets a
        more specific error explaining why.
        """
        for scope in self._scopes:
            symbol = scope.symbols.get(name)
            if symbol is not None:
                return symbol

        if name in self._program_symbols:
            if any(name in section.symbols for section in self._sections):
                self._error(f"Use before define of symbol {name}")
            else:
                self._error(f"{name} not defined in included section")

        if not allow_unknown:
            self._error(f"Unable to resolve symbol {name}")

        return None

    # =========================================================================
    # Line Assembly
    # =========================================================================

    def _assemble_line(self, section: Section, line: ProgramLine) -> None:
        """Resolve one instruction and append it to the output."""
        self._source_line = line.source_line

        signature = self.instructions.lookup(line.opcode)
        if signature is None:
            self._error(f"Unrecognized mnemonic {line.opcode}")
            return

        if signature.arity != len(line.params):
            self._error(
                f"Invalid number of parameters for mnemonic {signature.mnemonic}: "
                f"expected {signature.arity}, got {len(line.params)}"
            )
            return

        parts = [line.opcode]
        for param, constraint in zip(line.params, signature.parameters):
            parts.append(self._assemble_param(section, line, param, constraint))

        text = " ".join(parts)
        if self._options.include_comments and line.comment:
            text = f"{text} # {line.comment}"

        self._emit(text)

    def _assemble_param(
        self,
        section: Section,
        line: ProgramLine,
        param: str,
        constraint: ParameterType,
    ) -> str:
        """Resolve one parameter against its constraint."""
        substitute = not (constraint & ParameterType.NO_SUBSTITUTION)
        allow_unknown = bool(constraint & ParameterType.ALLOW_UNKNOWN_SYMBOL)

        if substitute:
            param = self._resolve_alias(param)

        operand: Operand = classify_operand(
            param,
            lambda name: self._resolve_symbol(name, allow_unknown),
            substitute=substitute,
        )
        text = operand.text

        if not operand.satisfies(constraint):
            self._error("Parameter type mismatch")

        if not self._options.keep_macros and is_macro(text):
            text = expand_macro(text)

        if constraint & ParameterType.BRANCH_RELATIVE:
            address = parse_int(text)
            if address is not None:
                text = str(address - (line.section_offset + section.offset))
            elif not is_register(text):
                self._error(f"Invalid destination {text} for relative branch")

        return text

    def _emit(self, text: str) -> None:
        """Append an output line and raise the size advisories."""
        self._result.output_lines.append(text)

        count = len(self._result.output_lines)
        for threshold, message in self.size_warnings:
            if count == threshold:
                self._warning(message)


# =============================================================================
# Convenience Functions
# =============================================================================

def generate(
    parse_result: ParseResult,
    options: Optional[AssemblyOptions] = None,
    instructions: Optional[SignatureLookup] = None,
) -> AssemblyResult:
    """
    Assemble a parsed program with the default instruction table.

    Args:
        parse_result: Result of the parse pass
        options: Assembly options
        instructions: Signature table (IC10 default if None)

    Returns:
        AssemblyResult
    """
    return CodeGenerator(instructions).generate(parse_result, options)
