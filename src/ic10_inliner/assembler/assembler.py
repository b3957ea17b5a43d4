"""
IC10 Inliner - Main Interface
=============================

This module provides the Assembler class, the primary interface for
minifying IC10 source. It runs the parse pass and the assemble pass and
writes the result beside the source file.

Example Usage
-------------
>>> from ic10_inliner.assembler import Assembler
>>>
>>> asm = Assembler()
>>> result = asm.assemble_string('''
... define Target 300
... alias sensor d0
... loop:
...     l r0 sensor Temperature
...     brlt r0 Target loop
...     yield
...     j loop
... ''')
>>> print(result.output)
alias sensor d0
l r0 d0 Temperature
brlt r0 300 -1
yield
j 1

Command-Line Usage
------------------
    $ ic10min program.ic10 -s main

Options:
    -c, --comments       Keep trailing comments in the output
    -s, --sections NAME  Only assemble NAME and the sections it requires
    -m, --keep-macros    Do not expand HASH()/STR() macros
    -o, --output FILE    Output file (default: program.min.ic10)
"""

from pathlib import Path
from typing import Optional
import logging

from ic10_inliner.assembler.codegen import (
    AssemblyOptions,
    AssemblyResult,
    CodeGenerator,
    SignatureLookup,
)
from ic10_inliner.assembler.parser import ParseResult, parse_source
from ic10_inliner.config import InlinerConfig
from ic10_inliner.errors import AssemblyFailedError, ParseFailedError

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main IC10 inliner class.

    Attributes:
        options: Options applied to every run
        config: Output naming and size advisories
        strict: Raise ParseFailedError / AssemblyFailedError instead of
            returning an invalid result
    """

    def __init__(self,
                 options: Optional[AssemblyOptions] = None,
                 config: Optional[InlinerConfig] = None,
                 instructions: Optional[SignatureLookup] = None,
                 strict: bool = False):
        """
        Initialize the assembler.

        Args:
            options: Assembly options (section filter, macros, comments)
            config: Tool configuration; defaults when None
            instructions: Instruction signature table; IC10 default when None
            strict: Raise on parse or assembly errors
        """
        self.options = options or AssemblyOptions()
        self.config = config or InlinerConfig()
        self.strict = strict
        self._codegen = CodeGenerator(instructions, self.config.size_warnings)
        self._parse_result: Optional[ParseResult] = None
        self._result: Optional[AssemblyResult] = None
        self._source_file: Optional[Path] = None

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def parse(self, source: str) -> ParseResult:
        """
        Run only the parse pass.

        Raises:
            ParseFailedError: In strict mode, if parsing recorded errors
        """
        parse_result = parse_source(source)
        self._parse_result = parse_result

        if self.strict and not parse_result.valid:
            raise ParseFailedError(
                f"failed to parse {self._source_name()}",
                errors=parse_result.errors,
                warnings=parse_result.warnings,
            )
        return parse_result

    def assemble_string(self, source: str) -> AssemblyResult:
        """
        Parse and assemble source text.

        Args:
            source: IC10 source text

        Returns:
            AssemblyResult (check `valid` unless in strict mode)

        Raises:
            ParseFailedError: In strict mode, if parsing recorded errors
            AssemblyFailedError: In strict mode, if assembly recorded errors
        """
        parse_result = self.parse(source)
        result = self._codegen.generate(parse_result, self.options)
        self._result = result

        logger.debug(
            "%s: %d sections, %d lines, %d warnings, %d errors",
            self._source_name(), len(result.final_sections),
            len(result.output_lines), len(result.warnings), len(result.errors),
        )

        if self.strict and not result.valid:
            raise AssemblyFailedError(
                f"failed to assemble {self._source_name()}",
                errors=result.errors,
                warnings=result.warnings,
            )
        return result

    def assemble_file(self, filepath: str | Path) -> AssemblyResult:
        """
        Parse and assemble a source file.

        Raises:
            FileNotFoundError: If the source file does not exist
        """
        filepath = Path(filepath)
        self._source_file = filepath
        logger.debug("Assembling %s", filepath)
        return self.assemble_string(filepath.read_text())

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_parse_result(self) -> Optional[ParseResult]:
        """ParseResult of the last run."""
        return self._parse_result

    def get_result(self) -> Optional[AssemblyResult]:
        """AssemblyResult of the last run."""
        return self._result

    def output_path_for(self, source: str | Path) -> Path:
        """Default output path for a source file (program.min.ic10)."""
        return self.config.output_path_for(source)

    def write_output(self, filepath: str | Path | None = None) -> Path:
        """
        Write the last result to disk.

        Args:
            filepath: Output path; derived from the source file when None

        Returns:
            The path written
        """
        if self._result is None:
            raise RuntimeError("nothing has been assembled yet")

        if filepath is None:
            if self._source_file is None:
                raise ValueError("no output path given and no source file to derive one from")
            filepath = self.output_path_for(self._source_file)

        filepath = Path(filepath)
        # newline="" keeps the os.linesep separators exactly as produced
        with open(filepath, "w", newline="") as f:
            f.write(self._result.output)

        logger.debug("Wrote %d lines to %s", len(self._result.output_lines), filepath)
        return filepath

    def _source_name(self) -> str:
        return str(self._source_file) if self._source_file else "<input>"


# =============================================================================
# Convenience Functions
# =============================================================================

def parse(source: str) -> ParseResult:
    """Run the parse pass over source text."""
    return parse_source(source)


def assemble(source: str, options: Optional[AssemblyOptions] = None) -> AssemblyResult:
    """
    Convenience function to parse and assemble source text.

    Args:
        source: IC10 source text
        options: Assembly options

    Returns:
        AssemblyResult
    """
    return Assembler(options).assemble_string(source)


def assemble_file(filepath: str | Path, options: Optional[AssemblyOptions] = None) -> AssemblyResult:
    """
    Convenience function to parse and assemble a file.

    Args:
        filepath: Path to the source file
        options: Assembly options

    Returns:
        AssemblyResult
    """
    return Assembler(options).assemble_file(filepath)
