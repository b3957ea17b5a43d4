"""
IC10 Inliner Error Hierarchy
============================

This module defines the exception hierarchy for the IC10 inliner together
with the diagnostic collector used by the parse and assemble passes.

The passes themselves never raise for problems in the source program.
Every problem is recorded as a formatted diagnostic and the pass carries on,
so a single run reports as many problems as possible. Exceptions are only
raised at the boundary (the `Assembler` facade in strict mode, the CLI, and
instruction table registration).

Exception Hierarchy
-------------------
IC10Error (base)
├── AssemblerError - a pass finished with errors
│   ├── ParseFailedError - the parse pass recorded errors
│   └── AssemblyFailedError - the assemble pass recorded errors
└── InstructionTableError - malformed instruction signature registration

Diagnostic Format
-----------------
Every diagnostic is rendered as:
    <text> at line <N>
where N is the 0-based source line active when the problem was found.
"""

from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class IC10Error(Exception):
    """
    Base exception for all IC10 inliner errors.

    Callers can catch every inliner error with a single except clause:

        try:
            Assembler(strict=True).assemble_file("program.ic10")
        except IC10Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(IC10Error):
    """
    Raised when a pass finished with one or more errors.

    Attributes:
        message: Short description of the failure
        errors: The error diagnostics recorded by the pass
        warnings: The warning diagnostics recorded by the pass
    """

    def __init__(
        self,
        message: str,
        errors: Optional[list[str]] = None,
        warnings: Optional[list[str]] = None,
    ):
        self.message = message
        self.errors = list(errors or [])
        self.warnings = list(warnings or [])
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the message followed by one indented line per error.

        Example output:
            failed to parse program.ic10
              Duplicate Symbol loop at line 7
        """
        parts = [self.message]
        for error in self.errors:
            parts.append(f"  {error}")
        return "\n".join(parts)


class ParseFailedError(AssemblerError):
    """The parse pass recorded at least one error."""
    pass


class AssemblyFailedError(AssemblerError):
    """The assemble pass recorded at least one error."""
    pass


class InstructionTableError(IC10Error):
    """
    Malformed instruction signature.

    Raised when registering a mnemonic with an empty name or with a
    parameter constraint that is not a ParameterType value.
    """
    pass


# =============================================================================
# Diagnostic Collection
# =============================================================================

class Diagnostics:
    """
    Collects warnings and errors for batch reporting.

    Both passes record every problem here instead of raising, so that a
    single run surfaces as many problems as possible. Warnings and errors
    are kept as two separate ordered lists of already formatted strings.

    Example:
        diagnostics = Diagnostics()
        diagnostics.error("Duplicate Symbol loop", line=7)
        diagnostics.errors
        ['Duplicate Symbol loop at line 7']
    """

    def __init__(self) -> None:
        self.warnings: list[str] = []
        self.errors: list[str] = []

    @staticmethod
    def format(message: str, line: Optional[int]) -> str:
        """Render a message as '<text> at line <N>' (bare text if no line)."""
        if line is None:
            return message
        return f"{message} at line {line}"

    def warning(self, message: str, line: Optional[int] = None) -> None:
        """Record a warning."""
        self.warnings.append(self.format(message, line))

    def error(self, message: str, line: Optional[int] = None) -> None:
        """Record an error."""
        self.errors.append(self.format(message, line))

    def merge(self, other: "Diagnostics") -> None:
        """Append all diagnostics of another collector, preserving order."""
        self.warnings.extend(other.warnings)
        self.errors.extend(other.errors)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)
