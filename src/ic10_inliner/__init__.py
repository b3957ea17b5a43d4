"""
IC10 Inliner - Minifier for Stationeers IC10 Programs
=====================================================

This package assembles readable IC10 source into the compact form run by the
Stationeers integrated circuit, whose programs are capped in line count and
source size.

Source programs may use named constants (`define`), register and device
aliases (`alias`), labels, comments, inline HASH("...")/STR("...") macros and
sections with prerequisites. The inliner resolves all of these into plain
instructions: labels become line numbers, relative branches become
displacements and constants become literal values.

Main Components
---------------
- **assembler**: Parse and assemble passes, instruction table, macros
- **config**: Output naming and size advisories
- **errors**: Exception hierarchy and diagnostic collection
- **cli**: The `ic10min` command

Quick Start
-----------
Minify a string:
    >>> from ic10_inliner import Assembler
    >>> result = Assembler().assemble_string("alias x r0\\nadd x x 1")
    >>> result.output
    'add r0 r0 1'

Or use the command-line tool:
    $ ic10min program.ic10            # writes program.min.ic10
    $ ic10min program.ic10 -s main    # only 'main' and what it requires

Version History
---------------
1.0.0 - Initial release
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from ic10_inliner.assembler import (
    Assembler,
    AssemblyOptions,
    AssemblyResult,
    InstructionTable,
    ParameterType,
    ParseResult,
    assemble,
    assemble_file,
    parse,
)
from ic10_inliner.config import InlinerConfig
from ic10_inliner.errors import (
    AssemblerError,
    AssemblyFailedError,
    Diagnostics,
    IC10Error,
    InstructionTableError,
    ParseFailedError,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "AssemblyOptions",
    "AssemblyResult",
    "ParseResult",
    "InstructionTable",
    "ParameterType",
    "assemble",
    "assemble_file",
    "parse",
    # Configuration
    "InlinerConfig",
    # Exception hierarchy
    "IC10Error",
    "AssemblerError",
    "ParseFailedError",
    "AssemblyFailedError",
    "InstructionTableError",
    "Diagnostics",
]
