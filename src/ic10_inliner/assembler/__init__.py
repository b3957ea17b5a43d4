"""
IC10 Two-Pass Inliner
=====================

This package turns human-authored IC10 source (directives, labels, comments)
into compact, fully resolved instruction text for the Stationeers IC10 chip,
whose programs are limited in line count.

Main Components
---------------
- **Assembler**: High-level interface running both passes
- **grammar**: Matches one source line into directive/label/opcode/params
- **Parser**: Parse pass; builds the Program model of sections and symbols
- **CodeGenerator**: Assemble pass; resolves and validates every instruction
- **InstructionTable**: IC10 mnemonic -> parameter constraint signatures
- **macros**: HASH("...") and STR("...") evaluation

Assembly Process
----------------
1. **Parse**:
   - Match every line against the line grammar
   - Register `define` constants, labels and `alias` names
   - Split the program into sections (`section NAME requires ...`)

2. **Assemble**:
   - Select sections (optionally filtered, requirements pulled in)
   - Assign each section its absolute offset
   - Substitute aliases and symbols, check parameter kinds, expand macros,
     rewrite relative branch targets
   - Emit one line per instruction

Example Usage
-------------
>>> from ic10_inliner.assembler import assemble
>>> result = assemble('''
... define Speed 0x10
... start: move r0 Speed
... j start
... ''')
>>> result.output_lines
['move r0 16', 'j 0']
"""

from ic10_inliner.assembler.assembler import Assembler, assemble, assemble_file, parse
from ic10_inliner.assembler.codegen import AssemblyOptions, AssemblyResult, CodeGenerator
from ic10_inliner.assembler.grammar import LineMatch, match_line
from ic10_inliner.assembler.macros import compute_hash, compute_string, expand_macro
from ic10_inliner.assembler.opcodes import (
    IC10_INSTRUCTIONS,
    InstructionSignature,
    InstructionTable,
    ParameterType,
)
from ic10_inliner.assembler.operands import Operand, OperandKind, classify_operand
from ic10_inliner.assembler.parser import ParseResult, Parser, parse_source
from ic10_inliner.assembler.program import (
    DEFAULT_SECTION,
    Program,
    ProgramLine,
    Section,
    Symbol,
    SymbolKind,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    "parse",
    # Grammar
    "LineMatch",
    "match_line",
    # Program model
    "DEFAULT_SECTION",
    "Program",
    "ProgramLine",
    "Section",
    "Symbol",
    "SymbolKind",
    # Parse pass
    "Parser",
    "ParseResult",
    "parse_source",
    # Assemble pass
    "AssemblyOptions",
    "AssemblyResult",
    "CodeGenerator",
    # Operands
    "Operand",
    "OperandKind",
    "classify_operand",
    # Instruction table
    "IC10_INSTRUCTIONS",
    "InstructionSignature",
    "InstructionTable",
    "ParameterType",
    # Macros
    "compute_hash",
    "compute_string",
    "expand_macro",
]
