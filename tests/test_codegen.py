# =============================================================================
# test_codegen.py - Assemble Pass Unit Tests
# =============================================================================
# Tests for the second pass: section placement, symbol and alias resolution,
# parameter checking, macro expansion and relative branch rewriting.
#
# Test coverage includes:
#   - Pass-through of plain instructions
#   - Label, constant and alias resolution and their scoping
#   - Section selection with transitive requirements
#   - Relative branch displacement
#   - Assembly errors and size advisories
# =============================================================================

import os

import pytest

from ic10_inliner.assembler.codegen import (
    AssemblyOptions,
    CodeGenerator,
    generate,
)
from ic10_inliner.assembler.macros import compute_hash
from ic10_inliner.assembler.opcodes import InstructionTable, ParameterType
from ic10_inliner.assembler.parser import parse_source


def assemble(source: str, **options):
    """Parse and assemble, passing keyword arguments as AssemblyOptions."""
    return generate(parse_source(source), AssemblyOptions(**options))


def lines(*text: str) -> str:
    return "\n".join(text)


# =============================================================================
# Pass-Through Tests
# =============================================================================

class TestPassThrough:
    """Programs without directives come out unchanged."""

    PLAIN = [
        "move r0 5",
        "add r1 r0 1",
        "mul r2 r1 2.5",
        "atan2 r4 r1 r2",
        "s d0 Setting r2",
        "l r3 d1 Temperature",
        "beq r0 r1 0",
        "sleep 1",
        "j 0",
        "yield",
    ]

    def test_line_count_preserved(self):
        result = assemble(lines(*self.PLAIN))
        assert result.valid, result.errors
        assert len(result.output_lines) == len(self.PLAIN)

    def test_idempotent(self):
        first = assemble(lines(*self.PLAIN))
        second = assemble(lines(*first.output_lines))
        assert first.output_lines == self.PLAIN
        assert second.output_lines == first.output_lines

    def test_comments_and_blank_lines_dropped(self):
        result = assemble("# setup\n\nmove r0 1 # one\n; done\nyield")
        assert result.output_lines == ["move r0 1", "yield"]

    def test_opcode_case_preserved(self):
        assert assemble("MOVE r0 1").output_lines == ["MOVE r0 1"]

    def test_mnemonic_with_digits(self):
        result = assemble("atan2 r0 r1 r2")
        assert result.valid, result.errors
        assert result.output_lines == ["atan2 r0 r1 r2"]

    def test_output_joined_with_platform_separator(self):
        result = assemble("yield\nhcf")
        assert result.output == f"yield{os.linesep}hcf"

    def test_empty_output(self):
        result = assemble("# nothing")
        assert result.valid
        assert result.output == ""


# =============================================================================
# Constant and Label Tests
# =============================================================================

class TestSymbols:
    """Test define and label substitution."""

    def test_define_substituted(self):
        result = assemble("define MaxTemp 300\nbgt r0 MaxTemp 0")
        assert result.output_lines == ["bgt r0 300 0"]

    @pytest.mark.parametrize("value,expected", [
        ("0xFF", "255"),
        ("$0F", "15"),
        ("-2", "-2"),
        ("0.5", "0.5"),
    ])
    def test_numeric_define_forms(self, value, expected):
        result = assemble(f"define X {value}\nmove r0 X")
        assert result.output_lines == [f"move r0 {expected}"]

    def test_text_define(self):
        """Non-numeric defines substitute their text."""
        result = assemble("define What Temperature\nl r0 d0 What")
        assert result.output_lines == ["l r0 d0 Temperature"]

    def test_hex_literal_parameter(self):
        assert assemble("move r0 0x10").output_lines == ["move r0 16"]

    def test_backward_label(self):
        result = assemble("start:\nyield\nj start")
        assert result.output_lines == ["yield", "j 0"]

    def test_forward_label(self):
        result = assemble("j end\nyield\nend:\nyield")
        assert result.output_lines == ["j 2", "yield", "yield"]

    def test_label_in_earlier_section(self):
        source = lines(
            "section init",
            "move r0 0",
            "start:",
            "yield",
            "section main requires init",
            "j start",
        )
        assert assemble(source).output_lines == ["move r0 0", "yield", "j 1"]

    def test_label_in_later_placed_section(self):
        """A label resolves to its in-section offset plus the section offset."""
        source = lines(
            "yield",
            "yield",
            "section main",
            "nop: move r0 1",
            "loop:",
            "yield",
            "j loop",
        )
        result = assemble(source)
        assert result.output_lines[-1] == "j 3"
        assert result.final_sections[1].offset == 2

    def test_unresolved_symbol(self):
        result = assemble("move r0 Missing")
        assert result.errors == ["Unable to resolve symbol Missing at line 0"]
        assert result.output_lines == ["move r0 Missing"]

    def test_unknown_allowed_for_logic_types(self):
        result = assemble("l r0 d0 Pressure")
        assert result.valid
        assert result.output_lines == ["l r0 d0 Pressure"]

    def test_use_before_define(self):
        source = lines(
            "section a",
            "j target",
            "section b requires a",
            "target: yield",
        )
        result = assemble(source)
        assert result.errors == [
            "Use before define of symbol target at line 1",
            "Unable to resolve symbol target at line 1",
        ]

    def test_not_in_included_section(self):
        source = lines(
            "section a",
            "yield",
            "section b",
            "target: yield",
            "section c requires a",
            "j target",
        )
        result = assemble(source, include_sections=["c"])
        assert result.errors == [
            "target not defined in included section at line 5",
            "Unable to resolve symbol target at line 5",
        ]


# =============================================================================
# Alias Tests
# =============================================================================

class TestAliases:
    """Test alias substitution and scoping."""

    def test_register_alias(self):
        result = assemble("alias counter r5\nadd counter counter 1")
        assert result.output_lines == ["add r5 r5 1"]

    def test_device_alias_emitted_and_substituted(self):
        result = assemble("alias sensor d0\nl r0 sensor Temperature")
        assert result.output_lines == ["alias sensor d0", "l r0 d0 Temperature"]

    def test_alias_line_not_substituted(self):
        """The name in an alias instruction is never replaced."""
        result = assemble("define sensor 5\nalias sensor d0")
        assert result.valid
        assert result.output_lines == ["alias sensor d0"]

    def test_alias_visible_in_later_section(self):
        result = assemble("alias counter r5\nsection main\nmove counter 1")
        assert result.output_lines == ["move r5 1"]

    def test_alias_not_visible_in_earlier_section(self):
        source = lines(
            "section a",
            "move counter 1",
            "section b",
            "alias counter r5",
        )
        result = assemble(source)
        assert result.errors == ["Unable to resolve symbol counter at line 1"]

    def test_first_placed_scope_wins(self):
        """Scopes are searched in placement order."""
        source = lines(
            "alias vent d0",
            "section main",
            "alias vent d1",
            "l r0 vent Setting",
        )
        result = assemble(source)
        assert result.warnings == ["Duplicate direct device pin alias vent at line 2"]
        assert result.output_lines[-1] == "l r0 d0 Setting"

    def test_same_section_rebinding(self):
        result = assemble("alias vent d0\nalias vent d1\nl r0 vent Setting")
        assert result.output_lines[-1] == "l r0 d1 Setting"


# =============================================================================
# Section Selection Tests
# =============================================================================

SECTIONED = lines(
    "section init",
    "move r0 0",
    "section other",
    "move r1 1",
    "section main requires init",
    "loop:",
    "yield",
    "j loop",
)


class TestSectionSelection:
    """Test the include filter and offset assignment."""

    def test_all_sections_by_default(self):
        result = assemble(SECTIONED)
        assert [s.name for s in result.final_sections] == ["init", "other", "main"]
        assert [s.offset for s in result.final_sections] == [0, 1, 2]
        assert result.output_lines[-1] == "j 2"

    def test_requirements_pulled_in(self):
        result = assemble(SECTIONED, include_sections=["main"])
        assert [s.name for s in result.final_sections] == ["init", "main"]
        assert result.output_lines == ["move r0 0", "yield", "j 1"]

    def test_filter_case_insensitive(self):
        result = assemble(SECTIONED, include_sections=["MAIN"])
        assert [s.name for s in result.final_sections] == ["init", "main"]

    def test_program_order_not_filter_order(self):
        result = assemble(SECTIONED, include_sections=["main", "other"])
        assert [s.name for s in result.final_sections] == ["init", "other", "main"]

    def test_transitive_requirements(self):
        source = lines(
            "section a",
            "move r0 1",
            "section b requires a",
            "move r1 2",
            "section c requires b",
            "move r2 3",
            "section d",
            "move r3 4",
        )
        result = assemble(source, include_sections=["c"])
        assert result.output_lines == ["move r0 1", "move r1 2", "move r2 3"]

    def test_unknown_filter_name(self):
        result = assemble(SECTIONED, include_sections=["nope"])
        assert result.valid
        assert result.output_lines == []

    def test_default_section_by_name(self):
        result = assemble("yield\nsection main\nhcf", include_sections=["(default)"])
        assert result.output_lines == ["yield"]

    def test_select_sections(self):
        parse_result = parse_source(SECTIONED)
        selected = CodeGenerator.select_sections(parse_result, ["main"])
        assert [s.name for s in selected] == ["init", "main"]
        assert CodeGenerator.select_sections(parse_result, None) == parse_result.program.sections


# =============================================================================
# Relative Branch Tests
# =============================================================================

class TestRelativeBranches:
    """Branch-relative targets become displacements."""

    def test_backward(self):
        result = assemble("start:\nyield\nmove r0 1\nbrgtz r0 start")
        assert result.output_lines[-1] == "brgtz r0 -2"

    def test_forward(self):
        result = assemble("breqz r0 done\nyield\ndone:\nyield")
        assert result.output_lines[0] == "breqz r0 2"

    def test_across_sections(self):
        source = lines(
            "section init",
            "yield",
            "top: move r0 0",
            "section main requires init",
            "yield",
            "brlt r0 10 top",
        )
        result = assemble(source)
        assert result.output_lines[-1] == "brlt r0 10 -2"

    def test_numeric_target_is_absolute(self):
        result = assemble("yield\njr 3")
        assert result.output_lines[-1] == "jr 2"

    def test_register_target_kept(self):
        result = assemble("jr r5")
        assert result.valid
        assert result.output_lines == ["jr r5"]

    def test_absolute_branch_not_rewritten(self):
        result = assemble("yield\nloop:\nbeq r0 r1 loop")
        assert result.output_lines[-1] == "beq r0 r1 1"

    def test_invalid_destination(self):
        result = assemble("jr nowhere")
        assert result.errors == [
            "Unable to resolve symbol nowhere at line 0",
            "Invalid destination nowhere for relative branch at line 0",
        ]

    def test_fractional_destination(self):
        result = assemble("jr 1.5")
        assert result.errors == ["Invalid destination 1.5 for relative branch at line 0"]


# =============================================================================
# Macro Tests
# =============================================================================

class TestMacros:
    """Test HASH()/STR() expansion."""

    def test_hash_expanded(self):
        result = assemble('move r0 HASH("abc")')
        assert result.output_lines == ["move r0 891568578"]

    def test_str_expanded(self):
        result = assemble('move r0 STR("abc")')
        assert result.output_lines == ["move r0 6382179"]

    def test_macro_in_define(self):
        result = assemble('define Door HASH("abc")\nmove r0 Door')
        assert result.output_lines == ["move r0 891568578"]

    def test_macro_with_spaces(self):
        result = assemble('sb HASH("Wall Light") On 1')
        assert result.output_lines == [f"sb {compute_hash('Wall Light')} On 1"]

    def test_keep_macros(self):
        result = assemble('define Door HASH("abc")\nmove r0 Door', keep_macros=True)
        assert result.output_lines == ['move r0 HASH("abc")']


# =============================================================================
# Comment Output Tests
# =============================================================================

class TestComments:
    """Test the include-comments option."""

    def test_comments_dropped_by_default(self):
        assert assemble("move r0 1 # reset").output_lines == ["move r0 1"]

    def test_comments_appended(self):
        result = assemble("move r0 1 # reset\nyield", include_comments=True)
        assert result.output_lines == ["move r0 1 # reset", "yield"]

    def test_device_alias_comment(self):
        result = assemble("alias vent d0 ; gas", include_comments=True)
        assert result.output_lines == ["alias vent d0 # gas"]


# =============================================================================
# Assembly Error Tests
# =============================================================================

class TestErrors:
    """Test assemble-time diagnostics."""

    def test_invalid_parse_short_circuits(self):
        result = assemble("define X\nyield")
        assert not result.valid
        assert result.errors == [
            "Incorrect parameter count for define directive at line 0",
            "Unable to assemble due to parse errors",
        ]
        assert result.output_lines == []
        assert result.final_sections == []

    def test_parse_warnings_carried(self):
        result = assemble("alias t Temperature\nyield")
        assert result.valid
        assert result.warnings == ["Possible invalid alias target Temperature at line 0"]

    def test_unknown_mnemonic(self):
        result = assemble("frob r0\nyield")
        assert result.errors == ["Unrecognized mnemonic frob at line 0"]
        assert result.output_lines == ["yield"]

    def test_wrong_parameter_count(self):
        result = assemble("move r0")
        assert result.errors == [
            "Invalid number of parameters for mnemonic move: expected 2, got 1 at line 0"
        ]
        assert result.output_lines == []

    @pytest.mark.parametrize("source", ["move d0 1", "l r0 r1 Temperature", "move r0 d0"])
    def test_type_mismatch(self, source):
        result = assemble(source)
        assert result.errors == ["Parameter type mismatch at line 0"]
        assert result.output_lines == [source]

    def test_errors_accumulate(self):
        result = assemble("frob\nmove r0\nmove d0 1")
        assert len(result.errors) == 3
        assert [e.rsplit(" ", 1)[-1] for e in result.errors] == ["0", "1", "2"]

    def test_custom_instruction_table(self):
        generator = CodeGenerator(InstructionTable({"nop": []}))
        result = generator.generate(parse_source("nop\nyield"))
        assert result.output_lines == ["nop"]
        assert result.errors == ["Unrecognized mnemonic yield at line 1"]

    def test_unsubstituted_symbol_not_type_checked(self):
        """A define named by a NO_SUBSTITUTION parameter is kept as written."""
        table = InstructionTable({
            "tag": [ParameterType.DEVICE | ParameterType.NO_SUBSTITUTION],
        })
        result = CodeGenerator(table).generate(parse_source("define Level 5\ntag Level"))
        assert result.valid, result.errors
        assert result.output_lines == ["tag Level"]


# =============================================================================
# Size Advisory Tests
# =============================================================================

class TestSizeWarnings:
    """Test the line-count advisories."""

    @staticmethod
    def program(count: int) -> str:
        return "\n".join(["yield"] * count)

    @pytest.mark.parametrize("count", [128, 0, 1])
    def test_below_cap(self, count):
        assert assemble(self.program(count)).warnings == []

    def test_vanilla_cap(self):
        result = assemble(self.program(129))
        assert result.valid
        assert result.warnings == ["Exceeded vanilla IC10 LoC cap at line 128"]

    def test_vanilla_cap_fires_once(self):
        for count in (130, 511):
            result = assemble(self.program(count))
            assert result.warnings == ["Exceeded vanilla IC10 LoC cap at line 128"]

    @pytest.mark.parametrize("count", [512, 513])
    def test_modded_cap(self, count):
        result = assemble(self.program(count))
        assert result.warnings == [
            "Exceeded vanilla IC10 LoC cap at line 128",
            "Exceeded modded More Lines of Code LoC cap at line 511",
        ]

    def test_custom_thresholds(self):
        generator = CodeGenerator(size_warnings=((2, "Too long"),))
        result = generator.generate(parse_source(self.program(3)))
        assert result.warnings == ["Too long at line 1"]
