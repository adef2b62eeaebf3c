"""
Unit Tests for the Instruction Set and Register Tables
======================================================

These tables are the decoder contract of the KTC32, so the tests pin
opcode values, formats and operand counts explicitly.
"""

import pytest
from ktc32_sdk.assembler.opcodes import (
    CONST_SIZE,
    MNEMONICS,
    OPCODE_TABLE,
    InstructionFormat,
    get_instruction_by_opcode,
    get_instruction_info,
    get_mnemonics_for_format,
    is_valid_instruction,
)
from ktc32_sdk.assembler.registers import (
    REGISTER_ALIASES,
    lookup_register,
    register_name,
    resolve_register,
)
from ktc32_sdk.errors import SourceLocation, UnknownRegisterError


# =============================================================================
# Opcode Table
# =============================================================================

class TestOpcodeTable:
    """Opcode assignments per format group."""

    def test_r_format_opcodes(self):
        expected = ["mov", "add", "sub", "and", "or", "xor",
                    "sll", "srl", "sra", "slt", "sltu"]
        assert get_mnemonics_for_format(InstructionFormat.R) == expected
        for opcode, mnemonic in enumerate(expected):
            assert OPCODE_TABLE[mnemonic].opcode == opcode

    def test_i16_format_opcodes(self):
        assert OPCODE_TABLE["slli"].opcode == 0b010000
        assert OPCODE_TABLE["srli"].opcode == 0b010001
        assert OPCODE_TABLE["srai"].opcode == 0b010010

    def test_i32_format_opcodes(self):
        expected = ["addi", "andi", "ori", "xori",
                    "beq", "bnq", "blt", "bge", "bltu", "bgeu",
                    "jalr", "lb", "lh", "lbu", "lhu", "lw",
                    "lui", "sb", "sh", "sw"]
        assert get_mnemonics_for_format(InstructionFormat.I32) == expected
        for offset, mnemonic in enumerate(expected):
            assert OPCODE_TABLE[mnemonic].opcode == 0b100000 + offset

    def test_jal_opcode(self):
        info = OPCODE_TABLE["jal"]
        assert info.opcode == 0b111111
        assert info.format == InstructionFormat.J

    def test_opcodes_unique(self):
        opcodes = [info.opcode for info in OPCODE_TABLE.values()]
        assert len(opcodes) == len(set(opcodes))

    def test_mnemonic_count(self):
        assert len(MNEMONICS) == 35

    def test_token_counts(self):
        assert OPCODE_TABLE["mov"].token_count == 3
        assert OPCODE_TABLE["slli"].token_count == 3
        assert OPCODE_TABLE["addi"].token_count == 4
        assert OPCODE_TABLE["lui"].token_count == 3
        assert OPCODE_TABLE["jal"].token_count == 3

    def test_only_lui_implies_rs(self):
        implied = [m for m, info in OPCODE_TABLE.items() if info.implied_rs]
        assert implied == ["lui"]
        assert OPCODE_TABLE["lui"].implied_rs == "r0"


class TestFormats:
    """Format widths."""

    def test_sizes(self):
        assert InstructionFormat.R.size == 2
        assert InstructionFormat.I16.size == 2
        assert InstructionFormat.I32.size == 4
        assert InstructionFormat.J.size == 4
        assert CONST_SIZE == 4

    def test_widths(self):
        assert InstructionFormat.R.width == 16
        assert InstructionFormat.J.width == 32


class TestLookups:
    """Lookup helpers."""

    def test_case_insensitive(self):
        assert get_instruction_info("ADDI") is OPCODE_TABLE["addi"]
        assert is_valid_instruction("Jal")

    def test_unknown(self):
        assert get_instruction_info("nop") is None
        assert not is_valid_instruction("nop")

    def test_by_opcode(self):
        assert get_instruction_by_opcode(0b110000).mnemonic == "lui"

    def test_by_opcode_ignores_high_bits(self):
        assert get_instruction_by_opcode(0xFFC0 | 0b000001).mnemonic == "add"

    def test_unassigned_opcode(self):
        assert get_instruction_by_opcode(0b001011) is None


# =============================================================================
# Registers
# =============================================================================

class TestRegisters:
    """Register names and aliases."""

    @pytest.mark.parametrize("index", [0, 1, 15, 31])
    def test_numeric_names(self, index):
        assert lookup_register(f"r{index}") == index

    @pytest.mark.parametrize("alias,index", [
        ("zero", 0), ("ra", 1), ("gp", 2), ("sp", 3), ("fp", 4),
        ("a0", 5), ("a1", 6), ("a2", 7), ("a3", 8),
        ("t0", 9), ("t1", 10), ("t2", 11), ("t3", 12), ("t4", 13),
        ("flag", 31),
    ])
    def test_aliases(self, alias, index):
        assert lookup_register(alias) == index

    def test_alias_count(self):
        assert len(REGISTER_ALIASES) == 15

    def test_case_insensitive(self):
        assert lookup_register("SP") == 3
        assert lookup_register("R7") == 7

    @pytest.mark.parametrize("name", ["r32", "t5", "a4", "x1", "r", "r-1"])
    def test_unknown(self, name):
        assert lookup_register(name) is None

    def test_resolve_raises(self):
        location = SourceLocation("prog.asm", 3, 5)
        with pytest.raises(UnknownRegisterError) as exc_info:
            resolve_register("r32", location=location, source_line="mov r32, r1")
        assert exc_info.value.register == "r32"
        assert str(exc_info.value).startswith("prog.asm:3:5: error: unknown register 'r32'")

    def test_register_name(self):
        assert register_name(0) == "r0"
        assert register_name(31) == "r31"

    def test_register_name_out_of_range(self):
        with pytest.raises(ValueError):
            register_name(32)
