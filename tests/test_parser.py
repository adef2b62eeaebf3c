"""
Unit Tests for Instruction Records
==================================

Tests for building typed, addressed records from scanned lines:
operand count checking, lui's implied source register, constant parsing
and label names.
"""

import dataclasses

import pytest
from ktc32_sdk.assembler.lexer import Lexer, scan_line
from ktc32_sdk.assembler.opcodes import InstructionFormat
from ktc32_sdk.assembler.parser import (
    ConstWord,
    I16Instruction,
    I32Instruction,
    JInstruction,
    Record,
    RInstruction,
    parse_label,
    parse_statement,
)
from ktc32_sdk.errors import AssemblySyntaxError


def record(text: str, address: int = 0):
    return parse_statement(scan_line(text, 1, "<test>"), address)


# =============================================================================
# Record Construction
# =============================================================================

class TestRecordTypes:
    """Each format builds its own record class."""

    def test_r_format(self):
        rec = record("mov r1, r2")
        assert isinstance(rec, RInstruction)
        assert (rec.mnemonic, rec.rd, rec.rs) == ("mov", "r1", "r2")
        assert rec.format == InstructionFormat.R
        assert rec.size == 2

    def test_i16_format(self):
        rec = record("slli r3, 4")
        assert isinstance(rec, I16Instruction)
        assert (rec.rd, rec.imm) == ("r3", "4")
        assert rec.size == 2

    def test_i32_format(self):
        rec = record("addi r1, r2, -4")
        assert isinstance(rec, I32Instruction)
        assert (rec.rd, rec.rs, rec.imm) == ("r1", "r2", "-4")
        assert rec.size == 4

    def test_base_record_is_abstract(self):
        """Only concrete formats know their size."""
        with pytest.raises(TypeError):
            Record(0, scan_line("mov r1, r2", 1))

    def test_lui_implies_r0(self):
        """lui is written with two operands; its rs is always r0."""
        rec = record("lui r5, 0x1234")
        assert isinstance(rec, I32Instruction)
        assert (rec.rd, rec.rs, rec.imm) == ("r5", "r0", "0x1234")

    def test_j_format(self):
        rec = record("jal ra, target")
        assert isinstance(rec, JInstruction)
        assert (rec.rd, rec.imm) == ("ra", "target")
        assert rec.size == 4

    def test_constant(self):
        rec = record("0xdeadbeef")
        assert isinstance(rec, ConstWord)
        assert rec.value == 0xDEADBEEF
        assert rec.size == 4

    def test_address_and_end_address(self):
        rec = record("addi r1, r1, 1", address=0x102)
        assert rec.address == 0x102
        assert rec.end_address == 0x106

    def test_records_are_immutable(self):
        rec = record("mov r1, r2")
        with pytest.raises(dataclasses.FrozenInstanceError):
            rec.address = 4

    def test_record_keeps_source(self):
        rec = record("mov r1, r2")
        assert rec.line == 1
        assert rec.text == "mov r1, r2"
        assert rec.location.filename == "<test>"

    def test_label_line_is_not_a_statement(self):
        with pytest.raises(ValueError):
            parse_statement(scan_line("loop:", 1), 0)


# =============================================================================
# Operand Count
# =============================================================================

class TestArity:
    """Wrong token counts are syntax errors."""

    @pytest.mark.parametrize("text", [
        "mov r1",
        "mov r1, r2, r3",
        "slli r1",
        "addi r1, r2",
        "lui r1, r0, 5",
        "jal r0",
        "jal r0, r1, 4",
    ])
    def test_wrong_operand_count(self, text):
        with pytest.raises(AssemblySyntaxError):
            record(text)

    def test_form_feed_joins_statements(self):
        line = next(Lexer("mov r1, r2\x0cmov r1, r2").tokenize())
        with pytest.raises(AssemblySyntaxError) as exc_info:
            parse_statement(line, 0)
        assert exc_info.value.hint == "'mov' takes 2 operands, got 5"

    def test_error_lists_tokens(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            record("addi r1, r1")
        assert "syntax error ['addi', 'r1', 'r1']" in str(exc_info.value)
        assert exc_info.value.tokens == ("addi", "r1", "r1")
        assert exc_info.value.hint == "'addi' takes 3 operands, got 2"


# =============================================================================
# Constants and Labels
# =============================================================================

class TestConstants:
    """Raw constant parsing."""

    def test_short_constant(self):
        assert record("0x2a").value == 0x2A

    def test_max_constant(self):
        assert record("0xffffffff").value == 0xFFFFFFFF

    @pytest.mark.parametrize("text", ["0x", "0xzz", "0x1_0", "0x100000000"])
    def test_invalid_constant(self, text):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            record(text)
        assert "invalid constant" in str(exc_info.value)


class TestLabels:
    """Label name extraction."""

    def test_label_name(self):
        assert parse_label(scan_line("loop:", 1)) == "loop"

    def test_empty_label(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            parse_label(scan_line(":", 1))
        assert "label has no name" in str(exc_info.value)
