"""
Unit Tests for the Instruction Encoder
======================================

Bit-exact checks of the four KTC32 word layouts and the little-endian
byte order of encoded words.
"""

import pytest
from ktc32_sdk.assembler.encoder import (
    Word,
    decode_fields,
    encode,
    encode_i16,
    encode_i32,
    encode_j,
    encode_r,
)
from ktc32_sdk.assembler.opcodes import InstructionFormat


# =============================================================================
# Bit Layout Tests
# =============================================================================

class TestBitLayouts:
    """Field placement for each format."""

    def test_r_format(self):
        # mov r1, r2: 0x40 | 0x1000
        assert encode_r(0, 1, 2) == 0x1040

    def test_r_format_add(self):
        assert encode_r(1, 3, 4) == 0x20C1

    def test_i16_format(self):
        # slli r1, 3
        assert encode_i16(0b010000, 1, 3) == 0x1850

    def test_i16_max_immediate(self):
        assert encode_i16(0b010000, 1, 31) == 0xF850

    def test_i32_negative_immediate(self):
        # addi r1, r2, -4
        assert encode_i32(0b100000, 1, 2, -4) == 0xFFFC1060

    def test_i32_lui(self):
        # lui r1, 0x1234
        assert encode_i32(0b110000, 1, 0, 0x1234) == 0x12340070

    def test_j_negative_offset(self):
        """A backward jump stores a negative 21-bit field."""
        value = encode_j(0b111111, 0, -4)
        assert value == 0xFFFFE03F
        assert (value >> 11) & 0x1FFFFF == 0x1FFFFC

    def test_j_zero_offset(self):
        # jal ra, 0
        assert encode_j(0b111111, 1, 0) == 0x7F

    def test_fields_are_masked(self):
        """Out-of-width values cannot spill into neighbouring fields."""
        assert encode_r(0x40, 0x20, 0x20) == 0

    def test_dispatch(self):
        assert encode(InstructionFormat.R, 0, rd=1, rs=2) == 0x1040
        assert encode(InstructionFormat.I16, 0b010000, rd=1, imm=3) == 0x1850
        assert encode(InstructionFormat.I32, 0b100000, rd=1, rs=2, imm=-4) == 0xFFFC1060
        assert encode(InstructionFormat.J, 0b111111, rd=0, imm=-4) == 0xFFFFE03F


# =============================================================================
# Field Extraction Tests
# =============================================================================

class TestDecodeFields:
    """decode_fields recovers what encode packed."""

    def test_r(self):
        fields = decode_fields(InstructionFormat.R, 0x1040)
        assert (fields.opcode, fields.rd, fields.rs) == (0, 1, 2)

    def test_i16(self):
        fields = decode_fields(InstructionFormat.I16, 0xF850)
        assert (fields.opcode, fields.rd, fields.imm) == (0b010000, 1, 31)

    def test_i32_sign_extended(self):
        fields = decode_fields(InstructionFormat.I32, 0xFFFC1060)
        assert (fields.opcode, fields.rd, fields.rs, fields.imm) == (0b100000, 1, 2, -4)

    def test_j_sign_extended(self):
        fields = decode_fields(InstructionFormat.J, 0xFFFFE03F)
        assert (fields.opcode, fields.rd, fields.imm) == (0b111111, 0, -4)

    @pytest.mark.parametrize("imm", [(1 << 19) - 2, -(1 << 19) + 1, 0, 1, -1])
    def test_j_boundaries(self, imm):
        value = encode_j(0b111111, 5, imm)
        fields = decode_fields(InstructionFormat.J, value)
        assert (fields.rd, fields.imm) == (5, imm)


# =============================================================================
# Word Tests
# =============================================================================

class TestWord:
    """Encoded word container."""

    def test_little_endian_16(self):
        assert Word(0x1040, 16).to_bytes() == bytes([0x40, 0x10])

    def test_little_endian_32(self):
        assert Word(0xDEADBEEF, 32).to_bytes() == bytes([0xEF, 0xBE, 0xAD, 0xDE])

    def test_size(self):
        assert Word(0, 16).size == 2
        assert Word(0, 32).size == 4

    def test_str(self):
        assert str(Word(0x1040, 16)) == "0x1040"
        assert str(Word(0x7F, 32)) == "0x0000007f"

    def test_invalid_width(self):
        with pytest.raises(ValueError):
            Word(1, 8)

    def test_value_too_wide(self):
        with pytest.raises(ValueError):
            Word(0x10000, 16)

    def test_negative_value(self):
        with pytest.raises(ValueError):
            Word(-1, 32)
