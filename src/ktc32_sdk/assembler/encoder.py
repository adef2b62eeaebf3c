"""
KTC32 Instruction Encoder
=========================

Pure bit packing. Every function here takes already-validated numeric
fields and masks each one to its width before shifting it into place;
nothing here parses text or raises assembly errors.

Bit Layouts
-----------
```
R   (16)  15      11 10       6 5        0
          [   rs   ] [   rd   ] [ opcode ]

I16 (16)  15      11 10       6 5        0
          [ imm4:0 ] [   rd   ] [ opcode ]

I32 (32)  31            16 15  11 10   6 5      0
          [   imm15:0    ] [ rs ] [ rd ] [opcode]

J   (32)  31                    11 10   6 5      0
          [       imm20:0        ] [ rd ] [opcode]
```

Words are stored little-endian: the byte holding the opcode comes first.
"""

from dataclasses import dataclass
from typing import Optional

from ktc32_sdk.assembler.opcodes import InstructionFormat


OPCODE_MASK = 0x3F
REG_MASK = 0x1F
I16_IMM_MASK = 0x1F
I32_IMM_MASK = 0xFFFF
J_IMM_MASK = 0x1F_FFFF

RD_SHIFT = 6
RS_SHIFT = 11
I16_IMM_SHIFT = 11
I32_IMM_SHIFT = 16
J_IMM_SHIFT = 11


# =============================================================================
# Encoded Word
# =============================================================================

@dataclass(frozen=True)
class Word:
    """
    One encoded unit of the program image.

    Attributes:
        value: Encoded value
        width: Width in bits (16 or 32)
        address: Address the word is placed at (None if not placed)
    """
    value: int
    width: int
    address: Optional[int] = None

    def __post_init__(self) -> None:
        if self.width not in (16, 32):
            raise ValueError(f"word width must be 16 or 32, not {self.width}")
        if not 0 <= self.value < (1 << self.width):
            raise ValueError(f"value 0x{self.value:x} does not fit {self.width} bits")

    @property
    def size(self) -> int:
        """Size in bytes."""
        return self.width // 8

    def to_bytes(self) -> bytes:
        """Serialize least-significant byte first."""
        return self.value.to_bytes(self.size, "little")

    def __str__(self) -> str:
        digits = self.size * 2
        return f"0x{self.value:0{digits}x}"


# =============================================================================
# Per-Format Packing
# =============================================================================

def encode_r(opcode: int, rd: int, rs: int) -> int:
    """Pack an R-format halfword."""
    return (
        (opcode & OPCODE_MASK)
        | (rd & REG_MASK) << RD_SHIFT
        | (rs & REG_MASK) << RS_SHIFT
    )


def encode_i16(opcode: int, rd: int, imm: int) -> int:
    """Pack an I16-format halfword."""
    return (
        (opcode & OPCODE_MASK)
        | (rd & REG_MASK) << RD_SHIFT
        | (imm & I16_IMM_MASK) << I16_IMM_SHIFT
    )


def encode_i32(opcode: int, rd: int, rs: int, imm: int) -> int:
    """Pack an I32-format word. Negative ``imm`` is stored two's complement."""
    return (
        (opcode & OPCODE_MASK)
        | (rd & REG_MASK) << RD_SHIFT
        | (rs & REG_MASK) << RS_SHIFT
        | (imm & I32_IMM_MASK) << I32_IMM_SHIFT
    )


def encode_j(opcode: int, rd: int, imm: int) -> int:
    """Pack a J-format word. Negative ``imm`` is stored two's complement."""
    return (
        (opcode & OPCODE_MASK)
        | (rd & REG_MASK) << RD_SHIFT
        | (imm & J_IMM_MASK) << J_IMM_SHIFT
    )


def encode(fmt: InstructionFormat, opcode: int, rd: int = 0, rs: int = 0, imm: int = 0) -> int:
    """Pack fields for any instruction format."""
    if fmt is InstructionFormat.R:
        return encode_r(opcode, rd, rs)
    if fmt is InstructionFormat.I16:
        return encode_i16(opcode, rd, imm)
    if fmt is InstructionFormat.I32:
        return encode_i32(opcode, rd, rs, imm)
    return encode_j(opcode, rd, imm)


# =============================================================================
# Field Extraction
# =============================================================================

@dataclass(frozen=True)
class DecodedFields:
    """
    Raw fields extracted from an encoded word.

    ``imm`` is sign-extended for I32 and J formats.
    """
    opcode: int
    rd: int
    rs: int = 0
    imm: int = 0


def decode_fields(fmt: InstructionFormat, value: int) -> DecodedFields:
    """Split an encoded word into its fields. The inverse of ``encode``."""
    opcode = value & OPCODE_MASK
    rd = (value >> RD_SHIFT) & REG_MASK

    if fmt is InstructionFormat.R:
        return DecodedFields(opcode, rd, rs=(value >> RS_SHIFT) & REG_MASK)
    if fmt is InstructionFormat.I16:
        return DecodedFields(opcode, rd, imm=(value >> I16_IMM_SHIFT) & I16_IMM_MASK)
    if fmt is InstructionFormat.I32:
        imm = (value >> I32_IMM_SHIFT) & I32_IMM_MASK
        return DecodedFields(
            opcode, rd,
            rs=(value >> RS_SHIFT) & REG_MASK,
            imm=_sign_extend(imm, 16),
        )
    imm = (value >> J_IMM_SHIFT) & J_IMM_MASK
    return DecodedFields(opcode, rd, imm=_sign_extend(imm, 21))


def _sign_extend(value: int, bits: int) -> int:
    sign_bit = 1 << (bits - 1)
    return (value & (sign_bit - 1)) - (value & sign_bit)
