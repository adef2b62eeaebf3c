"""
KTC32 Instruction Set Definition
================================

This module defines the KTC32 instruction set: every mnemonic with its
encoding format, opcode and operand count. The table is pure data and is
shared by the assembler (which encodes instructions) and the disassembler
(which decodes them).

Instruction Formats
-------------------
KTC32 instructions come in four encodings. The opcode always sits in the
low six bits of the first halfword, so a decoder can tell the width of an
instruction from its first two bytes.

1. **R** (16 bits): register-register
   - ``opcode[5:0] | rd[4:0] << 6 | rs[4:0] << 11``
   - Example: ``add r1, r2``

2. **I16** (16 bits): register with 5-bit unsigned immediate
   - ``opcode[5:0] | rd[4:0] << 6 | imm[4:0] << 11``
   - Example: ``slli r1, 3``

3. **I32** (32 bits): two registers with 16-bit immediate
   - ``opcode[5:0] | rd[4:0] << 6 | rs[4:0] << 11 | imm[15:0] << 16``
   - Example: ``addi r1, r2, -4``, ``lui r1, 0x1234``

4. **J** (32 bits): register with 21-bit PC-relative immediate
   - ``opcode[5:0] | rd[4:0] << 6 | imm[20:0] << 11``
   - Example: ``jal ra, target``

Raw 32-bit constants (``0xdeadbeef`` on a line of its own) are not
instructions and have no table entry.

Opcode values are a dense enumeration per format group. They define the
decoder contract of the processor and must not change.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# Instruction Format Enumeration
# =============================================================================

class InstructionFormat(Enum):
    """
    KTC32 encoding formats.

    R and I16 encode to one 16-bit halfword, I32 and J to a 32-bit word.
    """
    R = "R"
    I16 = "I16"
    I32 = "I32"
    J = "J"

    @property
    def size(self) -> int:
        """Encoded size in bytes."""
        return 2 if self in (InstructionFormat.R, InstructionFormat.I16) else 4

    @property
    def width(self) -> int:
        """Encoded size in bits."""
        return self.size * 8

    def __str__(self) -> str:
        return f"{self.value}-format"


# Size of a raw constant word in bytes
CONST_SIZE = 4


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    Encoding information for one mnemonic.

    Attributes:
        mnemonic: Lowercase instruction name
        format: Encoding format
        opcode: 6-bit opcode value
        token_count: Required token count on a source line, mnemonic included
        implied_rs: Source register filled in when the source omits it
                    (only ``lui``)
    """
    mnemonic: str
    format: InstructionFormat
    opcode: int
    token_count: int
    implied_rs: Optional[str] = None

    @property
    def size(self) -> int:
        """Encoded size in bytes."""
        return self.format.size

    def __repr__(self) -> str:
        return (
            f"InstructionInfo({self.mnemonic!r}, {self.format.value}, "
            f"opcode=0b{self.opcode:06b}, tokens={self.token_count})"
        )


def _r(mnemonic: str, opcode: int) -> InstructionInfo:
    return InstructionInfo(mnemonic, InstructionFormat.R, opcode, 3)


def _i16(mnemonic: str, opcode: int) -> InstructionInfo:
    return InstructionInfo(mnemonic, InstructionFormat.I16, opcode, 3)


def _i32(mnemonic: str, opcode: int) -> InstructionInfo:
    return InstructionInfo(mnemonic, InstructionFormat.I32, opcode, 4)


# =============================================================================
# Opcode Table
# =============================================================================
# Key: lowercase mnemonic
# Value: InstructionInfo(mnemonic, format, opcode, token_count)
# =============================================================================

OPCODE_TABLE: dict[str, InstructionInfo] = {
    # =========================================================================
    # R-FORMAT (16 bits): rd <- rd op rs
    # =========================================================================
    "mov": _r("mov", 0b000000),
    "add": _r("add", 0b000001),
    "sub": _r("sub", 0b000010),
    "and": _r("and", 0b000011),
    "or": _r("or", 0b000100),
    "xor": _r("xor", 0b000101),
    "sll": _r("sll", 0b000110),
    "srl": _r("srl", 0b000111),
    "sra": _r("sra", 0b001000),
    "slt": _r("slt", 0b001001),
    "sltu": _r("sltu", 0b001010),

    # =========================================================================
    # I16-FORMAT (16 bits): shifts by a 5-bit amount
    # =========================================================================
    "slli": _i16("slli", 0b010000),
    "srli": _i16("srli", 0b010001),
    "srai": _i16("srai", 0b010010),

    # =========================================================================
    # I32-FORMAT (32 bits)
    # =========================================================================

    # Arithmetic / logic with immediate
    "addi": _i32("addi", 0b100000),
    "andi": _i32("andi", 0b100001),
    "ori": _i32("ori", 0b100010),
    "xori": _i32("xori", 0b100011),

    # Conditional branches (absolute target in imm)
    "beq": _i32("beq", 0b100100),
    "bnq": _i32("bnq", 0b100101),
    "blt": _i32("blt", 0b100110),
    "bge": _i32("bge", 0b100111),
    "bltu": _i32("bltu", 0b101000),
    "bgeu": _i32("bgeu", 0b101001),

    # Register-indirect jump
    "jalr": _i32("jalr", 0b101010),

    # Loads
    "lb": _i32("lb", 0b101011),
    "lh": _i32("lh", 0b101100),
    "lbu": _i32("lbu", 0b101101),
    "lhu": _i32("lhu", 0b101110),
    "lw": _i32("lw", 0b101111),

    # Load upper immediate: written "lui rd, imm", rs is always r0
    "lui": InstructionInfo("lui", InstructionFormat.I32, 0b110000, 3, implied_rs="r0"),

    # Stores
    "sb": _i32("sb", 0b110001),
    "sh": _i32("sh", 0b110010),
    "sw": _i32("sw", 0b110011),

    # =========================================================================
    # J-FORMAT (32 bits): jump and link, PC-relative
    # =========================================================================
    "jal": InstructionInfo("jal", InstructionFormat.J, 0b111111, 3),
}


# =============================================================================
# Instruction Set Reference Lists
# =============================================================================

MNEMONICS: frozenset[str] = frozenset(OPCODE_TABLE)

# Opcode -> InstructionInfo, for decoding
_OPCODE_INDEX: dict[int, InstructionInfo] = {
    info.opcode: info for info in OPCODE_TABLE.values()
}


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction_info(mnemonic: str) -> Optional[InstructionInfo]:
    """
    Get encoding information for a mnemonic.

    Args:
        mnemonic: Instruction mnemonic (case-insensitive)

    Returns:
        InstructionInfo if the mnemonic exists, None otherwise
    """
    return OPCODE_TABLE.get(mnemonic.lower())


def get_instruction_by_opcode(opcode: int) -> Optional[InstructionInfo]:
    """
    Get encoding information for an opcode value.

    Args:
        opcode: 6-bit opcode (higher bits are ignored)

    Returns:
        InstructionInfo if the opcode is assigned, None otherwise
    """
    return _OPCODE_INDEX.get(opcode & 0x3F)


def is_valid_instruction(mnemonic: str) -> bool:
    """Check whether a mnemonic exists in the instruction set."""
    return mnemonic.lower() in OPCODE_TABLE


def get_mnemonics_for_format(fmt: InstructionFormat) -> list[str]:
    """Return all mnemonics of one format, in opcode order."""
    infos = [info for info in OPCODE_TABLE.values() if info.format is fmt]
    return [info.mnemonic for info in sorted(infos, key=lambda i: i.opcode)]
