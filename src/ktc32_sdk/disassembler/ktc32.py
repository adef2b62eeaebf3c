"""
KTC32 Disassembler
==================

Disassembles KTC32 machine code into assembly text that ``ktasm`` accepts.
This is the inverse operation of the assembler's encoder.

Every instruction keeps its opcode in the low six bits of its first
halfword, so the decoder reads two bytes, looks the opcode up, and reads
two more bytes when the format is 32 bits wide. Raw constants carry no
format information; they decode as whatever their low bits happen to
spell. A word that would not assemble back to the same bits (an
unassigned opcode, ``lui`` with a non-zero rs field, a jump offset outside
the assembler's range) is printed as a raw ``0x`` constant. Only a
trailing halfword that cannot form a constant is shown as ``.word``.

Usage:
    disasm = Ktc32Disassembler()

    # Disassemble a bare-metal image
    instructions = disasm.disassemble(image, start_address=0)

    # Disassemble a hosted image (skip the size header)
    instructions = disasm.disassemble(image[4:], start_address=256)
"""

from dataclasses import dataclass
from typing import Optional

from ktc32_sdk.assembler.encoder import DecodedFields, decode_fields
from ktc32_sdk.assembler.opcodes import (
    CONST_SIZE,
    InstructionFormat,
    InstructionInfo,
    get_instruction_by_opcode,
)
from ktc32_sdk.assembler.operands import J_IMM_LIMIT, JUMP_PC_CORRECTION
from ktc32_sdk.assembler.registers import register_name


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    Represents a single disassembled KTC32 word.

    Attributes:
        address: Memory address of the word
        value: The encoded word
        mnemonic: Instruction mnemonic, a "0x" constant for undecodable
                  words, or ".word" for a trailing halfword
        operand_str: Formatted operands
        size: Size in bytes (2 or 4)
        raw_bytes: The bytes of the word as stored (little-endian)
        format: Instruction format, None for constants and ".word"
        comment: Optional annotation (jump targets, labels)
    """
    address: int
    value: int
    mnemonic: str
    operand_str: str
    size: int
    raw_bytes: bytes
    format: Optional[InstructionFormat] = None
    comment: str = ""

    @property
    def text(self) -> str:
        """Assembly text for this word."""
        if self.operand_str:
            return f"{self.mnemonic} {self.operand_str}"
        return self.mnemonic

    def __str__(self) -> str:
        """Format as ADDRESS: BYTES  MNEMONIC OPERANDS ; COMMENT"""
        hex_bytes = " ".join(f"{b:02x}" for b in self.raw_bytes).ljust(11)
        if self.comment:
            return f"0x{self.address:04x}: {hex_bytes}  {self.text:<24} // {self.comment}"
        return f"0x{self.address:04x}: {hex_bytes}  {self.text}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": self.address,
            "value": f"0x{self.value:0{self.size * 2}x}",
            "mnemonic": self.mnemonic,
            "operand": self.operand_str,
            "size": self.size,
            "bytes": [f"{b:02x}" for b in self.raw_bytes],
            "comment": self.comment,
        }


# =============================================================================
# KTC32 Disassembler
# =============================================================================

class Ktc32Disassembler:
    """
    Disassembler for KTC32 machine code.

    Attributes:
        _symbol_table: Optional address -> label mapping used to annotate
                       jump and branch targets
    """

    def __init__(self, symbol_table: Optional[dict[int, str]] = None):
        self._symbol_table = symbol_table or {}

    def disassemble_one(self, data: bytes, address: int = 0, offset: int = 0) -> DisassembledInstruction:
        """
        Disassemble the word starting at ``offset``.

        Args:
            data: Byte buffer containing the word
            address: Memory address of the word (for jump targets)
            offset: Offset into data where the word starts

        Raises:
            ValueError: If fewer than two bytes remain at offset
        """
        if offset + 2 > len(data):
            raise ValueError(f"Offset {offset} leaves fewer than 2 bytes in {len(data)}")

        halfword = int.from_bytes(data[offset:offset + 2], "little")
        info = get_instruction_by_opcode(halfword)

        if info is None:
            return self._raw_word(data, address, offset, "unknown opcode")

        size = info.format.size
        if offset + size > len(data):
            return self._data_word(data[offset:offset + 2], address, "incomplete instruction")

        raw = bytes(data[offset:offset + size])
        value = int.from_bytes(raw, "little")
        fields = decode_fields(info.format, value)

        if not self._reassembles(info, fields):
            return self._const_word(raw, address, f"not a valid {info.mnemonic}")

        operand_str, comment = self._format_operands(info, fields, address)

        return DisassembledInstruction(
            address=address,
            value=value,
            mnemonic=info.mnemonic,
            operand_str=operand_str,
            size=size,
            raw_bytes=raw,
            format=info.format,
            comment=comment,
        )

    def disassemble(
        self,
        data: bytes,
        start_address: int = 0,
        count: Optional[int] = None,
    ) -> list[DisassembledInstruction]:
        """
        Disassemble a byte buffer.

        Args:
            data: Machine code, without any size header
            start_address: Address of the first byte
            count: Maximum number of words to decode (default: all)
        """
        result = []
        offset = 0
        while offset + 2 <= len(data):
            if count is not None and len(result) >= count:
                break
            instr = self.disassemble_one(data, start_address + offset, offset)
            result.append(instr)
            offset += instr.size
        return result

    # =========================================================================
    # Formatting
    # =========================================================================

    @staticmethod
    def _reassembles(info: InstructionInfo, fields: DecodedFields) -> bool:
        """Check that ktasm can reproduce the word from its assembly text."""
        if info.implied_rs is not None:
            return fields.rs == 0
        if info.format is InstructionFormat.J:
            return -J_IMM_LIMIT < fields.imm < J_IMM_LIMIT - 1
        return True

    def _format_operands(
        self, info: InstructionInfo, fields: DecodedFields, address: int
    ) -> tuple[str, str]:
        rd = register_name(fields.rd)
        comment = ""

        if info.format is InstructionFormat.R:
            return f"{rd}, {register_name(fields.rs)}", ""

        if info.format is InstructionFormat.I16:
            return f"{rd}, {fields.imm}", ""

        if info.format is InstructionFormat.I32:
            if info.implied_rs is not None:
                return f"{rd}, 0x{fields.imm & 0xFFFF:x}", ""
            if info.mnemonic.startswith("b"):
                comment = self._label_for(fields.imm & 0xFFFF)
            return f"{rd}, {register_name(fields.rs)}, {fields.imm}", comment

        target = address + JUMP_PC_CORRECTION + fields.imm
        label = self._label_for(target)
        comment = label if label else f"-> 0x{target:04x}"
        return f"{rd}, {fields.imm}", comment

    def _label_for(self, address: int) -> str:
        return self._symbol_table.get(address, "")

    def _raw_word(self, data: bytes, address: int, offset: int, comment: str) -> DisassembledInstruction:
        # A whole 32-bit constant is the only raw data form ktasm accepts
        if offset + CONST_SIZE <= len(data):
            return self._const_word(data[offset:offset + CONST_SIZE], address, comment)
        return self._data_word(data[offset:offset + 2], address, comment)

    @staticmethod
    def _const_word(raw: bytes, address: int, comment: str) -> DisassembledInstruction:
        value = int.from_bytes(raw, "little")
        return DisassembledInstruction(
            address=address,
            value=value,
            mnemonic=f"0x{value:08x}",
            operand_str="",
            size=CONST_SIZE,
            raw_bytes=bytes(raw),
            comment=comment,
        )

    @staticmethod
    def _data_word(raw: bytes, address: int, comment: str) -> DisassembledInstruction:
        value = int.from_bytes(raw, "little")
        return DisassembledInstruction(
            address=address,
            value=value,
            mnemonic=".word",
            operand_str=f"0x{value:04x}",
            size=len(raw),
            raw_bytes=bytes(raw),
            comment=comment,
        )


# =============================================================================
# Memory File Support
# =============================================================================

def parse_mem_text(text: str) -> bytes:
    """
    Parse the contents of a ``.mem`` file.

    Each non-blank line holds one byte as hex digits.

    Raises:
        ValueError: If a line is not a byte in hex
    """
    data = bytearray()
    for number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            byte = int(line, 16)
        except ValueError:
            raise ValueError(f"line {number}: '{line}' is not a hex byte") from None
        if not 0 <= byte <= 0xFF:
            raise ValueError(f"line {number}: '{line}' is not a hex byte")
        data.append(byte)
    return bytes(data)


def parse_symbol_text(text: str) -> dict[int, str]:
    """
    Parse a symbol file written by ``ktasm -s`` into an address -> name map.

    Lines starting with ``#`` are ignored. When several names share an
    address the first one listed is kept.
    """
    symbols: dict[int, str] = {}
    for number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split()
        if len(parts) != 2:
            raise ValueError(f"line {number}: expected 'name address', got '{line}'")
        name, address = parts
        try:
            symbols.setdefault(int(address, 0), name)
        except ValueError:
            raise ValueError(f"line {number}: bad address '{address}'") from None
    return symbols
