"""
KTC32 Instruction Records
=========================

This module turns scanned token lines into typed, addressed records. It
defines one immutable record class per encoding format, so each record
carries exactly the fields its format has: a J-format record has no
source register and a constant has no mnemonic.

Statement Types
---------------
- **RInstruction**: ``mnemonic rd, rs`` (16 bits)
- **I16Instruction**: ``mnemonic rd, imm5`` (16 bits)
- **I32Instruction**: ``mnemonic rd, rs, imm16`` or ``lui rd, imm16`` (32 bits)
- **JInstruction**: ``mnemonic rd, target`` (32 bits)
- **ConstWord**: ``0xXXXXXXXX`` raw data word (32 bits)

Operands are kept as text. Registers and immediates are resolved in the
second pass, once the symbol table is complete, because an immediate may
name a label declared further down the file.

Records are built once, during the layout pass, with their final address.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Union

from ktc32_sdk.assembler.lexer import HEX_PREFIX, LABEL_SUFFIX, LineKind, TokenLine
from ktc32_sdk.assembler.opcodes import (
    CONST_SIZE,
    InstructionFormat,
    InstructionInfo,
    get_instruction_info,
)
from ktc32_sdk.errors import AssemblySyntaxError, SourceLocation


_HEX_DIGITS = frozenset("0123456789abcdef")

# =============================================================================
# Record Classes
# =============================================================================

@dataclass(frozen=True)
class Record(ABC):
    """
    Base class for all emitting records.

    Attributes:
        address: Byte address of the record in the image
        source: The token line the record was built from
    """
    address: int
    source: TokenLine

    @property
    def location(self) -> SourceLocation:
        return self.source.location()

    @property
    def line(self) -> int:
        return self.source.line

    @property
    def text(self) -> str:
        return self.source.text

    @property
    @abstractmethod
    def size(self) -> int:
        ...

    @property
    def end_address(self) -> int:
        """Address of the byte following this record."""
        return self.address + self.size


@dataclass(frozen=True)
class Instruction(Record):
    """Base class for mnemonic-bearing records."""
    mnemonic: str

    @property
    def info(self) -> InstructionInfo:
        return get_instruction_info(self.mnemonic)

    @property
    def format(self) -> InstructionFormat:
        return self.info.format

    @property
    def opcode(self) -> int:
        return self.info.opcode

    @property
    def size(self) -> int:
        return self.format.size


@dataclass(frozen=True)
class RInstruction(Instruction):
    """Register-register instruction: ``mnemonic rd, rs``."""
    rd: str
    rs: str


@dataclass(frozen=True)
class I16Instruction(Instruction):
    """Short immediate instruction: ``mnemonic rd, imm``."""
    rd: str
    imm: str


@dataclass(frozen=True)
class I32Instruction(Instruction):
    """Long immediate instruction: ``mnemonic rd, rs, imm``."""
    rd: str
    rs: str
    imm: str


@dataclass(frozen=True)
class JInstruction(Instruction):
    """Jump instruction with PC-relative target: ``mnemonic rd, target``."""
    rd: str
    imm: str


@dataclass(frozen=True)
class ConstWord(Record):
    """Raw 32-bit data word placed at the current address."""
    value: int

    @property
    def size(self) -> int:
        return CONST_SIZE


Statement = Union[RInstruction, I16Instruction, I32Instruction, JInstruction, ConstWord]


# =============================================================================
# Record Construction
# =============================================================================

def parse_label(token_line: TokenLine) -> str:
    """
    Extract the symbol name from a label line.

    Raises:
        AssemblySyntaxError: If the label name is empty
    """
    name = token_line.tokens[0][: -len(LABEL_SUFFIX)]
    if not name:
        raise AssemblySyntaxError(
            "label has no name",
            location=token_line.location(),
            source_line=token_line.text,
            tokens=token_line.tokens,
        )
    return name


def parse_constant(token_line: TokenLine) -> int:
    """
    Parse a raw constant line as an unsigned 32-bit hex value.

    Raises:
        AssemblySyntaxError: If the token is not a valid 32-bit hex literal
    """
    token = token_line.tokens[0]
    digits = token[len(HEX_PREFIX):]
    # int() would also accept underscores and signs
    if digits and all(c in _HEX_DIGITS for c in digits):
        value = int(digits, 16)
        if value <= 0xFFFF_FFFF:
            return value
    raise AssemblySyntaxError(
        f"invalid constant '{token}'",
        location=token_line.location(),
        hint="constants are 32-bit hex literals such as 0x0000002a",
        source_line=token_line.text,
        tokens=token_line.tokens,
    )


def parse_statement(token_line: TokenLine, address: int) -> Statement:
    """
    Build the record for an instruction or constant line.

    Args:
        token_line: A scanned INSTRUCTION or CONSTANT line
        address: Address assigned to the record by the layout pass

    Returns:
        The record for the line's format

    Raises:
        AssemblySyntaxError: On a wrong operand count or malformed constant
    """
    if token_line.kind is LineKind.CONSTANT:
        return ConstWord(address=address, source=token_line, value=parse_constant(token_line))

    if token_line.kind is not LineKind.INSTRUCTION:
        raise ValueError(f"cannot build a record from a {token_line.kind.name} line")

    tokens = token_line.tokens
    mnemonic = tokens[0]
    info = get_instruction_info(mnemonic)

    if len(tokens) != info.token_count:
        operands = info.token_count - 1
        raise AssemblySyntaxError(
            f"syntax error {list(tokens)!r}",
            location=token_line.location(),
            hint=f"'{mnemonic}' takes {operands} operands, got {len(tokens) - 1}",
            source_line=token_line.text,
            tokens=tokens,
        )

    fmt = info.format
    if fmt is InstructionFormat.R:
        return RInstruction(
            address=address, source=token_line, mnemonic=mnemonic,
            rd=tokens[1], rs=tokens[2],
        )
    if fmt is InstructionFormat.I16:
        return I16Instruction(
            address=address, source=token_line, mnemonic=mnemonic,
            rd=tokens[1], imm=tokens[2],
        )
    if fmt is InstructionFormat.I32:
        if info.implied_rs is not None:
            rs, imm = info.implied_rs, tokens[2]
        else:
            rs, imm = tokens[2], tokens[3]
        return I32Instruction(
            address=address, source=token_line, mnemonic=mnemonic,
            rd=tokens[1], rs=rs, imm=imm,
        )
    return JInstruction(
        address=address, source=token_line, mnemonic=mnemonic,
        rd=tokens[1], imm=tokens[2],
    )
