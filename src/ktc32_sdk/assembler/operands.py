"""
KTC32 Operand Resolution
========================

This module turns the textual operands of an instruction record into
numbers, using the frozen symbol table from the layout pass.

Immediate Rules
---------------
| Format | Literal forms                | Symbol value                      | Range                 |
|--------|------------------------------|-----------------------------------|-----------------------|
| I16    | decimal or 0x hex, unsigned  | not allowed                       | 0 to 31               |
| I32    | 0x hex (unsigned 16-bit),    | absolute label address            | 16-bit (by parse)     |
|        | decimal (signed 16-bit)      |                                   |                       |
| J      | 0x hex (32-bit),             | label - instruction address - 4   | -2^19 < v < 2^19 - 1  |
|        | decimal (signed 32-bit)      |                                   |                       |

A symbol's value is substituted as decimal text and then parsed by the
same rule as a decimal literal, so a label above 32767 cannot be used as
an I32 immediate.

Number Parsing
--------------
Decimal literals accept an optional sign (``-`` only where the field is
signed). Hex literals are ``0x`` followed by hex digits. A literal that
does not fit the parse width is a parse error; a literal that parses but
does not fit the field is a range error.
"""

import re
from dataclasses import dataclass
from typing import Optional

from ktc32_sdk.assembler.lexer import HEX_PREFIX
from ktc32_sdk.assembler.parser import (
    I16Instruction,
    I32Instruction,
    Instruction,
    JInstruction,
    RInstruction,
)
from ktc32_sdk.assembler.registers import resolve_register
from ktc32_sdk.assembler.symbols import SymbolTable
from ktc32_sdk.errors import ImmediateParseError, ImmediateRangeError


# Largest value of the 5-bit I16 immediate
I16_IMM_MAX = 0b11111

# J-format offsets must satisfy -J_IMM_LIMIT < value < J_IMM_LIMIT - 1
J_IMM_LIMIT = 1 << 19

# Distance from a jump to the address its offset is measured from
JUMP_PC_CORRECTION = 4

_DECIMAL_RE = re.compile(r"^[+-]?[0-9]+$")
_HEX_DIGITS_RE = re.compile(r"^[0-9a-f]+$")


# =============================================================================
# Literal Parsing
# =============================================================================

def is_hex_literal(token: str) -> bool:
    """Return True if the token carries the ``0x`` prefix."""
    return token.startswith(HEX_PREFIX)


def parse_decimal(text: str, bits: int, signed: bool) -> Optional[int]:
    """
    Parse a decimal integer that must fit ``bits`` bits.

    Returns:
        The value, or None if the text is malformed or overflows
    """
    if not _DECIMAL_RE.match(text):
        return None
    if text.startswith("-") and not signed:
        return None
    value = int(text)
    if signed:
        low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    else:
        low, high = 0, (1 << bits) - 1
    return value if low <= value <= high else None


def parse_hex(token: str, bits: int) -> Optional[int]:
    """
    Parse an unsigned ``0x`` literal that must fit ``bits`` bits.

    Returns:
        The value, or None if the token is malformed or overflows
    """
    digits = token[len(HEX_PREFIX):]
    if not _HEX_DIGITS_RE.match(digits):
        return None
    value = int(digits, 16)
    return value if value < (1 << bits) else None


def to_signed(value: int, bits: int) -> int:
    """Reinterpret an unsigned ``bits``-wide value as two's complement."""
    sign_bit = 1 << (bits - 1)
    return (value & (sign_bit - 1)) - (value & sign_bit)


# =============================================================================
# Resolved Operands
# =============================================================================

@dataclass(frozen=True)
class Operands:
    """
    Numeric operand fields of one instruction.

    Fields a format does not have are zero.
    """
    rd: int = 0
    rs: int = 0
    imm: int = 0


# =============================================================================
# Operand Resolver
# =============================================================================

class OperandResolver:
    """
    Resolves register and immediate operands against a symbol table.

    The resolver only reads the symbol table; it is meant to be used after
    the layout pass has frozen it.

    Usage:
        resolver = OperandResolver(symbols)
        operands = resolver.resolve(instruction)
    """

    def __init__(self, symbols: SymbolTable):
        self._symbols = symbols

    def resolve(self, inst: Instruction) -> Operands:
        """
        Resolve all operands of an instruction record.

        Raises:
            UnknownRegisterError: For an unrecognised register token
            ImmediateParseError: For an immediate that does not parse
            ImmediateRangeError: For an immediate that overflows its field
        """
        rd = self.resolve_register(inst, inst.rd, 1)

        if isinstance(inst, RInstruction):
            return Operands(rd=rd, rs=self.resolve_register(inst, inst.rs, 2))
        if isinstance(inst, I16Instruction):
            return Operands(rd=rd, imm=self.resolve_i16(inst))
        if isinstance(inst, I32Instruction):
            rs = self.resolve_register(inst, inst.rs, 2)
            return Operands(rd=rd, rs=rs, imm=self.resolve_i32(inst))
        if isinstance(inst, JInstruction):
            return Operands(rd=rd, imm=self.resolve_j(inst))
        raise TypeError(f"cannot resolve operands of {type(inst).__name__}")

    def resolve_register(self, inst: Instruction, token: str, index: int) -> int:
        """Resolve a register token; ``index`` is its position on the line."""
        return resolve_register(
            token,
            location=inst.source.location(index),
            source_line=inst.text,
        )

    def resolve_i16(self, inst: I16Instruction) -> int:
        """Resolve a 5-bit unsigned shift amount."""
        token = inst.imm
        if is_hex_literal(token):
            value = parse_hex(token, 8)
        else:
            value = parse_decimal(token, 8, signed=False)

        if value is None:
            raise self._parse_error(inst, token, "an unsigned 8-bit integer")
        if value > I16_IMM_MAX:
            raise ImmediateRangeError(
                value,
                f"0 to {I16_IMM_MAX}",
                location=self._imm_location(inst),
                source_line=inst.text,
            )
        return value

    def resolve_i32(self, inst: I32Instruction) -> int:
        """
        Resolve a 16-bit immediate.

        Hex literals are unsigned and returned as-is. Labels resolve to
        their absolute address. Decimal literals are signed.
        """
        token = inst.imm
        if is_hex_literal(token):
            value = parse_hex(token, 16)
            if value is None:
                raise self._parse_error(inst, token, "an unsigned 16-bit hex integer")
            return value

        symbol = self._symbols.lookup(token)
        text = str(symbol.address) if symbol is not None else token
        value = parse_decimal(text, 16, signed=True)
        if value is None:
            raise self._parse_error(inst, token, "a signed 16-bit integer")
        return value

    def resolve_j(self, inst: JInstruction) -> int:
        """
        Resolve a jump offset.

        Labels resolve to ``label - instruction_address - 4``.
        """
        token = inst.imm
        target: Optional[str] = None

        if is_hex_literal(token):
            raw = parse_hex(token, 32)
            if raw is None:
                raise self._parse_error(inst, token, "an unsigned 32-bit hex integer")
            value = to_signed(raw, 32)
        else:
            symbol = self._symbols.lookup(token)
            if symbol is not None:
                target = token
                text = str(symbol.address - inst.address - JUMP_PC_CORRECTION)
            else:
                text = token
            value = parse_decimal(text, 32, signed=True)
            if value is None:
                raise self._parse_error(inst, token, "a signed 32-bit integer")

        if not -J_IMM_LIMIT < value < J_IMM_LIMIT - 1:
            raise ImmediateRangeError(
                value,
                f"{-J_IMM_LIMIT + 1} to {J_IMM_LIMIT - 2}",
                location=self._imm_location(inst),
                source_line=inst.text,
                target=target,
            )
        return value

    # =========================================================================
    # Helpers
    # =========================================================================

    def _imm_location(self, inst: Instruction):
        return inst.source.location(len(inst.source.tokens) - 1)

    def _parse_error(self, inst: Instruction, token: str, expected: str) -> ImmediateParseError:
        hint = None
        if not isinstance(inst, I16Instruction) and token[:1].isalpha() and token not in self._symbols:
            hint = f"no label named '{token}' is defined"
        return ImmediateParseError(
            token,
            expected,
            location=self._imm_location(inst),
            source_line=inst.text,
            hint=hint,
        )
