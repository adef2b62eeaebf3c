"""
KTC32 Code Generator
====================

This module generates KTC32 machine code from scanned token lines. It
implements a two-pass assembly process:

Pass 1 (Layout)
---------------
- Walk all lines in source order with a running address
- Build one addressed record per instruction or constant line
- Record each label at the current address in the symbol table
- Freeze the symbol table

Pass 2 (Resolve + Encode)
-------------------------
- Resolve register and immediate operands against the frozen table
- Pack each record into a 16-bit or 32-bit word

Forward references are legal, so pass 2 never starts before pass 1 has
consumed every line. The first error in either pass aborts assembly and
no code is kept.

Operating Modes
---------------
| Mode       | Origin | Image                                   |
|------------|--------|-----------------------------------------|
| hosted     | 256    | 4-byte LE size header, then the words   |
| bare-metal | 0      | the words only                          |

The size header holds ``final_address - origin``, which counts every
emitted byte including trailing constants.

Output Formats
--------------
- Memory file (``.mem``): one byte per line as two lowercase hex digits
- Raw binary image
- Listing file with addresses, words and source
- Symbol table file
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from ktc32_sdk.assembler.encoder import Word, encode
from ktc32_sdk.assembler.lexer import LineKind, TokenLine
from ktc32_sdk.assembler.operands import OperandResolver
from ktc32_sdk.assembler.parser import (
    ConstWord,
    Instruction,
    Statement,
    parse_label,
    parse_statement,
)
from ktc32_sdk.assembler.symbols import SymbolTable


logger = logging.getLogger(__name__)


HOSTED_ORIGIN = 256
BARE_METAL_ORIGIN = 0
SIZE_HEADER_BYTES = 4


# =============================================================================
# Layout Result
# =============================================================================

@dataclass(frozen=True)
class ProgramLayout:
    """
    Result of pass 1.

    Attributes:
        records: Addressed records in source order
        symbols: Frozen symbol table
        origin: Address of the first record
        end_address: Address following the last record
    """
    records: tuple[Statement, ...]
    symbols: SymbolTable
    origin: int
    end_address: int

    @property
    def size(self) -> int:
        """Total emitted bytes; the value of the size header."""
        return self.end_address - self.origin


@dataclass(frozen=True)
class EncodedStatement:
    """A record paired with its encoded word."""
    record: Statement
    word: Word


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Generates KTC32 object code from token lines.

    Usage:
        codegen = CodeGenerator(bare_metal=False)
        codegen.generate(Lexer(source).tokenize())
        code = codegen.get_code()
        codegen.write_mem("a.mem")
    """

    def __init__(self, bare_metal: bool = False):
        """
        Initialize the code generator.

        Args:
            bare_metal: If True, assemble at origin 0 with no size header.
                        Otherwise assemble at origin 256 and prefix the
                        image with a 4-byte size header.
        """
        self._bare_metal = bare_metal
        self._layout: ProgramLayout | None = None
        self._encoded: list[EncodedStatement] = []

    @property
    def bare_metal(self) -> bool:
        return self._bare_metal

    @property
    def origin(self) -> int:
        return BARE_METAL_ORIGIN if self._bare_metal else HOSTED_ORIGIN

    # =========================================================================
    # Public Interface
    # =========================================================================

    def generate(self, lines: Iterable[TokenLine]) -> bytes:
        """
        Run both passes and return the program image.

        Args:
            lines: Token lines in source order

        Returns:
            The image bytes, size header included in hosted mode

        Raises:
            AssemblerError: On the first error in either pass
        """
        self._layout = None
        self._encoded = []

        layout = self.layout(lines)
        encoded = self.encode(layout)

        self._layout = layout
        self._encoded = encoded

        logger.info(
            f"Assembled {len(encoded)} words, {layout.size} bytes "
            f"at 0x{layout.origin:04x} ({'bare-metal' if self._bare_metal else 'hosted'})"
        )
        return self.get_code()

    def layout(self, lines: Iterable[TokenLine]) -> ProgramLayout:
        """
        Pass 1: assign addresses and collect labels.

        Each emitting record gets the address before it is counted; a
        label gets the current address and does not advance it.

        Raises:
            AssemblySyntaxError: On unknown mnemonics, wrong operand
                                 counts and malformed labels or constants
        """
        symbols = SymbolTable()
        records: list[Statement] = []
        address = self.origin

        for line in lines:
            if line.kind is LineKind.LABEL:
                symbols.define(parse_label(line), address, line.location())
                continue

            record = parse_statement(line, address)
            records.append(record)
            address += record.size

        symbols.freeze()
        logger.debug(
            f"Layout complete: {len(records)} records, {len(symbols)} labels, "
            f"end address 0x{address:04x}"
        )
        return ProgramLayout(tuple(records), symbols, self.origin, address)

    def encode(self, layout: ProgramLayout) -> list[EncodedStatement]:
        """
        Pass 2: resolve operands and encode every record.

        Raises:
            UnknownRegisterError, ImmediateParseError, ImmediateRangeError
        """
        resolver = OperandResolver(layout.symbols)
        encoded = []

        for record in layout.records:
            if isinstance(record, ConstWord):
                word = Word(record.value, 32, record.address)
            else:
                word = self._encode_instruction(record, resolver)
            logger.debug(f"0x{record.address:04x}: {word}  {record.text.strip()}")
            encoded.append(EncodedStatement(record, word))

        return encoded

    def _encode_instruction(self, inst: Instruction, resolver: OperandResolver) -> Word:
        operands = resolver.resolve(inst)
        value = encode(inst.format, inst.opcode, operands.rd, operands.rs, operands.imm)
        return Word(value, inst.format.width, inst.address)

    # =========================================================================
    # Results
    # =========================================================================

    def get_words(self) -> list[Word]:
        """Return the encoded words in source order."""
        return [entry.word for entry in self._encoded]

    def get_size(self) -> int:
        """Return the number of emitted bytes, excluding the header."""
        return self._layout.size if self._layout else 0

    def get_origin(self) -> int:
        """Return the origin address."""
        return self.origin

    def get_symbols(self) -> dict[str, int]:
        """Return a dictionary of label names to addresses."""
        return self._layout.symbols.as_dict() if self._layout else {}

    def get_header(self) -> bytes:
        """Return the size header, or empty bytes in bare-metal mode."""
        if self._bare_metal:
            return b""
        return self.get_size().to_bytes(SIZE_HEADER_BYTES, "little")

    def get_code(self) -> bytes:
        """Return the program image."""
        body = b"".join(word.to_bytes() for word in self.get_words())
        return self.get_header() + body

    def get_mem_lines(self) -> list[str]:
        """Return the image as two-digit lowercase hex lines, one per byte."""
        return [f"{byte:02x}" for byte in self.get_code()]

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            The listing showing addresses, encoded words, and source lines.
        """
        lines = []
        lines.append("KTC32 Assembler Listing")
        lines.append("=" * 60)
        lines.append("")
        lines.append("Addr    Word        Line  Source")
        lines.append("-" * 60)
        for entry in self._encoded:
            record = entry.record
            lines.append(
                f"0x{record.address:04x}  {str(entry.word):10s}  {record.line:4d}  "
                f"{record.text.strip()}"
            )
        lines.append("")
        lines.append("Symbol Table")
        lines.append("-" * 30)
        for name, address in sorted(self.get_symbols().items()):
            lines.append(f"{name:20s} = 0x{address:04x}")
        return "\n".join(lines)

    # =========================================================================
    # Output File Writing
    # =========================================================================

    def write_mem(self, filepath: str | Path) -> None:
        """
        Write the image as a memory file.

        One byte per line, two lowercase hex digits, least-significant
        byte of each word first.
        """
        with open(filepath, "w") as f:
            for line in self.get_mem_lines():
                f.write(f"{line}\n")

    def write_binary(self, filepath: str | Path) -> None:
        """Write the raw image bytes."""
        Path(filepath).write_bytes(self.get_code())

    def write_listing(self, filepath: str | Path) -> None:
        """Write assembly listing file."""
        with open(filepath, "w") as f:
            f.write(self.get_listing())

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name address (one per line, duplicates resolved last-wins)
        """
        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by ktasm\n")
            for name, address in sorted(self.get_symbols().items()):
                f.write(f"{name} 0x{address:04x}\n")
