"""
KTC32 Assembler
===============

This package provides a two-pass assembler for the KTC32 processor, a
small 32-register machine with 16-bit and 32-bit instructions.

Main Components
---------------
- **Assembler**: Main assembler class that orchestrates the assembly process
- **Lexer**: Splits source into classified token lines
- **parse_statement**: Builds typed, addressed instruction records
- **CodeGenerator**: Layout pass, operand resolution and encoding
- **OperandResolver**: Turns register and immediate operands into numbers
- **encoder**: Bit packing for the four instruction formats

Assembly Process
----------------
1. **Scanning (Lexer)**:
   - Drop blank and ``//`` comment lines
   - Classify lines as instruction, label or constant

2. **Layout (CodeGenerator pass 1)**:
   - Assign each record its address, collect labels
   - Freeze the symbol table

3. **Resolve + Encode (CodeGenerator pass 2)**:
   - Resolve registers and immediates, including forward label references
   - Pack 16-bit and 32-bit words

Example Usage
-------------
>>> from ktc32_sdk.assembler import Assembler
>>> asm = Assembler(bare_metal=True)
>>> asm.assemble_string("mov r1, r2")
b'@\\x10'
"""

from ktc32_sdk.assembler.assembler import Assembler, assemble, assemble_file
from ktc32_sdk.assembler.lexer import Lexer, LineKind, TokenLine, scan_line
from ktc32_sdk.assembler.parser import (
    Record,
    Instruction,
    RInstruction,
    I16Instruction,
    I32Instruction,
    JInstruction,
    ConstWord,
    Statement,
    parse_statement,
)
from ktc32_sdk.assembler.codegen import (
    CodeGenerator,
    ProgramLayout,
    HOSTED_ORIGIN,
    BARE_METAL_ORIGIN,
    SIZE_HEADER_BYTES,
)
from ktc32_sdk.assembler.symbols import Symbol, SymbolTable
from ktc32_sdk.assembler.operands import OperandResolver, Operands
from ktc32_sdk.assembler.encoder import Word
from ktc32_sdk.assembler.opcodes import (
    InstructionFormat,
    InstructionInfo,
    OPCODE_TABLE,
    MNEMONICS,
)
from ktc32_sdk.assembler.registers import REGISTERS, REGISTER_ALIASES

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Lexer
    "Lexer",
    "LineKind",
    "TokenLine",
    "scan_line",
    # Records
    "Record",
    "Instruction",
    "RInstruction",
    "I16Instruction",
    "I32Instruction",
    "JInstruction",
    "ConstWord",
    "Statement",
    "parse_statement",
    # Code generator
    "CodeGenerator",
    "ProgramLayout",
    "HOSTED_ORIGIN",
    "BARE_METAL_ORIGIN",
    "SIZE_HEADER_BYTES",
    # Symbols
    "Symbol",
    "SymbolTable",
    # Operands
    "OperandResolver",
    "Operands",
    # Encoding
    "Word",
    # Instruction set
    "InstructionFormat",
    "InstructionInfo",
    "OPCODE_TABLE",
    "MNEMONICS",
    "REGISTERS",
    "REGISTER_ALIASES",
]
