"""
KTC32 SDK - Assembler Toolchain for the KTC32 Processor
=======================================================

This package provides a two-pass assembler and a matching disassembler for
the KTC32, a small 32-register processor with 16-bit and 32-bit
instructions.

Main Components
---------------
- **assembler**: KTC32 assembler (ktasm)
    Converts assembly source files (.asm) to memory images (.mem)

- **disassembler**: KTC32 disassembler (ktdisasm)
    Decodes memory images back to assembly text

Quick Start
-----------
Assemble a program:
    >>> from ktc32_sdk.assembler import Assembler
    >>> asm = Assembler()
    >>> code = asm.assemble_file("hello.asm")
    >>> asm.write_mem("hello.mem")

Disassemble it again:
    >>> from ktc32_sdk.disassembler import Ktc32Disassembler
    >>> for instr in Ktc32Disassembler().disassemble(code[4:], start_address=256):
    ...     print(instr)

Or use the command-line tools:
    $ ktasm hello.asm -o hello.mem
    $ ktdisasm hello.mem

Version History
---------------
1.0.0 - Initial release with assembler and disassembler
"""

__version__ = "1.0.0"
__author__ = "KTC32 SDK Contributors"

# =============================================================================
# Public API Exports
# =============================================================================

from ktc32_sdk.assembler import Assembler, assemble, assemble_file
from ktc32_sdk.disassembler import Ktc32Disassembler
from ktc32_sdk.errors import (
    Ktc32Error,
    SourceLocation,
    AssemblerError,
    AssemblySyntaxError,
    UnknownRegisterError,
    ImmediateParseError,
    ImmediateRangeError,
)

__all__ = [
    # Version info
    "__version__",
    "__author__",
    # Assembler
    "Assembler",
    "assemble",
    "assemble_file",
    # Disassembler
    "Ktc32Disassembler",
    # Exception hierarchy
    "Ktc32Error",
    "SourceLocation",
    "AssemblerError",
    "AssemblySyntaxError",
    "UnknownRegisterError",
    "ImmediateParseError",
    "ImmediateRangeError",
]
