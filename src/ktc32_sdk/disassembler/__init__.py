"""
KTC32 Disassembler Package
==========================

Decodes KTC32 machine code back into assembly text. Used by the
``ktdisasm`` command-line tool and handy for checking assembler output.

    from ktc32_sdk.disassembler import Ktc32Disassembler
    for instr in Ktc32Disassembler().disassemble(code):
        print(instr)
"""

from ktc32_sdk.disassembler.ktc32 import (
    DisassembledInstruction,
    Ktc32Disassembler,
    parse_mem_text,
    parse_symbol_text,
)

__all__ = [
    "DisassembledInstruction",
    "Ktc32Disassembler",
    "parse_mem_text",
    "parse_symbol_text",
]
