"""
KTC32 SDK Command-Line Interface
================================

This package provides command-line tools for the KTC32 SDK:

- **ktasm**: KTC32 assembler
- **ktdisasm**: KTC32 disassembler

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["ktasm", "ktdisasm"]
