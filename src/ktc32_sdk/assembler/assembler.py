"""
KTC32 Assembler - Main Interface
================================

This module provides the main Assembler class, which is the primary interface
for assembling KTC32 source code. It coordinates the line scanner and the
two-pass code generator and writes the resulting image.

Example Usage
-------------
>>> from ktc32_sdk.assembler import Assembler
>>>
>>> asm = Assembler(bare_metal=True)
>>> asm.assemble_string('''
... loop:
...     addi r1, r1, 1
...     jal r0, loop
... ''')
>>>
>>> code = asm.get_code()
>>> print(f"Generated {len(code)} bytes")
>>>
>>> asm.write_mem("a.mem")

Command-Line Usage
------------------
The assembler can also be invoked from the command line:

    $ ktasm program.asm -o program.mem -l program.lst -s program.sym

Options:
    -o, --output FILE      Output memory file (default: a.mem)
    -b, --binary FILE      Also write the raw image
    -l, --listing FILE     Generate listing file
    -s, --symbols FILE     Generate symbol file
    --bare-metal           Origin 0, no size header
    -v, --verbose          Verbose output
"""

import logging
from pathlib import Path

from ktc32_sdk.assembler.codegen import CodeGenerator
from ktc32_sdk.assembler.encoder import Word
from ktc32_sdk.assembler.lexer import Lexer


logger = logging.getLogger(__name__)


class Assembler:
    """
    Main KTC32 assembler class.

    This class provides a high-level interface for assembling KTC32
    source code into a flat memory image.

    Attributes:
        bare_metal: If True, assemble at origin 0 without a size header
        verbose: If True, log progress at INFO level
    """

    def __init__(self, bare_metal: bool = False, verbose: bool = False):
        """
        Initialize the assembler.

        Args:
            bare_metal: Assemble a ROM-resident image (origin 0, no header)
                        instead of a loader image (origin 256, 4-byte header)
            verbose: Log progress messages
        """
        self._bare_metal = bare_metal
        self._verbose = verbose
        self._codegen = CodeGenerator(bare_metal=bare_metal)

    @property
    def bare_metal(self) -> bool:
        return self._bare_metal

    def _log(self, message: str) -> None:
        if self._verbose:
            logger.info(message)
        else:
            logger.debug(message)

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str, filename: str = "<input>") -> bytes:
        """
        Assemble source code from a string.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            The program image (size header included in hosted mode)

        Raises:
            AssemblerError: If assembly fails
        """
        self._log(f"Assembling {filename}...")

        code = self._codegen.generate(Lexer(source, filename).tokenize())

        self._log(f"Generated {len(code)} bytes of code")
        return code

    def assemble_file(self, filepath: str | Path) -> bytes:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to assembly source file

        Returns:
            The program image

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
            UnicodeDecodeError: If the file is not UTF-8 text
        """
        filepath = Path(filepath)
        source = filepath.read_text(encoding="utf-8")
        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_code(self) -> bytes:
        """Get the program image, header included in hosted mode."""
        return self._codegen.get_code()

    def get_words(self) -> list[Word]:
        """Get the encoded words in source order."""
        return self._codegen.get_words()

    def get_origin(self) -> int:
        """Get the origin address (0 bare-metal, 256 hosted)."""
        return self._codegen.get_origin()

    def get_size(self) -> int:
        """Get the number of emitted bytes, excluding the header."""
        return self._codegen.get_size()

    def get_symbols(self) -> dict[str, int]:
        """Get the symbol table as a name -> address dictionary."""
        return self._codegen.get_symbols()

    def get_listing(self) -> str:
        """Get the assembly listing as a string."""
        return self._codegen.get_listing()

    def write_mem(self, filepath: str | Path) -> None:
        """
        Write the image as a memory file.

        Each line holds one byte as two lowercase hex digits.
        """
        self._codegen.write_mem(filepath)
        self._log(f"Wrote {filepath}")

    def write_binary(self, filepath: str | Path) -> None:
        """Write the raw image bytes."""
        self._codegen.write_binary(filepath)
        self._log(f"Wrote {len(self.get_code())} bytes to {filepath}")

    def write_listing(self, filepath: str | Path) -> None:
        """Write assembly listing file."""
        self._codegen.write_listing(filepath)
        self._log(f"Wrote listing to {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        """Write symbol table file."""
        self._codegen.write_symbols(filepath)
        self._log(f"Wrote symbols to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>", bare_metal: bool = False) -> bytes:
    """
    Convenience function to assemble source code.

    Args:
        source: Assembly source code
        filename: Virtual filename for errors
        bare_metal: Assemble at origin 0 without a size header

    Returns:
        The program image

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(bare_metal=bare_metal)
    return asm.assemble_string(source, filename)


def assemble_file(filepath: str | Path, bare_metal: bool = False) -> bytes:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(bare_metal=bare_metal)
    return asm.assemble_file(filepath)
