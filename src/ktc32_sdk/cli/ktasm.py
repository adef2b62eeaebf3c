"""
ktasm - KTC32 Assembler Command-Line Interface
===============================================

This module implements the command-line interface for the KTC32 assembler.

Usage Examples
--------------
Basic assembly (writes a.mem):
    $ ktasm program.asm

With output file:
    $ ktasm program.asm -o program.mem

ROM image without size header, origin 0:
    $ ktasm --bare-metal boot.asm -o boot.mem

Generate all output files:
    $ ktasm program.asm -o program.mem -b program.bin -l program.lst -s program.sym

Verbose mode:
    $ ktasm -v program.asm
"""

from pathlib import Path
from typing import Optional

import click

from ktc32_sdk import __version__
from ktc32_sdk.assembler import Assembler
from ktc32_sdk.cli.errors import handle_cli_exception, setup_logging


DEFAULT_OUTPUT = "a.mem"


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_OUTPUT,
    show_default=True,
    help="Output memory file (one hex byte per line)",
)
@click.option(
    "--bare-metal",
    is_flag=True,
    help="Assemble at address 0 without the 4-byte size header",
)
@click.option(
    "-b", "--binary",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write the raw image",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="ktasm")
def main(
    input_file: Path,
    output: Path,
    bare_metal: bool,
    binary: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    verbose: bool,
) -> None:
    """
    Assemble KTC32 source code.

    INPUT_FILE is the assembly source file (.asm) to assemble.

    The assembler writes a memory file with one byte per line as two hex
    digits, least-significant byte of each word first. Unless --bare-metal
    is given, the image is placed at address 256 and starts with a 4-byte
    little-endian size header.

    \b
    Examples:
        ktasm prog.asm                  # Outputs a.mem
        ktasm prog.asm -o prog.mem      # Specify output file
        ktasm --bare-metal boot.asm     # ROM image at address 0
    """
    setup_logging(verbose)
    asm = Assembler(bare_metal=bare_metal, verbose=verbose)

    if verbose:
        mode = "bare-metal (origin 0)" if bare_metal else "hosted (origin 256, size header)"
        click.echo(f"Mode: {mode}")

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        # Nothing is written unless the whole file assembles
        asm.assemble_file(input_file)

        asm.write_mem(output)
        if verbose:
            click.echo(f"Wrote {len(asm.get_code())} bytes to {output}")

        if binary:
            asm.write_binary(binary)
            if verbose:
                click.echo(f"Wrote raw image to {binary}")

        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            click.echo(
                f"Assembly complete: {asm.get_size()} bytes at 0x{asm.get_origin():04x}"
            )
            click.echo(f"Defined {len(asm.get_symbols())} labels")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
