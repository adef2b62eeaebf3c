"""
ktdisasm - KTC32 Disassembler Command-Line Interface
=====================================================

This module implements the command-line interface for the KTC32
disassembler. It reads either a ``.mem`` file as written by ``ktasm`` or a
raw binary image.

Usage Examples
--------------
Disassemble a hosted image:
    $ ktdisasm a.mem

Disassemble a ROM image:
    $ ktdisasm --bare-metal boot.mem

Annotate jump targets with labels:
    $ ktdisasm program.mem -s program.sym

Output to file:
    $ ktdisasm program.bin -o listing.asm
"""

import sys
from pathlib import Path
from typing import Optional

import click

from ktc32_sdk import __version__
from ktc32_sdk.assembler.codegen import HOSTED_ORIGIN, BARE_METAL_ORIGIN, SIZE_HEADER_BYTES
from ktc32_sdk.cli.errors import ExitCode, setup_logging
from ktc32_sdk.disassembler import Ktc32Disassembler, parse_mem_text, parse_symbol_text


MEM_SUFFIX = ".mem"


def load_image(path: Path) -> bytes:
    """Read a ``.mem`` text file or raw binary, chosen by file suffix."""
    if path.suffix.lower() == MEM_SUFFIX:
        return parse_mem_text(path.read_text(encoding="utf-8"))
    return path.read_bytes()


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
    help="Output file (default: stdout)",
)
@click.option(
    "--bare-metal",
    is_flag=True,
    help="Image has no size header and starts at address 0",
)
@click.option(
    "-c", "--count",
    type=int,
    default=None,
    help="Maximum number of words to disassemble (default: all)",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Symbol file from ktasm -s, used to label jump targets",
)
@click.option(
    "--no-bytes",
    is_flag=True,
    help="Omit raw bytes from output (show only mnemonic and operands)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="ktdisasm")
def main(
    input_file: Path,
    output: Optional[Path],
    bare_metal: bool,
    count: Optional[int],
    symbols: Optional[Path],
    no_bytes: bool,
    verbose: bool,
) -> None:
    """
    Disassemble KTC32 machine code.

    INPUT_FILE is a .mem file (one hex byte per line) or a raw binary.

    \b
    Examples:
        ktdisasm a.mem                  # Hosted image at address 256
        ktdisasm --bare-metal rom.mem   # ROM image at address 0
        ktdisasm a.mem -s a.sym         # Label jump targets
    """
    setup_logging(verbose)

    try:
        data = load_image(input_file)
    except (OSError, ValueError) as e:
        click.echo(f"Error reading {input_file}: {e}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    symbol_table = {}
    if symbols:
        try:
            symbol_table = parse_symbol_text(symbols.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            click.echo(f"Error reading {symbols}: {e}", err=True)
            sys.exit(ExitCode.INVALID_ARGS)

    if bare_metal:
        base_address = BARE_METAL_ORIGIN
        code = data
    else:
        if len(data) < SIZE_HEADER_BYTES:
            click.echo(f"Error: {input_file} is too short for a size header", err=True)
            sys.exit(ExitCode.INVALID_ARGS)
        base_address = HOSTED_ORIGIN
        declared = int.from_bytes(data[:SIZE_HEADER_BYTES], "little")
        code = data[SIZE_HEADER_BYTES:]
        if declared != len(code):
            click.echo(
                f"Warning: size header says {declared} bytes, image has {len(code)}",
                err=True,
            )

    if verbose:
        click.echo(f"Input file: {input_file} ({len(data)} bytes)", err=True)
        click.echo(f"Base address: 0x{base_address:04x}", err=True)

    output_lines = [
        f"// Disassembly of {input_file.name}",
        f"// Size: {len(code)} bytes",
        f"// Base address: 0x{base_address:04x}",
        "",
    ]

    disasm = Ktc32Disassembler(symbol_table=symbol_table)
    instructions = disasm.disassemble(code, start_address=base_address, count=count)

    for instr in instructions:
        if instr.address in symbol_table:
            output_lines.append(f"{symbol_table[instr.address]}:")
        if no_bytes:
            output_lines.append(instr.text)
        else:
            output_lines.append(str(instr))

    result = "\n".join(output_lines) + "\n"

    if output:
        try:
            output.write_text(result, encoding="utf-8")
            if verbose:
                click.echo(f"Output written to: {output}", err=True)
        except OSError as e:
            click.echo(f"Error writing {output}: {e}", err=True)
            sys.exit(ExitCode.INVALID_ARGS)
    else:
        click.echo(result, nl=False)

    if verbose:
        click.echo(f"Words disassembled: {len(instructions)}", err=True)


# =============================================================================
# Entry Point
# =============================================================================

if __name__ == "__main__":
    main()
