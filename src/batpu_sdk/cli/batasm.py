"""
batasm - BatPU-2 Assembler Command-Line Interface
=================================================

This module implements the command-line interface for the BatPU-2
assembler.

Usage Examples
--------------
Basic assembly:
    $ batasm program.as program.mc

Text image for the schematic loader:
    $ batasm program.as program.mc -t

Generate all output files:
    $ batasm program.as program.mc -l program.lst -s program.sym

Treat trailing semicolons as errors:
    $ batasm --strict program.as program.mc

Verbose mode:
    $ batasm -v program.as program.mc

Environment variables (BATPU_DEFAULT_DEFINES, BATPU_TEXT_OUTPUT,
BATPU_TRAILING_SEMICOLON, BATPU_EMPTY_STATEMENT) set defaults that the
options above override.
"""

from pathlib import Path
from typing import Optional
import logging

import click

from batpu_sdk import __version__
from batpu_sdk.assembler import Assembler, AssemblerConfig, StatementPolicy
from batpu_sdk.cli.errors import handle_cli_exception


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.argument(
    "output_file",
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-d", "--no-default-defines",
    is_flag=True,
    help="Do not predefine the I/O port names (SCR_PIX_X, RNG, ...)",
)
@click.option(
    "-p", "--no-print-info",
    is_flag=True,
    help="Do not print the utilization summary",
)
@click.option(
    "-t", "--text-output",
    is_flag=True,
    help="Write one 16-character binary string per line instead of raw bytes",
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
    "--strict",
    is_flag=True,
    help="Report trailing semicolons as errors instead of warnings",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="batasm")
def main(
    input_file: Path,
    output_file: Path,
    no_default_defines: bool,
    no_print_info: bool,
    text_output: bool,
    listing: Optional[Path],
    symbols: Optional[Path],
    strict: bool,
    verbose: bool,
) -> None:
    """
    Assemble BatPU-2 source code.

    INPUT_FILE is the assembly source file (.as) to assemble.
    OUTPUT_FILE receives the program image (.mc).

    \b
    Examples:
        batasm hello.as hello.mc        # Raw big-endian words
        batasm hello.as hello.mc -t     # Text image
        batasm -d hello.as hello.mc     # No predefined port names
    """
    setup_logging(verbose)

    try:
        config = AssemblerConfig.from_env()
        # The CLI prints the summary itself
        config.print_info = False
        if no_default_defines:
            config.default_defines = False
        if text_output:
            config.text_output = True
        if strict:
            config.trailing_semicolon = StatementPolicy.ERROR

        asm = Assembler(config)

        if verbose:
            click.echo(f"Assembling {input_file}...")

        asm.assemble_file(input_file)
        asm.write_output(output_file)

        # Write optional auxiliary files
        if listing:
            asm.write_listing(listing)
            if verbose:
                click.echo(f"Wrote listing to {listing}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if not no_print_info:
            click.echo(asm.get_info())
            click.echo(f"Assembled \"{input_file}\" to \"{output_file}\"")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, source=str(input_file), error_type="Assembly")


if __name__ == "__main__":
    main()
