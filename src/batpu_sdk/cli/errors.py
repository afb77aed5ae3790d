"""
Unified CLI Error Handling
==========================

Provides consistent error reporting and exit codes for the CLI tools.
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    """Standard exit codes for CLI tools."""
    SUCCESS = 0
    BUILD_ERROR = 1      # Parse or assembly error
    INVALID_ARGS = 2     # Invalid arguments, configuration or unusable files
    INTERNAL_ERROR = 3   # Unexpected internal error


def format_failure(error, source: str) -> str:
    """
    Format an AssemblyFailedError as a header plus one error per line.

    Example output:
        Failed to parse "prog.as", 2 error(s):
        [Line 3] Unknown opcode: lda
        [Line 7] Register 16 out of range, expected 0-15

    A pass stopped by the error cap ends with a "Too many errors" line.
    """
    from batpu_sdk.errors import TooManyErrors

    lines = [f"Failed to {error.stage} \"{source}\", {len(error.errors)} error(s):"]
    for item in error.errors:
        lines.append(str(item))
        if item.hint:
            lines.append(f"    hint: {item.hint}")
    if isinstance(error, TooManyErrors):
        lines.append(f"Too many errors ({error.limit}), stopping")
    return "\n".join(lines)


def handle_cli_exception(
    error: Exception,
    verbose: bool = False,
    source: str | None = None,
    error_type: str | None = None,
) -> NoReturn:
    """
    Unified exception handler for the CLI tools.

    Formats the error message appropriately, optionally prints traceback
    in verbose mode, and exits with the correct exit code.

    Args:
        error: The exception that was raised
        verbose: If True, print full traceback for internal errors
        source: Input file name shown in assembly failure headers
        error_type: Optional prefix for the error message (e.g., "Assembly")

    Raises:
        SystemExit: Always exits with an appropriate exit code
    """
    from batpu_sdk.errors import AssemblyFailedError, BatpuError, ConfigurationError

    if isinstance(error, AssemblyFailedError):
        # Every collected error, sorted by line
        click.echo(format_failure(error, source or "<input>"), err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, ConfigurationError):
        click.echo(f"Configuration error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, BatpuError):
        prefix = f"{error_type} error: " if error_type else "Error: "
        click.echo(f"{prefix}{error}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    elif isinstance(error, click.BadParameter):
        # Invalid command-line arguments
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, (FileNotFoundError, PermissionError, IsADirectoryError)):
        # Unreadable source or unwritable output
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    elif isinstance(error, UnicodeDecodeError):
        click.echo(f"Error: source is not valid UTF-8: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    else:
        # Unexpected internal error
        click.echo(f"Internal error: {error}", err=True)
        if verbose:
            traceback.print_exc()
        sys.exit(ExitCode.INTERNAL_ERROR)
