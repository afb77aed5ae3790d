"""
BatPU SDK Error Hierarchy
=========================

This module defines the exception hierarchy for the entire BatPU SDK.
All exceptions inherit from BatpuError, allowing callers to catch all
SDK-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
BatpuError (base)
├── ConfigurationError - invalid assembler or machine configuration
└── AssemblerError (assembler-related)
    ├── AssemblySyntaxError - malformed statement, operand or literal
    ├── OperandRangeError - operand parsed but outside its numeric domain
    ├── UndefinedSymbolError - reference to a label that was never defined
    ├── DuplicateSymbolError - label or define bound more than once
    ├── ProgramSizeError - program does not fit in program space
    └── AssemblyFailedError - a pass finished with collected errors
        └── TooManyErrors - error cap reached

Design Philosophy
-----------------
Each assembler error carries the 1-based source line it came from, when
known. Errors without a line are "global" (for example the program size
check) and sort before every numbered error.

Error messages follow this format:
    [Line N] description
    description               (no line known)
"""

from dataclasses import dataclass
from functools import total_ordering
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class BatpuError(Exception):
    """
    Base exception for all BatPU SDK errors.

    All exceptions in the SDK inherit from this class, allowing callers
    to catch all SDK-related errors with a single except clause:

        try:
            assembler.assemble_file("program.as")
        except BatpuError as e:
            print(f"Error: {e}")
    """
    pass


class ConfigurationError(BatpuError):
    """
    Invalid configuration value.

    Raised when an AssemblerConfig or Machine is built with values that
    cannot describe a working target (for example a program space that
    does not fit in the address field).
    """
    pass


# =============================================================================
# Assembler Exceptions
# =============================================================================

@total_ordering
class AssemblerError(BatpuError):
    """
    Base exception for all assembler-related errors.

    Errors compare by line number so a list of them can be sorted into
    report order. Errors without a line sort first.

    Attributes:
        description: The error description
        line: 1-based source line, or None for global errors
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(
        self,
        description: str,
        line: Optional[int] = None,
        hint: Optional[str] = None,
    ):
        self.description = description
        self.line = line
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with its line prefix.

        Example output:
            [Line 15] Unknown label "prnt_char"
        """
        if self.line is None:
            return self.description
        return f"[Line {self.line}] {self.description}"

    def with_line(self, line: int) -> "AssemblerError":
        """Attach a line number to an error raised without one."""
        if self.line is None:
            self.line = line
            self.args = (self._format_message(),)
        return self

    def _sort_key(self) -> tuple[int, int]:
        return (0, 0) if self.line is None else (1, self.line)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AssemblerError):
            return NotImplemented
        return (self._sort_key(), self.description) == (other._sort_key(), other.description)

    def __lt__(self, other: "AssemblerError") -> bool:
        if not isinstance(other, AssemblerError):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self) -> int:
        return hash((self._sort_key(), self.description))


class AssemblySyntaxError(AssemblerError):
    """
    Syntax error in assembly source code.

    Examples:
        - Unknown mnemonic or condition keyword
        - Wrong number of operands for a mnemonic
        - Register token not of the form rN
        - Malformed numeric or character literal
        - Empty statement between two semicolons
    """
    pass


class OperandRangeError(AssemblerError):
    """
    Operand outside its numeric domain.

    The token parsed cleanly but its value does not fit the field it
    is destined for: registers 0-15, immediates -128..255, offsets
    -8..7, addresses inside program space.
    """
    pass


class UndefinedSymbolError(AssemblerError):
    """
    Reference to a label that was never defined.

    Raised during the second pass, once every label definition in the
    source has been seen. The line is the line of the referencing
    instruction.
    """

    def __init__(
        self,
        symbol: str,
        line: Optional[int] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        hint = None
        if self.similar_symbols:
            suggestions = ", ".join(f'"{s}"' for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(f'Unknown label "{symbol}"', line=line, hint=hint)


class DuplicateSymbolError(AssemblerError):
    """
    Label or define bound more than once.

    The first binding is kept; the offending definition is reported
    along with the line of the original one when it is known.
    """

    def __init__(
        self,
        symbol: str,
        kind: str = "label",
        line: Optional[int] = None,
        original_line: Optional[int] = None,
    ):
        self.symbol = symbol
        self.kind = kind
        self.original_line = original_line

        hint = None
        if original_line:
            hint = f'"{symbol}" was first defined on line {original_line}'

        if kind == "define":
            description = f'Definition of "{symbol}" already exists'
        else:
            description = f'Label "{symbol}" was already defined'

        super().__init__(description, line=line, hint=hint)


class ProgramSizeError(AssemblerError):
    """
    Program does not fit in program space.

    Reported once, without a line, after the first pass when the
    instruction count exceeds the machine's addressable instructions.
    """

    def __init__(self, count: int, capacity: int):
        self.count = count
        self.capacity = capacity
        super().__init__(
            f"Program reached maximum size ({capacity} instructions), "
            f"got {count}"
        )


class AssemblyFailedError(AssemblerError):
    """
    A pass finished with one or more collected errors.

    Carries every error found during the pass, already sorted by line,
    so callers can report them all at once.

    Attributes:
        stage: "parse" or "assemble"
        errors: The collected AssemblerError instances
    """

    def __init__(self, stage: str, errors: list[AssemblerError]):
        self.stage = stage
        self.errors = sorted(errors)
        count = len(self.errors)
        word = "error" if count == 1 else "errors"
        body = "\n".join(str(e) for e in self.errors)
        super().__init__(f"{stage.capitalize()} failed with {count} {word}:\n{body}")


class TooManyErrors(AssemblyFailedError):
    """
    A pass stopped early because it reached the configured error cap.

    Only used when the configuration sets an error cap. Carries the
    errors collected up to the cap, like AssemblyFailedError.

    Attributes:
        limit: The error cap that was reached
    """

    def __init__(self, stage: str, errors: list[AssemblerError], limit: int):
        self.limit = limit
        super().__init__(stage, errors)
        self.description += f"\nToo many errors ({limit}), stopping"
        self.args = (self._format_message(),)


# =============================================================================
# Warnings
# =============================================================================

@dataclass(frozen=True)
class AssemblerWarning:
    """
    A non-fatal diagnostic, for example a useless trailing semicolon.

    Attributes:
        description: Warning text
        line: 1-based source line, or None
    """
    description: str
    line: Optional[int] = None

    def __str__(self) -> str:
        if self.line is None:
            return self.description
        return f"[Line {self.line}] {self.description}"


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects multiple errors for batch reporting.

    The assembler uses this to continue processing after encountering
    an error, collecting all errors before reporting them together.
    This helps users fix multiple issues without repeated assembly runs.

    Example:
        collector = ErrorCollector(stage="parse")

        for line_number, line in enumerate(lines, start=1):
            try:
                handle(line)
            except AssemblerError as e:
                collector.add(e.with_line(line_number))

        collector.raise_if_errors()
    """

    def __init__(self, max_errors: Optional[int] = None, stage: str = "parse"):
        """
        Initialize the error collector.

        Args:
            max_errors: Maximum errors to collect before raising TooManyErrors,
                        or None for no limit
            stage: Pass name used in failure messages
        """
        self.errors: list[AssemblerError] = []
        self.warnings: list[AssemblerWarning] = []
        self.max_errors = max_errors
        self.stage = stage

    def add(self, error: AssemblerError) -> None:
        """
        Add an error to the collection.

        Args:
            error: The error to add

        Raises:
            TooManyErrors: If max_errors has been reached, carrying every
                           error collected so far
        """
        self.errors.append(error)
        if self.max_errors is not None and len(self.errors) >= self.max_errors:
            raise TooManyErrors(self.stage, self.errors, self.max_errors)

    def add_warning(self, warning: AssemblerWarning) -> None:
        """Add a warning."""
        self.warnings.append(warning)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def sorted_errors(self) -> list[AssemblerError]:
        """Return the errors ordered by line, global errors first."""
        return sorted(self.errors)

    def raise_if_errors(self, stage: Optional[str] = None) -> None:
        """
        Raise AssemblyFailedError carrying every collected error.

        Args:
            stage: Pass name used in the failure message (defaults to the
                   collector's own stage)

        Raises:
            AssemblyFailedError: If any errors were collected
        """
        if self.errors:
            raise AssemblyFailedError(stage or self.stage, self.errors)

    def clear(self) -> None:
        """Clear all collected errors and warnings."""
        self.errors.clear()
        self.warnings.clear()
