"""
BatPU-2 Assembler - Main Interface
==================================

This module provides the main Assembler class, which is the primary interface
for assembling BatPU-2 source code. It coordinates the lexer, parser and code
generator to produce the program image.

Example Usage
-------------
>>> from batpu_sdk.assembler import Assembler
>>>
>>> asm = Assembler()
>>> words = asm.assemble_string('''
... loop:
...     inc r1
...     jmp loop
... ''')
>>> [f"{w:04X}" for w in words]
['9101', 'A000']
>>> asm.write_output("loop.mc")

Command-Line Usage
------------------
The assembler can also be invoked from the command line:

    $ batasm program.as program.mc -t -l program.lst -s program.sym

Pipeline
--------
1. **parse** (pass 1): split lines, decode statements, bind labels to the
   current instruction position and record defines. A program longer than
   the machine's program space is reported here.
2. **assemble** (pass 2): encode every instruction against the finished
   label table.

Each pass collects every error it finds and raises a single
AssemblyFailedError at its end, so one run reports all problems.
"""

from pathlib import Path
from typing import Optional
import logging

from batpu_sdk.cpu import IO_PORTS
from batpu_sdk.errors import (
    AssemblerError,
    AssemblerWarning,
    ErrorCollector,
    ProgramSizeError,
)
from batpu_sdk.assembler.config import AssemblerConfig, StatementPolicy
from batpu_sdk.assembler.lexer import Fragment, iter_lines, split_line
from batpu_sdk.assembler.symbols import SymbolTable
from batpu_sdk.assembler.parser import (
    DefineDef,
    LabelDef,
    Parser,
    SourceInstruction,
)
from batpu_sdk.assembler.codegen import CodeGenerator, format_symbols
from batpu_sdk.assembler.output import to_binary, to_text, write_image


logger = logging.getLogger(__name__)


class Assembler:
    """
    Main BatPU-2 assembler class.

    One instance assembles one program at a time. The label and define
    tables live on the instance; calling parse() again starts over with
    fresh tables.

    Attributes:
        config: Active configuration
        machine: Target machine limits (from the configuration)
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        """
        Initialize the assembler.

        Args:
            config: Assembler configuration (defaults to AssemblerConfig())
        """
        self.config = config or AssemblerConfig()
        self.machine = self.config.machine

        self._parser = Parser(self.machine)
        self._codegen = CodeGenerator(self.machine, max_errors=self.config.max_errors)
        self._errors = ErrorCollector(max_errors=self.config.max_errors, stage="parse")

        self._labels: SymbolTable[int] = SymbolTable("label")
        self._defines: SymbolTable[str] = SymbolTable("define")
        self._program: list[SourceInstruction] = []
        self._words: Optional[list[int]] = None
        self._parsed = False
        self._source_file: Optional[Path] = None

        self.reset()

    def reset(self) -> None:
        """Forget the current program and reseed the define table."""
        self._labels.clear()
        self._defines.clear()
        self._program = []
        self._words = None
        self._parsed = False
        self._errors.clear()

        if self.config.default_defines:
            for name, port in IO_PORTS.items():
                self._defines.define(name, str(port))

    # =========================================================================
    # Pass 1
    # =========================================================================

    def parse(self, source: str) -> list[SourceInstruction]:
        """
        Run the first pass over a source text.

        Args:
            source: Assembly source code

        Returns:
            The instructions in address order

        Raises:
            AssemblyFailedError: If any statement failed or the program is
                                 too large
        """
        self.reset()

        for number, line in iter_lines(source):
            for fragment in split_line(line):
                if fragment.is_empty:
                    self._empty_statement(fragment, number)
                    continue

                try:
                    self._handle_statement(fragment.text, number)
                except AssemblerError as e:
                    self._errors.add(e.with_line(number))

        count = len(self._program)
        if count > self.machine.program_space:
            self._errors.add(ProgramSizeError(count, self.machine.program_space))

        logger.debug(
            f"Pass 1: {count} instructions, {len(self._labels)} labels, "
            f"{len(self._defines)} defines, {self._errors.error_count()} errors"
        )

        self._errors.raise_if_errors()
        self._parsed = True
        return list(self._program)

    def parse_file(self, filepath: str | Path) -> list[SourceInstruction]:
        """
        Run the first pass over a source file.

        Raises:
            FileNotFoundError: If the file does not exist
            AssemblyFailedError: As for parse()
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"source file not found: {path}")

        logger.debug(f"Reading {path}")
        self._source_file = path
        return self.parse(path.read_text(encoding="utf-8"))

    def _handle_statement(self, text: str, line: int) -> None:
        stmt = self._parser.parse_statement(text, line, self._defines)

        if isinstance(stmt, LabelDef):
            self._labels.define(stmt.name, len(self._program), line=line)
            logger.debug(f"Label {stmt.name} = {len(self._program)}")

        elif isinstance(stmt, DefineDef):
            self._defines.define(stmt.name, stmt.value, line=line)
            logger.debug(f"Define {stmt.name} = {stmt.value}")

        else:
            self._program.append(stmt)

    def _empty_statement(self, fragment: Fragment, line: int) -> None:
        if fragment.trailing:
            policy = self.config.trailing_semicolon
            description = "Unnecessary semicolon at end of line"
        else:
            policy = self.config.empty_statement
            description = "Empty statement between semicolons"

        if policy is StatementPolicy.ERROR:
            self._errors.add(AssemblerError(description, line=line))
        elif policy is StatementPolicy.WARN:
            warning = AssemblerWarning(description, line)
            self._errors.add_warning(warning)
            logger.warning(f"Warning: {warning}")

    # =========================================================================
    # Pass 2
    # =========================================================================

    def assemble(self) -> list[int]:
        """
        Run the second pass over the parsed program.

        With config.print_info set, the get_info() summary is logged at
        INFO on this module's logger. Nothing is printed unless the caller
        has configured logging.

        Returns:
            One 16-bit word per instruction

        Raises:
            AssemblerError: If parse() has not completed successfully
            AssemblyFailedError: If any instruction failed to encode
        """
        if not self._parsed:
            raise AssemblerError("No parsed program to assemble")

        self._words = self._codegen.generate(self._program, self._labels)

        if self.config.print_info:
            logger.info(self.get_info())

        return list(self._words)

    def assemble_string(self, source: str) -> list[int]:
        """
        Parse and assemble source code from a string.

        Raises:
            AssemblyFailedError: From whichever pass failed
        """
        self.parse(source)
        return self.assemble()

    def assemble_file(self, filepath: str | Path) -> list[int]:
        """
        Parse and assemble a source file.

        Raises:
            FileNotFoundError: If the file does not exist
            AssemblyFailedError: From whichever pass failed
        """
        self.parse_file(filepath)
        return self.assemble()

    # =========================================================================
    # Results
    # =========================================================================

    def _require_words(self) -> list[int]:
        if self._words is None:
            raise AssemblerError("No assembled program available")
        return self._words

    def get_words(self) -> list[int]:
        return list(self._require_words())

    def get_binary(self) -> bytes:
        """Program image as big-endian words."""
        return to_binary(self._require_words())

    def get_text(self) -> str:
        """Program image as newline-separated binary strings."""
        return to_text(self._require_words())

    def get_program(self) -> list[SourceInstruction]:
        return list(self._program)

    def get_symbols(self) -> dict[str, int]:
        """Label table: name -> instruction address."""
        return self._labels.as_dict()

    def get_defines(self) -> dict[str, str]:
        """Define table, predefined port names included."""
        return self._defines.as_dict()

    def get_warnings(self) -> list[AssemblerWarning]:
        return list(self._errors.warnings)

    def get_listing(self) -> str:
        self._require_words()
        return self._codegen.get_listing()

    def utilization(self) -> float:
        """Percentage of program space used by the parsed program."""
        return len(self._program) / self.machine.program_space * 100

    def get_info(self) -> str:
        """
        Utilization summary.

        Example output:
            12 out of 1024 instructions used (1.2%)
        """
        return (
            f"{len(self._program)} out of {self.machine.program_space} "
            f"instructions used ({self.utilization():.1f}%)"
        )

    # =========================================================================
    # Output Files
    # =========================================================================

    def write_output(self, filepath: str | Path) -> None:
        """
        Write the program image in the configured form.

        Args:
            filepath: Destination path
        """
        write_image(filepath, self._require_words(), text=self.config.text_output)

    def write_listing(self, filepath: str | Path) -> None:
        self._require_words()
        self._codegen.write_listing(filepath)

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write the label table, one "name = address" line per label.
        """
        text = format_symbols(self.get_symbols())
        Path(filepath).write_text(text + "\n" if text else "")
        logger.debug(f"Wrote {len(self._labels)} symbols to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, config: Optional[AssemblerConfig] = None) -> list[int]:
    """
    Assemble source code in one call.

    Args:
        source: Assembly source code
        config: Optional configuration

    Returns:
        One 16-bit word per instruction
    """
    return Assembler(config).assemble_string(source)


def assemble_file(filepath: str | Path, config: Optional[AssemblerConfig] = None) -> list[int]:
    """
    Assemble a source file in one call.

    Args:
        filepath: Path to the source file
        config: Optional configuration

    Returns:
        One 16-bit word per instruction
    """
    return Assembler(config).assemble_file(filepath)
