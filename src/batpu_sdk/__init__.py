"""
BatPU SDK - Assembler Toolchain for the BatPU-2
===============================================

This package provides an assembler for the BatPU-2, an 8-bit CPU with
sixteen registers, fixed 16-bit instruction words and memory-mapped
screen, character display, number display, RNG and controller ports.

Main Components
---------------
- **assembler**: BatPU-2 assembler (batasm)
    Converts assembly source files (.as) to program images (.mc)

- **cpu**: Machine definition
    Opcodes, word formats, branch conditions, character set, I/O ports

Quick Start
-----------
Assemble a program:
    >>> from batpu_sdk.assembler import Assembler
    >>> asm = Assembler()
    >>> words = asm.assemble_file("hello.as")
    >>> asm.write_output("hello.mc")

Or use the command-line tool:
    $ batasm hello.as hello.mc

Version History
---------------
1.0.0 - Initial release with assembler and command-line tool
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from batpu_sdk.assembler import (
    Assembler,
    AssemblerConfig,
    StatementPolicy,
    assemble,
    assemble_file,
)
from batpu_sdk.cpu import BATPU2, Machine
from batpu_sdk.errors import (
    BatpuError,
    ConfigurationError,
    AssemblerError,
    AssemblySyntaxError,
    OperandRangeError,
    UndefinedSymbolError,
    DuplicateSymbolError,
    ProgramSizeError,
    AssemblyFailedError,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "AssemblerConfig",
    "StatementPolicy",
    "assemble",
    "assemble_file",
    # Machine
    "BATPU2",
    "Machine",
    # Exception hierarchy
    "BatpuError",
    "ConfigurationError",
    "AssemblerError",
    "AssemblySyntaxError",
    "OperandRangeError",
    "UndefinedSymbolError",
    "DuplicateSymbolError",
    "ProgramSizeError",
    "AssemblyFailedError",
]
