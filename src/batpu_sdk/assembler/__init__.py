"""
BatPU-2 Assembler
=================

This module provides a complete assembler for the BatPU-2, a small CPU with
fixed 16-bit instruction words and a 1024-instruction program memory.

The assembler converts BatPU assembly source code into a program image,
either raw big-endian words or the text form loaded into the schematic.

Main Components
---------------
- **Assembler**: Main assembler class that orchestrates the assembly process
- **lexer**: Splits lines into statements and tokens
- **Parser**: Decodes statements into labels, defines and instructions
- **CodeGenerator**: Resolves targets and packs instruction words
- **operands**: Register, immediate, offset, condition and location parsers

Assembly Process
----------------
1. **Pass 1 (parse)**:
   - Strip comments, split on ";", tokenize
   - Bind labels to the current instruction position, record defines
   - Substitute defines and validate every operand
   - Check the program fits in program space

2. **Pass 2 (assemble)**:
   - Resolve labels and relative targets
   - Pack each instruction into one 16-bit word

Example Usage
-------------
>>> from batpu_sdk.assembler import Assembler
>>> asm = Assembler()
>>> asm.assemble_string('''
... #define LIMIT 10
...     ldi r1 LIMIT
... loop:
...     dec r1
...     brh notzero loop
...     hlt
... ''')
[33034, 37375, 46081, 4096]
>>> asm.write_output("count.mc")

Supported Features
------------------
- All 16 BatPU-2 instructions and the cmp/mov/lsh/inc/dec/not/neg shorthands
- Labels with forward references
- Flat text defines, with the I/O port names predefined
- Relative jump targets (+N / -N)
- Decimal, hexadecimal, binary and character immediates
- Listing file generation
- Symbol table output
"""

from batpu_sdk.assembler.assembler import Assembler, assemble, assemble_file
from batpu_sdk.assembler.config import AssemblerConfig, StatementPolicy
from batpu_sdk.assembler.lexer import Fragment, split_line, tokenize
from batpu_sdk.assembler.parser import (
    Parser,
    Statement,
    LabelDef,
    DefineDef,
    SourceInstruction,
)
from batpu_sdk.assembler.codegen import CodeGenerator, encode_instruction, resolve_location
from batpu_sdk.assembler.output import to_binary, to_text
from batpu_sdk.assembler.symbols import Symbol, SymbolTable

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Configuration
    "AssemblerConfig",
    "StatementPolicy",
    # Lexer
    "Fragment",
    "split_line",
    "tokenize",
    # Parser
    "Parser",
    "Statement",
    "LabelDef",
    "DefineDef",
    "SourceInstruction",
    # Code generator
    "CodeGenerator",
    "encode_instruction",
    "resolve_location",
    # Output
    "to_binary",
    "to_text",
    # Symbols
    "Symbol",
    "SymbolTable",
]
