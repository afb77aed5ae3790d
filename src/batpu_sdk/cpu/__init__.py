"""
BatPU SDK CPU Package
=====================

This package contains the BatPU-2 architecture definitions used by the
assembler: machine limits, opcode indices and word formats, branch
conditions, the display character set and the memory-mapped I/O ports.

Keeping the machine description apart from the assembler means the
encoder and the operand parsers read the same limits, so a value accepted
by a parser always fits the field the encoder packs it into.

Usage:
    from batpu_sdk.cpu import (
        BATPU2,
        Machine,
        Opcode,
        MNEMONICS,
    )
"""

# =============================================================================
# Public API Exports
# =============================================================================

from batpu_sdk.cpu.batpu2 import (
    # Machine limits
    Machine,
    BATPU2,
    # Opcodes and formats
    Opcode,
    Format,
    OPCODE_FORMATS,
    # Conditions
    Condition,
    CONDITION_KEYWORDS,
    # Character set and ports
    CHARACTER_TABLE,
    IO_PORTS,
    character_code,
    # Mnemonics
    MnemonicInfo,
    MNEMONICS,
    get_mnemonic_info,
    is_valid_instruction,
    get_format,
)

__all__ = [
    # Machine limits
    "Machine",
    "BATPU2",
    # Opcodes and formats
    "Opcode",
    "Format",
    "OPCODE_FORMATS",
    # Conditions
    "Condition",
    "CONDITION_KEYWORDS",
    # Character set and ports
    "CHARACTER_TABLE",
    "IO_PORTS",
    "character_code",
    # Mnemonics
    "MnemonicInfo",
    "MNEMONICS",
    "get_mnemonic_info",
    "is_valid_instruction",
    "get_format",
]
