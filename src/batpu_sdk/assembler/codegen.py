"""
BatPU-2 Code Generator
======================

This module implements pass 2 of the assembler: it turns the instruction
list built by pass 1 into 16-bit machine words.

Pass 2 (Code Generation)
------------------------
- Resolve every Location (absolute address, label, relative offset) to an
  absolute address using the finished label table
- Pack opcode and operand fields into one word per instruction
- Collect an error per failing instruction and keep going

Each instruction is encoded independently from (instruction, position,
labels); the label table is never modified here.

Word Layout
-----------
```
Bits     15..12  11..8   7..4    3..0
REG3     opcode  A       B       C
REG2     opcode  A       0       C
IMM      opcode  A       imm[7:4] imm[3:0]
ADDRESS  opcode  0 0 a9 a8  a7..a0
BRANCH   opcode  c1 c0 a9 a8  a7..a0
MEMORY   opcode  A       B       offset (two's complement)
```

Listing Format
--------------
```
Addr  Word  Line  Source
0000  8105     1  ldi r1 5
0001  9101     2  inc r1
```
"""

from difflib import get_close_matches
from pathlib import Path
from typing import Mapping, Optional
import logging

from batpu_sdk.errors import (
    AssemblerError,
    ErrorCollector,
    OperandRangeError,
    UndefinedSymbolError,
)
from batpu_sdk.cpu import BATPU2, Machine
from batpu_sdk.assembler.operands import Address, LabelRef, Location, RelativeLocation
from batpu_sdk.assembler.parser import SourceInstruction
from batpu_sdk.assembler.instructions import (
    Instruction,
    NoOperation,
    Halt,
    Return,
    ThreeRegister,
    RightShift,
    LoadImmediate,
    AddImmediate,
    Jump,
    Branch,
    Call,
    MemoryAccess,
)


logger = logging.getLogger(__name__)


OPCODE_SHIFT = 12
CONDITION_SHIFT = 10
FIELD_A_SHIFT = 8
FIELD_B_SHIFT = 4
NIBBLE = 0xF
BYTE = 0xFF


# =============================================================================
# Location Resolution
# =============================================================================

def resolve_location(
    location: Location,
    position: int,
    labels: Mapping[str, int],
    machine: Machine = BATPU2,
) -> int:
    """
    Resolve a jump/branch/call target to an absolute address.

    Args:
        location: The parsed target
        position: Address of the instruction holding the target
        labels: Finished label table
        machine: Target limits

    Returns:
        Absolute instruction address

    Raises:
        UndefinedSymbolError: If a label was never defined
        OperandRangeError: If the target falls outside program space
    """
    if isinstance(location, Address):
        address = location.value

    elif isinstance(location, LabelRef):
        address = labels.get(location.name)
        if address is None:
            raise UndefinedSymbolError(
                location.name,
                similar_symbols=get_close_matches(location.name, list(labels), n=3),
            )

    elif isinstance(location, RelativeLocation):
        address = position + location.offset

    else:
        raise AssemblerError(f"Unsupported location {location!r}")

    if not 0 <= address <= machine.max_address:
        raise OperandRangeError(
            f"Address {address} for \"{location}\" out of range, "
            f"expected 0-{machine.max_address}"
        )

    return address


# =============================================================================
# Instruction Encoding
# =============================================================================

def encode_instruction(
    instruction: Instruction,
    position: int,
    labels: Mapping[str, int],
    machine: Machine = BATPU2,
) -> int:
    """
    Encode one instruction into a 16-bit word.

    Args:
        instruction: The instruction variant
        position: Its address (index in the program)
        labels: Finished label table
        machine: Target limits

    Returns:
        The instruction word

    Raises:
        UndefinedSymbolError, OperandRangeError: For unresolvable targets
    """
    word = (int(instruction.opcode) & NIBBLE) << OPCODE_SHIFT

    if isinstance(instruction, (NoOperation, Halt, Return)):
        pass

    elif isinstance(instruction, ThreeRegister):
        word |= (instruction.a.index & NIBBLE) << FIELD_A_SHIFT
        word |= (instruction.b.index & NIBBLE) << FIELD_B_SHIFT
        word |= instruction.c.index & NIBBLE

    elif isinstance(instruction, RightShift):
        word |= (instruction.a.index & NIBBLE) << FIELD_A_SHIFT
        word |= instruction.c.index & NIBBLE

    elif isinstance(instruction, (LoadImmediate, AddImmediate)):
        word |= (instruction.a.index & NIBBLE) << FIELD_A_SHIFT
        word |= instruction.immediate.bits & BYTE

    elif isinstance(instruction, (Jump, Call)):
        address = resolve_location(instruction.target, position, labels, machine)
        word |= address & machine.address_mask

    elif isinstance(instruction, Branch):
        address = resolve_location(instruction.target, position, labels, machine)
        word |= (int(instruction.condition) & 0b11) << CONDITION_SHIFT
        word |= address & machine.address_mask

    elif isinstance(instruction, MemoryAccess):
        word |= (instruction.a.index & NIBBLE) << FIELD_A_SHIFT
        word |= (instruction.b.index & NIBBLE) << FIELD_B_SHIFT
        word |= instruction.offset.bits & NIBBLE

    else:
        raise AssemblerError(f"No encoding for {type(instruction).__name__}")

    return word


# =============================================================================
# Code Generator Class
# =============================================================================

class CodeGenerator:
    """
    Pass 2 of the assembler.

    Encodes a finished instruction list against a finished label table,
    collecting one error per failing instruction.

    Usage:
        codegen = CodeGenerator()
        words = codegen.generate(program, labels)
        listing = codegen.get_listing()
    """

    def __init__(self, machine: Machine = BATPU2, max_errors: Optional[int] = None):
        self.machine = machine
        self._words: list[int] = []
        self._program: list[SourceInstruction] = []
        self._errors = ErrorCollector(max_errors=max_errors, stage="assemble")

    def generate(
        self,
        program: list[SourceInstruction],
        labels: Mapping[str, int],
    ) -> list[int]:
        """
        Encode every instruction.

        Args:
            program: Instructions in address order, with their source lines
            labels: Finished label table

        Returns:
            One word per instruction

        Raises:
            AssemblyFailedError: If any instruction failed to encode
        """
        self._words = []
        self._program = list(program)
        self._errors.clear()

        for position, stmt in enumerate(self._program):
            try:
                word = encode_instruction(stmt.instruction, position, labels, self.machine)
            except AssemblerError as e:
                self._errors.add(e.with_line(stmt.line))
                word = 0
            self._words.append(word)

        logger.debug(
            f"Encoded {len(self._words)} instructions, "
            f"{self._errors.error_count()} errors"
        )

        self._errors.raise_if_errors()
        return list(self._words)

    # =========================================================================
    # Results
    # =========================================================================

    def get_words(self) -> list[int]:
        return list(self._words)

    def has_errors(self) -> bool:
        return self._errors.has_errors()

    def get_errors(self) -> list[AssemblerError]:
        return self._errors.sorted_errors()

    def get_listing(self) -> str:
        """
        Format an assembly listing of the last successful generate().

        Returns:
            Listing text, one row per instruction
        """
        rows = ["Addr  Word  Line  Source"]
        for position, (stmt, word) in enumerate(zip(self._program, self._words)):
            rows.append(f"{position:04X}  {word:04X}  {stmt.line:4d}  {stmt.text}")
        return "\n".join(rows)

    def write_listing(self, filepath: str | Path) -> None:
        Path(filepath).write_text(self.get_listing() + "\n")
        logger.debug(f"Wrote listing to {filepath}")


def format_symbols(labels: Mapping[str, int]) -> str:
    """
    Format a label table, sorted by address then name.

    Returns:
        One "name = address" line per label
    """
    entries = sorted(labels.items(), key=lambda item: (item[1], item[0]))
    return "\n".join(f"{name} = {address} ; 0x{address:03X}" for name, address in entries)
