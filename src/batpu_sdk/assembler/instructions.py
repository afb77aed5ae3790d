"""
BatPU-2 Instruction Variants
============================

One frozen dataclass per machine instruction. Each variant carries exactly
the operands its opcode needs, already validated, and knows its opcode
index. Pseudo-instructions (cmp, mov, inc, ...) never appear here: the
parser lowers them to one of these sixteen primitives.

| Variant        | Opcode | Operands                 |
|----------------|--------|--------------------------|
| NoOperation    | 0      |                          |
| Halt           | 1      |                          |
| Addition       | 2      | a, b, c                  |
| Subtraction    | 3      | a, b, c                  |
| BitwiseNOR     | 4      | a, b, c                  |
| BitwiseAND     | 5      | a, b, c                  |
| BitwiseXOR     | 6      | a, b, c                  |
| RightShift     | 7      | a, c                     |
| LoadImmediate  | 8      | a, immediate             |
| AddImmediate   | 9      | a, immediate             |
| Jump           | 10     | target                   |
| Branch         | 11     | condition, target        |
| Call           | 12     | target                   |
| Return         | 13     |                          |
| MemoryLoad     | 14     | a, b, offset             |
| MemoryStore    | 15     | a, b, offset             |
"""

from dataclasses import dataclass, fields
from typing import ClassVar

from batpu_sdk.cpu import Condition, Format, Opcode, get_format
from batpu_sdk.assembler.operands import Immediate, Location, Offset, Register


@dataclass(frozen=True)
class Instruction:
    """
    Base class for all instruction variants.

    Subclasses set OPCODE and MNEMONIC as class attributes.
    """
    OPCODE: ClassVar[Opcode]
    MNEMONIC: ClassVar[str]

    @property
    def opcode(self) -> Opcode:
        return self.OPCODE

    @property
    def format(self) -> Format:
        return get_format(self.OPCODE)

    def operands(self) -> tuple:
        """Operand values in source order."""
        return tuple(getattr(self, f.name) for f in fields(self))

    def __str__(self) -> str:
        parts = [self.MNEMONIC]
        for value in self.operands():
            if isinstance(value, Condition):
                parts.append(value.keyword)
            else:
                parts.append(str(value))
        return " ".join(parts)


# =============================================================================
# No-Operand Instructions
# =============================================================================

@dataclass(frozen=True)
class NoOperation(Instruction):
    OPCODE: ClassVar[Opcode] = Opcode.NOP
    MNEMONIC: ClassVar[str] = "nop"


@dataclass(frozen=True)
class Halt(Instruction):
    OPCODE: ClassVar[Opcode] = Opcode.HLT
    MNEMONIC: ClassVar[str] = "hlt"


@dataclass(frozen=True)
class Return(Instruction):
    OPCODE: ClassVar[Opcode] = Opcode.RET
    MNEMONIC: ClassVar[str] = "ret"


# =============================================================================
# Register Arithmetic and Logic
# =============================================================================

@dataclass(frozen=True)
class ThreeRegister(Instruction):
    """C = A op B"""
    a: Register
    b: Register
    c: Register


@dataclass(frozen=True)
class Addition(ThreeRegister):
    OPCODE: ClassVar[Opcode] = Opcode.ADD
    MNEMONIC: ClassVar[str] = "add"


@dataclass(frozen=True)
class Subtraction(ThreeRegister):
    OPCODE: ClassVar[Opcode] = Opcode.SUB
    MNEMONIC: ClassVar[str] = "sub"


@dataclass(frozen=True)
class BitwiseNOR(ThreeRegister):
    OPCODE: ClassVar[Opcode] = Opcode.NOR
    MNEMONIC: ClassVar[str] = "nor"


@dataclass(frozen=True)
class BitwiseAND(ThreeRegister):
    OPCODE: ClassVar[Opcode] = Opcode.AND
    MNEMONIC: ClassVar[str] = "and"


@dataclass(frozen=True)
class BitwiseXOR(ThreeRegister):
    OPCODE: ClassVar[Opcode] = Opcode.XOR
    MNEMONIC: ClassVar[str] = "xor"


@dataclass(frozen=True)
class RightShift(Instruction):
    """C = A >> 1"""
    OPCODE: ClassVar[Opcode] = Opcode.RSH
    MNEMONIC: ClassVar[str] = "rsh"
    a: Register
    c: Register


# =============================================================================
# Immediate Instructions
# =============================================================================

@dataclass(frozen=True)
class LoadImmediate(Instruction):
    OPCODE: ClassVar[Opcode] = Opcode.LDI
    MNEMONIC: ClassVar[str] = "ldi"
    a: Register
    immediate: Immediate


@dataclass(frozen=True)
class AddImmediate(Instruction):
    OPCODE: ClassVar[Opcode] = Opcode.ADI
    MNEMONIC: ClassVar[str] = "adi"
    a: Register
    immediate: Immediate


# =============================================================================
# Control Flow
# =============================================================================

@dataclass(frozen=True)
class Jump(Instruction):
    OPCODE: ClassVar[Opcode] = Opcode.JMP
    MNEMONIC: ClassVar[str] = "jmp"
    target: Location


@dataclass(frozen=True)
class Branch(Instruction):
    OPCODE: ClassVar[Opcode] = Opcode.BRH
    MNEMONIC: ClassVar[str] = "brh"
    condition: Condition
    target: Location


@dataclass(frozen=True)
class Call(Instruction):
    OPCODE: ClassVar[Opcode] = Opcode.CAL
    MNEMONIC: ClassVar[str] = "cal"
    target: Location


# =============================================================================
# Memory Access
# =============================================================================

@dataclass(frozen=True)
class MemoryAccess(Instruction):
    """Address is A + offset; B is the data register."""
    a: Register
    b: Register
    offset: Offset


@dataclass(frozen=True)
class MemoryLoad(MemoryAccess):
    OPCODE: ClassVar[Opcode] = Opcode.LOD
    MNEMONIC: ClassVar[str] = "lod"


@dataclass(frozen=True)
class MemoryStore(MemoryAccess):
    OPCODE: ClassVar[Opcode] = Opcode.STR
    MNEMONIC: ClassVar[str] = "str"


# Every concrete variant, indexed by opcode
INSTRUCTION_TYPES: dict[Opcode, type[Instruction]] = {
    cls.OPCODE: cls
    for cls in (
        NoOperation, Halt, Addition, Subtraction, BitwiseNOR, BitwiseAND,
        BitwiseXOR, RightShift, LoadImmediate, AddImmediate, Jump, Branch,
        Call, Return, MemoryLoad, MemoryStore,
    )
}
