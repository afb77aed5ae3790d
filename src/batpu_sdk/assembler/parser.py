"""
BatPU Assembly Language Parser
==============================

This module decodes one statement (a fragment of a source line) into
either a directive or an instruction variant.

Statement Types
---------------
1. **LabelDef**: binds a label to the current instruction position
   ```asm
   loop:
   ```

2. **DefineDef**: registers a text substitution
   ```asm
   #define COUNTER r3
   ```

3. **SourceInstruction**: one machine instruction with validated operands
   ```asm
   ldi r1 'A'
   brh notzero loop
   lod r2 r3 -1
   ```

Directives are recognised before mnemonic dispatch, so a label or define
never produces an instruction.

Pseudo-Instructions
-------------------
Several mnemonics are shorthand for a primitive with a fixed operand:

| Source      | Lowered to      |
|-------------|-----------------|
| cmp a b     | sub a b r0      |
| mov a c     | add a r0 c      |
| lsh a c     | add a a c       |
| inc a       | adi a 1         |
| dec a       | adi a -1        |
| not a c     | nor a r0 c      |
| neg a c     | sub r0 a c      |
"""

from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Union

from batpu_sdk.errors import AssemblerError, AssemblySyntaxError
from batpu_sdk.cpu import BATPU2, Machine, get_mnemonic_info
from batpu_sdk.assembler.lexer import tokenize
from batpu_sdk.assembler.operands import (
    ZERO_REGISTER,
    Immediate,
    Location,
    Offset,
    Register,
    parse_condition,
    parse_immediate,
    parse_location,
    parse_offset,
    parse_register,
)
from batpu_sdk.assembler.instructions import (
    INSTRUCTION_TYPES,
    Instruction,
    NoOperation,
    Halt,
    Addition,
    Subtraction,
    BitwiseNOR,
    BitwiseAND,
    BitwiseXOR,
    RightShift,
    LoadImmediate,
    AddImmediate,
    Jump,
    Branch,
    Call,
    Return,
    MemoryLoad,
    MemoryStore,
)


DEFINE_KEYWORD = "#define"
LABEL_SUFFIX = ":"


# =============================================================================
# Statement Data Classes
# =============================================================================

@dataclass
class Statement:
    """
    Base class for all parsed statements.

    Attributes:
        line: 1-based source line the statement came from
        text: Statement text as written (after comment removal)
    """
    line: int
    text: str


@dataclass
class LabelDef(Statement):
    """Label definition (`name:`)."""
    name: str = ""


@dataclass
class DefineDef(Statement):
    """Define directive (`#define NAME VALUE`)."""
    name: str = ""
    value: str = ""


@dataclass
class SourceInstruction(Statement):
    """
    An instruction paired with its origin.

    Attributes:
        instruction: The decoded variant
        mnemonic: Mnemonic as written, which differs from the variant's own
                  mnemonic for pseudo-instructions
        tokens: Tokens after define substitution
    """
    instruction: Instruction = field(default_factory=NoOperation)
    mnemonic: str = ""
    tokens: list[str] = field(default_factory=list)


ParsedStatement = Union[LabelDef, DefineDef, SourceInstruction]


# =============================================================================
# Helpers
# =============================================================================

def join_with_and(items: tuple[str, ...] | list[str]) -> str:
    """
    Join names as English: "A", "A and B", "A, B and C".
    """
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    return f"{', '.join(items[:-1])} and {items[-1]}"


def check_arguments(actual: int, expected: tuple[str, ...]) -> None:
    """
    Verify the operand count of a statement.

    Args:
        actual: Number of operand tokens supplied
        expected: Operand names the statement requires

    Raises:
        AssemblySyntaxError: On a count mismatch
    """
    if actual == len(expected):
        return

    if not expected:
        wanted = "no arguments"
    else:
        plural = "" if len(expected) == 1 else "s"
        wanted = f"{join_with_and(expected)} ({len(expected)} argument{plural})"

    raise AssemblySyntaxError(f"Expected {wanted}, got {actual} instead")


def substitute_defines(tokens: list[str], defines: Mapping[str, str]) -> list[str]:
    """
    Replace every token that names a define with its value.

    Substitution is a single flat pass: a define's value is not itself
    expanded again.
    """
    return [defines.get(token, token) for token in tokens]


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    Decodes statements into directives or instruction variants.

    The parser does not own the symbol tables. It reads the current define
    table for substitution and leaves binding of labels and defines to the
    caller, which knows the current instruction position.

    Usage:
        parser = Parser(machine=BATPU2)
        stmt = parser.parse_statement("ldi r1 5", line=3, defines={})
    """

    def __init__(self, machine: Machine = BATPU2):
        self.machine = machine

        # Mnemonic -> builder taking the operand tokens
        self._builders: dict[str, Callable[[list[str]], Instruction]] = {
            "nop": lambda args: NoOperation(),
            "hlt": lambda args: Halt(),
            "add": lambda args: Addition(*self._registers(args)),
            "sub": lambda args: Subtraction(*self._registers(args)),
            "nor": lambda args: BitwiseNOR(*self._registers(args)),
            "and": lambda args: BitwiseAND(*self._registers(args)),
            "xor": lambda args: BitwiseXOR(*self._registers(args)),
            "rsh": lambda args: RightShift(*self._registers(args)),
            "ldi": lambda args: LoadImmediate(
                self._register(args[0]), self._immediate(args[1])
            ),
            "adi": lambda args: AddImmediate(
                self._register(args[0]), self._immediate(args[1])
            ),
            "jmp": lambda args: Jump(self._location(args[0])),
            "brh": lambda args: Branch(
                parse_condition(args[0]), self._location(args[1])
            ),
            "cal": lambda args: Call(self._location(args[0])),
            "ret": lambda args: Return(),
            "lod": lambda args: MemoryLoad(
                self._register(args[0]), self._register(args[1]), self._offset(args[2])
            ),
            "str": lambda args: MemoryStore(
                self._register(args[0]), self._register(args[1]), self._offset(args[2])
            ),
            # Pseudo-instructions
            "cmp": self._build_cmp,
            "mov": self._build_mov,
            "lsh": self._build_lsh,
            "inc": lambda args: AddImmediate(self._register(args[0]), Immediate(1)),
            "dec": lambda args: AddImmediate(self._register(args[0]), Immediate(-1)),
            "not": self._build_not,
            "neg": self._build_neg,
        }

    # =========================================================================
    # Public Interface
    # =========================================================================

    def parse_statement(
        self,
        text: str,
        line: int,
        defines: Optional[Mapping[str, str]] = None,
    ) -> ParsedStatement:
        """
        Decode one non-empty statement.

        Args:
            text: Statement text (trimmed, comment removed)
            line: Source line number
            defines: Current define table used for token substitution

        Returns:
            LabelDef, DefineDef or SourceInstruction

        Raises:
            AssemblySyntaxError: For malformed statements or operands
            OperandRangeError: For operands outside their domain
        """
        tokens = tokenize(text)
        if not tokens:
            raise AssemblySyntaxError("Empty statement")

        name = tokens[0]

        if name.endswith(LABEL_SUFFIX):
            return self._parse_label(tokens, line, text)

        if name == DEFINE_KEYWORD:
            check_arguments(len(tokens) - 1, ("Name", "Value"))
            return DefineDef(line, text, name=tokens[1], value=tokens[2])

        # Only operands are substituted; the mnemonic is matched as written
        args = tokens[1:]
        if defines:
            args = substitute_defines(args, defines)

        instruction = self.parse_instruction(name, args)
        return SourceInstruction(
            line, text, instruction=instruction, mnemonic=name, tokens=[name, *args]
        )

    def parse_instruction(self, mnemonic: str, args: list[str]) -> Instruction:
        """
        Build an instruction variant from a mnemonic and its operand tokens.

        Operands are parsed left to right, so the first bad operand is the
        one reported.

        Raises:
            AssemblySyntaxError: For an unknown mnemonic, wrong operand count
                                 or malformed operand
            OperandRangeError: For operands outside their domain
            AssemblerError: If the builder for a mnemonic produced a variant
                            that does not match its table opcode
        """
        info = get_mnemonic_info(mnemonic)
        if info is None:
            raise AssemblySyntaxError(f"Unknown opcode: {mnemonic}")

        check_arguments(len(args), info.operands)
        instruction = self._builders[mnemonic](args)

        expected = INSTRUCTION_TYPES[info.opcode]
        if not isinstance(instruction, expected):
            raise AssemblerError(
                f"{mnemonic} built {type(instruction).__name__}, "
                f"expected {expected.__name__} for opcode {info.opcode.name}"
            )
        return instruction

    # =========================================================================
    # Directives
    # =========================================================================

    def _parse_label(self, tokens: list[str], line: int, text: str) -> LabelDef:
        check_arguments(len(tokens) - 1, ())

        name = tokens[0][: -len(LABEL_SUFFIX)]
        if not name:
            raise AssemblySyntaxError("Label name must not be empty")

        return LabelDef(line, text, name=name)

    # =========================================================================
    # Operand Helpers
    # =========================================================================

    def _register(self, token: str) -> Register:
        return parse_register(token, self.machine)

    def _registers(self, args: list[str]) -> list[Register]:
        return [self._register(token) for token in args]

    def _immediate(self, token: str) -> Immediate:
        return parse_immediate(token, self.machine)

    def _offset(self, token: str) -> Offset:
        return parse_offset(token, self.machine)

    def _location(self, token: str) -> Location:
        return parse_location(token, self.machine)

    # =========================================================================
    # Pseudo-Instruction Lowering
    # =========================================================================

    def _build_cmp(self, args: list[str]) -> Instruction:
        # Result discarded into r0, only the flags matter
        return Subtraction(self._register(args[0]), self._register(args[1]), ZERO_REGISTER)

    def _build_mov(self, args: list[str]) -> Instruction:
        return Addition(self._register(args[0]), ZERO_REGISTER, self._register(args[1]))

    def _build_lsh(self, args: list[str]) -> Instruction:
        a = self._register(args[0])
        return Addition(a, a, self._register(args[1]))

    def _build_not(self, args: list[str]) -> Instruction:
        return BitwiseNOR(self._register(args[0]), ZERO_REGISTER, self._register(args[1]))

    def _build_neg(self, args: list[str]) -> Instruction:
        return Subtraction(ZERO_REGISTER, self._register(args[0]), self._register(args[1]))
