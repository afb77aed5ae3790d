"""
BatPU Operand Parsing
=====================

This module turns raw operand tokens into validated operand values.
Tokens arrive after define substitution, so "SCR_PIX_X" has already
become "240" by the time it is parsed here.

Operand Kinds
-------------
| Kind      | Syntax                         | Domain             |
|-----------|--------------------------------|--------------------|
| Register  | r0 .. r15                      | 0 .. 15            |
| Immediate | 42, -1, 0xFF, 0b1010, 'A'      | -128 .. 255        |
| Offset    | -8 .. 7 (same number syntax)   | -8 .. 7            |
| Condition | zero, notzero, carry, notcarry | 2-bit code         |
| Location  | 12, +3, -2, label_name         | 0 .. program space |

Number Formats
--------------
| Format      | Prefix | Example    | Value |
|-------------|--------|------------|-------|
| Decimal     | (none) | 123        | 123   |
| Hexadecimal | 0x     | 0x7F       | 127   |
| Binary      | 0b     | 0b1010     | 10    |

Underscores may separate digits anywhere ("0b1111_0000") and are removed
before parsing. A leading "-" or "+" is accepted in front of any format.

Errors
------
Every parser raises AssemblySyntaxError for a malformed token and
OperandRangeError for a well-formed token outside its domain. Errors are
raised without a line number; the assembler attaches the line of the
statement being processed.
"""

from dataclasses import dataclass
from typing import Union
import re

from batpu_sdk.cpu import (
    BATPU2,
    CHARACTER_TABLE,
    CONDITION_KEYWORDS,
    Condition,
    Machine,
    character_code,
)
from batpu_sdk.errors import AssemblySyntaxError, OperandRangeError


# =============================================================================
# Operand Value Types
# =============================================================================

@dataclass(frozen=True)
class Register:
    """A general-purpose register index."""
    index: int

    def __str__(self) -> str:
        return f"r{self.index}"


# Register 0 always reads as zero; pseudo-instructions use it as a constant
ZERO_REGISTER = Register(0)


@dataclass(frozen=True)
class Immediate:
    """
    An 8-bit immediate.

    Attributes:
        value: Logical value as written (-128 .. 255)
    """
    value: int

    @property
    def bits(self) -> int:
        """The 8-bit pattern stored in the instruction word."""
        return self.value & 0xFF

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Offset:
    """
    A signed load/store offset.

    Attributes:
        value: Logical value (-8 .. 7)
    """
    value: int

    @property
    def bits(self) -> int:
        """The 4-bit two's-complement pattern stored in the instruction word."""
        return self.value & 0xF

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Address:
    """An absolute instruction address."""
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class LabelRef:
    """A reference to a label, resolved in pass 2."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class RelativeLocation:
    """
    An address relative to the referencing instruction.

    "+2" means two instructions after this one, "-1" the one before.
    """
    offset: int

    def __str__(self) -> str:
        return f"{self.offset:+d}"


Location = Union[Address, LabelRef, RelativeLocation]


# =============================================================================
# Number Parsing
# =============================================================================

_DIGITS = {
    10: re.compile(r"[0-9]+"),
    16: re.compile(r"[0-9a-fA-F]+"),
    2: re.compile(r"[01]+"),
}


def parse_integer(text: str, signed: bool = True) -> int:
    """
    Parse a decimal, 0x hexadecimal or 0b binary integer.

    Args:
        text: The token to parse
        signed: Accept a leading "+" or "-"

    Returns:
        The integer value

    Raises:
        ValueError: If the token is not a number; the message says why
    """
    digits = text.replace("_", "")

    sign = 1
    if signed and digits[:1] in ("+", "-"):
        if digits[0] == "-":
            sign = -1
        digits = digits[1:]

    if digits.startswith("0x"):
        base, digits = 16, digits[2:]
    elif digits.startswith("0b"):
        base, digits = 2, digits[2:]
    else:
        base = 10

    if not digits:
        raise ValueError("cannot parse integer from empty string")
    if not _DIGITS[base].fullmatch(digits):
        raise ValueError("invalid digit found in string")

    return sign * int(digits, base)


# =============================================================================
# Operand Parsers
# =============================================================================

def parse_register(token: str, machine: Machine = BATPU2) -> Register:
    """
    Parse a register token such as "r7".

    Raises:
        AssemblySyntaxError: If the token is not "r" followed by digits
        OperandRangeError: If the register number is out of range
    """
    if not token.startswith("r"):
        raise AssemblySyntaxError(
            f"Register \"{token}\" must start with a lowercase 'r'"
        )

    digits = token[1:]
    if not _DIGITS[10].fullmatch(digits):
        raise AssemblySyntaxError(
            f"Failed to parse register \"{token}\": expected a register number after 'r'"
        )

    index = int(digits)
    if index >= machine.register_count:
        raise OperandRangeError(
            f"Register {index} out of range, expected 0-{machine.register_count - 1}"
        )

    return Register(index)


def parse_character(token: str) -> Immediate:
    """
    Parse a character immediate such as "'A'".

    The value is the character's index in the display character set.

    Raises:
        AssemblySyntaxError: If the literal is malformed or unsupported
    """
    if len(token) < 2 or not token.endswith("'"):
        raise AssemblySyntaxError(f"Immediate \"{token}\" must end with \"'\"")

    body = token[1:-1]
    if len(body) != 1:
        raise AssemblySyntaxError(
            f"Immediate \"{token}\" must only contain a single character"
        )

    code = character_code(body)
    if code is None:
        raise AssemblySyntaxError(
            f"Character \"{body}\" is not supported, "
            f"you can only use ones in \"{''.join(CHARACTER_TABLE)}\""
        )

    return Immediate(code)


def parse_immediate(token: str, machine: Machine = BATPU2) -> Immediate:
    """
    Parse an immediate: a number or a quoted character.

    Raises:
        AssemblySyntaxError: If the token is malformed
        OperandRangeError: If the number is outside the immediate range
    """
    if token.startswith("'"):
        return parse_character(token)

    try:
        value = parse_integer(token)
    except ValueError as e:
        raise AssemblySyntaxError(f"Failed to parse immediate \"{token}\": {e}") from e

    if not machine.immediate_min <= value <= machine.immediate_max:
        raise OperandRangeError(
            f"Immediate {token} out of range, "
            f"expected {machine.immediate_min}-{machine.immediate_max}"
        )

    return Immediate(value)


def parse_offset(token: str, machine: Machine = BATPU2) -> Offset:
    """
    Parse a load/store offset.

    Raises:
        AssemblySyntaxError: If the token is not a number
        OperandRangeError: If the value is outside the offset range
    """
    try:
        value = parse_integer(token)
    except ValueError as e:
        raise AssemblySyntaxError(f"Failed to parse offset \"{token}\": {e}") from e

    if not machine.offset_min <= value <= machine.offset_max:
        raise OperandRangeError(
            f"Offset {token} out of range, "
            f"expected {machine.offset_min}-{machine.offset_max}"
        )

    return Offset(value)


def parse_condition(token: str) -> Condition:
    """
    Parse a branch condition keyword.

    Raises:
        AssemblySyntaxError: If the keyword is not recognised
    """
    condition = CONDITION_KEYWORDS.get(token)
    if condition is None:
        raise AssemblySyntaxError(
            f"Unknown condition: \"{token}\"",
            hint=f"expected one of {', '.join(CONDITION_KEYWORDS)}",
        )
    return condition


def parse_location(token: str, machine: Machine = BATPU2) -> Location:
    """
    Parse a jump, branch or call target.

    "+N" and "-N" are relative to the instruction itself, a number is an
    absolute address, and anything else names a label.

    Raises:
        AssemblySyntaxError: If a relative offset is malformed
        OperandRangeError: If an absolute address is outside program space
    """
    if token[:1] in ("+", "-"):
        try:
            magnitude = parse_integer(token[1:], signed=False)
        except ValueError as e:
            raise AssemblySyntaxError(
                f"Failed to parse address offset \"{token}\": {e}"
            ) from e
        return RelativeLocation(magnitude if token[0] == "+" else -magnitude)

    try:
        address = parse_integer(token, signed=False)
    except ValueError:
        return LabelRef(token)

    if address > machine.max_address:
        raise OperandRangeError(
            f"Address {address} out of range, expected 0-{machine.max_address}"
        )

    return Address(address)
