"""
BatPU-2 Instruction Set Definition
==================================

This module defines the BatPU-2 machine: its limits, its sixteen opcodes,
the branch conditions, the character set used by character immediates and
the memory-mapped I/O ports.

The BatPU-2 executes fixed 16-bit instruction words. The top four bits of
every word select the opcode; the remaining twelve bits are laid out per
instruction format:

    Format          15..12   11..8        7..4        3..0
    --------------  -------  -----------  ----------  ----------
    NONE            opcode   0            0           0
    REG3            opcode   RegA         RegB        RegC
    REG2            opcode   RegA         0           RegC
    IMMEDIATE       opcode   RegA         immediate (8 bits)
    ADDRESS         opcode   address (10 bits, bits 11..10 zero)
    BRANCH          opcode   cond (11..10), address (10 bits)
    MEMORY          opcode   RegA         RegB        offset (4 bits)

Machine Limits
--------------
Limits live in a Machine value rather than module constants so a different
build of the CPU (or a test) can describe its own program space. BATPU2 is
the canonical target: 1024 instructions addressed by a 10-bit field.

Reference
---------
- BatPU-2 ISA sheet (opcode order and port map)
"""

from dataclasses import dataclass
from enum import Enum, IntEnum

from batpu_sdk.errors import ConfigurationError


# =============================================================================
# Machine Limits
# =============================================================================

@dataclass(frozen=True)
class Machine:
    """
    Numeric limits of a BatPU target.

    This dataclass is immutable (frozen) so a configuration cannot be
    changed underneath an assembler that is already using it.

    Attributes:
        name: Display name used in summaries
        program_space: Number of instruction words the machine can hold
        address_bits: Width of the jump/branch/call address field
        register_count: Number of general-purpose registers
        immediate_min: Smallest accepted immediate
        immediate_max: Largest accepted immediate
        offset_min: Smallest accepted load/store offset
        offset_max: Largest accepted load/store offset
    """
    name: str = "BatPU-2"
    program_space: int = 1024
    address_bits: int = 10
    register_count: int = 16
    immediate_min: int = -128
    immediate_max: int = 255
    offset_min: int = -8
    offset_max: int = 7

    def __post_init__(self) -> None:
        if self.program_space < 1:
            raise ConfigurationError(
                f"program space must hold at least one instruction, got {self.program_space}"
            )
        if not 1 <= self.address_bits <= 10:
            raise ConfigurationError(
                f"address field must be 1-10 bits wide, got {self.address_bits}"
            )
        if self.program_space > (1 << self.address_bits):
            raise ConfigurationError(
                f"program space {self.program_space} does not fit in "
                f"{self.address_bits} address bits"
            )
        if not 1 <= self.register_count <= 16:
            raise ConfigurationError(
                f"register count must be 1-16, got {self.register_count}"
            )

    @property
    def max_address(self) -> int:
        """Highest valid instruction address."""
        return self.program_space - 1

    @property
    def address_mask(self) -> int:
        """Mask selecting the address field of a word."""
        return (1 << self.address_bits) - 1


# The canonical target
BATPU2 = Machine()


# =============================================================================
# Opcodes and Formats
# =============================================================================

class Opcode(IntEnum):
    """
    Four-bit opcode index of each instruction variant.

    The value is placed in bits 15..12 of the instruction word.
    """
    NOP = 0     # No operation
    HLT = 1     # Halt
    ADD = 2     # C = A + B
    SUB = 3     # C = A - B
    NOR = 4     # C = !(A | B)
    AND = 5     # C = A & B
    XOR = 6     # C = A ^ B
    RSH = 7     # C = A >> 1
    LDI = 8     # A = immediate
    ADI = 9     # A = A + immediate
    JMP = 10    # PC = address
    BRH = 11    # PC = address if condition
    CAL = 12    # push PC + 1, PC = address
    RET = 13    # PC = pop
    LOD = 14    # B = mem[A + offset]
    STR = 15    # mem[A + offset] = B


class Format(Enum):
    """Bit layout of the low twelve bits of an instruction word."""
    NONE = "none"
    REG3 = "reg3"
    REG2 = "reg2"
    IMMEDIATE = "immediate"
    ADDRESS = "address"
    BRANCH = "branch"
    MEMORY = "memory"


OPCODE_FORMATS: dict[Opcode, Format] = {
    Opcode.NOP: Format.NONE,
    Opcode.HLT: Format.NONE,
    Opcode.ADD: Format.REG3,
    Opcode.SUB: Format.REG3,
    Opcode.NOR: Format.REG3,
    Opcode.AND: Format.REG3,
    Opcode.XOR: Format.REG3,
    Opcode.RSH: Format.REG2,
    Opcode.LDI: Format.IMMEDIATE,
    Opcode.ADI: Format.IMMEDIATE,
    Opcode.JMP: Format.ADDRESS,
    Opcode.BRH: Format.BRANCH,
    Opcode.CAL: Format.ADDRESS,
    Opcode.RET: Format.NONE,
    Opcode.LOD: Format.MEMORY,
    Opcode.STR: Format.MEMORY,
}


# =============================================================================
# Branch Conditions
# =============================================================================

class Condition(IntEnum):
    """
    Branch conditions and their 2-bit encodings.

    The value is placed in bits 11..10 of a BRH word.
    """
    ZERO = 0
    NOT_ZERO = 1
    CARRY = 2
    NOT_CARRY = 3

    @property
    def keyword(self) -> str:
        """Source keyword for this condition."""
        return CONDITION_KEYWORDS_BY_VALUE[self]


# Keywords are matched exactly (case-sensitive)
CONDITION_KEYWORDS: dict[str, Condition] = {
    "zero": Condition.ZERO,
    "notzero": Condition.NOT_ZERO,
    "carry": Condition.CARRY,
    "notcarry": Condition.NOT_CARRY,
}

CONDITION_KEYWORDS_BY_VALUE: dict[Condition, str] = {
    value: keyword for keyword, value in CONDITION_KEYWORDS.items()
}


# =============================================================================
# Character Set
# =============================================================================
# Character immediates ('A') are encoded as their index in this table, which
# is the glyph order of the character display.
# =============================================================================

CHARACTER_TABLE: tuple[str, ...] = (
    " ", "A", "B", "C", "D", "E", "F", "G", "H", "I", "J", "K", "L", "M",
    "N", "O", "P", "Q", "R", "S", "T", "U", "V", "W", "X", "Y", "Z",
    ".", "!", "?",
)


def character_code(char: str) -> int | None:
    """
    Look up the display code of a character.

    Args:
        char: A single character

    Returns:
        Index in CHARACTER_TABLE, or None if the display cannot show it
    """
    try:
        return CHARACTER_TABLE.index(char)
    except ValueError:
        return None


# =============================================================================
# Memory-Mapped I/O Ports
# =============================================================================
# Seeded into the define table when AssemblerConfig.default_defines is set,
# so programs can write "str r1 r2 0" against SCR_PIX_X etc. by name.
# =============================================================================

IO_PORTS: dict[str, int] = {
    # Screen
    "SCR_PIX_X": 240,
    "SCR_PIX_Y": 241,
    "SCR_DRAW_PIX": 242,
    "SCR_CLR_PIX": 243,
    "SCR_LOAD_PIX": 244,
    "SCR_DRAW": 245,
    "SCR_CLR": 246,

    # Character display
    "CHAR_DISP_WRITE": 247,
    "CHAR_DISP_DRAW": 248,
    "CHAR_DISP_CLR": 249,

    # Number display
    "NUM_DISP_SHOW": 250,
    "NUM_DISP_CLR": 251,
    "NUM_DISP_SIGNED": 252,
    "NUM_DISP_UNSIGNED": 253,

    # Random number generator
    "RNG": 254,

    # Controller
    "CONTROLLER": 255,
}


# =============================================================================
# Mnemonics
# =============================================================================

@dataclass(frozen=True)
class MnemonicInfo:
    """
    Source-level description of one mnemonic.

    Attributes:
        opcode: Primitive opcode the mnemonic lowers to
        operands: Operand names in source order (also used in arity errors)
    """
    opcode: Opcode
    operands: tuple[str, ...]

    @property
    def arity(self) -> int:
        return len(self.operands)


REG3 = ("RegA", "RegB", "RegC")
REG2 = ("RegA", "RegC")

MNEMONICS: dict[str, MnemonicInfo] = {
    # Primitive instructions
    "nop": MnemonicInfo(Opcode.NOP, ()),
    "hlt": MnemonicInfo(Opcode.HLT, ()),
    "add": MnemonicInfo(Opcode.ADD, REG3),
    "sub": MnemonicInfo(Opcode.SUB, REG3),
    "nor": MnemonicInfo(Opcode.NOR, REG3),
    "and": MnemonicInfo(Opcode.AND, REG3),
    "xor": MnemonicInfo(Opcode.XOR, REG3),
    "rsh": MnemonicInfo(Opcode.RSH, REG2),
    "ldi": MnemonicInfo(Opcode.LDI, ("RegA", "Immediate")),
    "adi": MnemonicInfo(Opcode.ADI, ("RegA", "Immediate")),
    "jmp": MnemonicInfo(Opcode.JMP, ("Label/Address",)),
    "brh": MnemonicInfo(Opcode.BRH, ("Condition", "Label/Address")),
    "cal": MnemonicInfo(Opcode.CAL, ("Label/Address",)),
    "ret": MnemonicInfo(Opcode.RET, ()),
    "lod": MnemonicInfo(Opcode.LOD, ("RegA", "RegB", "Offset")),
    "str": MnemonicInfo(Opcode.STR, ("RegA", "RegB", "Offset")),

    # Pseudo-instructions
    "cmp": MnemonicInfo(Opcode.SUB, ("RegA", "RegB")),
    "mov": MnemonicInfo(Opcode.ADD, REG2),
    "lsh": MnemonicInfo(Opcode.ADD, REG2),
    "inc": MnemonicInfo(Opcode.ADI, ("RegA",)),
    "dec": MnemonicInfo(Opcode.ADI, ("RegA",)),
    "not": MnemonicInfo(Opcode.NOR, REG2),
    "neg": MnemonicInfo(Opcode.SUB, REG2),
}


# =============================================================================
# Lookup Functions
# =============================================================================

def get_mnemonic_info(mnemonic: str) -> MnemonicInfo | None:
    """
    Look up a mnemonic. Mnemonics are lowercase and matched exactly.

    Args:
        mnemonic: The mnemonic as written in source

    Returns:
        MnemonicInfo if known, None otherwise
    """
    return MNEMONICS.get(mnemonic)


def is_valid_instruction(mnemonic: str) -> bool:
    """Check if a mnemonic is a known instruction or pseudo-instruction."""
    return mnemonic in MNEMONICS


def get_format(opcode: Opcode) -> Format:
    """Return the word layout used by an opcode."""
    return OPCODE_FORMATS[opcode]
