# =============================================================================
# test_parser.py - Parser Unit Tests
# =============================================================================
# Tests for statement decoding.
#
# Test coverage includes:
#   - Label and define directives
#   - Every primitive mnemonic
#   - Pseudo-instruction lowering
#   - Define substitution
#   - Arity and unknown mnemonic errors
# =============================================================================

import pytest
from batpu_sdk.assembler.parser import (
    DefineDef,
    LabelDef,
    Parser,
    SourceInstruction,
    check_arguments,
    join_with_and,
    substitute_defines,
)
from batpu_sdk.assembler.instructions import (
    INSTRUCTION_TYPES,
    Addition,
    AddImmediate,
    BitwiseNOR,
    Branch,
    Call,
    Halt,
    Jump,
    LoadImmediate,
    MemoryLoad,
    MemoryStore,
    NoOperation,
    Return,
    RightShift,
    Subtraction,
)
from batpu_sdk.assembler.operands import (
    Address,
    Immediate,
    LabelRef,
    Offset,
    Register,
    RelativeLocation,
)
from batpu_sdk.cpu import MNEMONICS, Condition
from batpu_sdk.errors import AssemblerError, AssemblySyntaxError, OperandRangeError


@pytest.fixture
def parser():
    return Parser()


def parse(parser, text, defines=None):
    """Parse one statement on line 1."""
    return parser.parse_statement(text, 1, defines)


def instr(parser, text, defines=None):
    """Parse one statement and return its instruction variant."""
    stmt = parse(parser, text, defines)
    assert isinstance(stmt, SourceInstruction)
    return stmt.instruction


R = Register

SAMPLE_OPERANDS = {
    "RegA": "r1",
    "RegB": "r2",
    "RegC": "r3",
    "Immediate": "7",
    "Label/Address": "12",
    "Condition": "carry",
    "Offset": "-2",
}


# =============================================================================
# Directive Tests
# =============================================================================

class TestDirectives:
    """Test label and define directives."""

    def test_label(self, parser):
        stmt = parse(parser, "loop:")
        assert isinstance(stmt, LabelDef)
        assert stmt.name == "loop"
        assert stmt.line == 1

    def test_label_with_instruction_rejected(self, parser):
        """A label must stand alone in its statement."""
        with pytest.raises(AssemblySyntaxError, match="Expected no arguments, got 1 instead"):
            parse(parser, "loop: nop")

    def test_empty_label_name(self, parser):
        with pytest.raises(AssemblySyntaxError, match="must not be empty"):
            parse(parser, ":")

    def test_define(self, parser):
        stmt = parse(parser, "#define LIMIT 10")
        assert isinstance(stmt, DefineDef)
        assert (stmt.name, stmt.value) == ("LIMIT", "10")

    def test_define_missing_value(self, parser):
        with pytest.raises(AssemblySyntaxError, match="Expected Name and Value"):
            parse(parser, "#define LIMIT")

    def test_define_too_many_tokens(self, parser):
        with pytest.raises(AssemblySyntaxError, match="got 3 instead"):
            parse(parser, "#define A 1 2")


# =============================================================================
# Primitive Instruction Tests
# =============================================================================

class TestPrimitives:
    """Test decoding of the sixteen primitive mnemonics."""

    @pytest.mark.parametrize("text,expected", [
        ("nop", NoOperation()),
        ("hlt", Halt()),
        ("ret", Return()),
        ("add r1 r2 r3", Addition(R(1), R(2), R(3))),
        ("sub r4 r5 r6", Subtraction(R(4), R(5), R(6))),
        ("nor r1 r0 r2", BitwiseNOR(R(1), R(0), R(2))),
        ("rsh r1 r2", RightShift(R(1), R(2))),
        ("ldi r1 5", LoadImmediate(R(1), Immediate(5))),
        ("adi r1 -1", AddImmediate(R(1), Immediate(-1))),
        ("jmp 12", Jump(Address(12))),
        ("jmp loop", Jump(LabelRef("loop"))),
        ("brh notzero -2", Branch(Condition.NOT_ZERO, RelativeLocation(-2))),
        ("cal func", Call(LabelRef("func"))),
        ("lod r1 r2 -1", MemoryLoad(R(1), R(2), Offset(-1))),
        ("str r3 r4 7", MemoryStore(R(3), R(4), Offset(7))),
    ])
    def test_decode(self, parser, text, expected):
        assert instr(parser, text) == expected

    def test_source_fields_kept(self, parser):
        stmt = parser.parse_statement("ldi r1 5", 7)
        assert stmt.line == 7
        assert stmt.text == "ldi r1 5"
        assert stmt.mnemonic == "ldi"
        assert stmt.tokens == ["ldi", "r1", "5"]

    def test_mnemonics_case_sensitive(self, parser):
        with pytest.raises(AssemblySyntaxError, match="Unknown opcode: NOP"):
            parse(parser, "NOP")

    def test_unknown_opcode(self, parser):
        with pytest.raises(AssemblySyntaxError, match="Unknown opcode: lda"):
            parse(parser, "lda r1")

    def test_first_bad_operand_reported(self, parser):
        """Operands are checked left to right."""
        with pytest.raises(OperandRangeError, match="Register 16"):
            parse(parser, "add r16 rX r1")


# =============================================================================
# Pseudo-Instruction Tests
# =============================================================================

class TestPseudoInstructions:
    """Test lowering of shorthand mnemonics."""

    def test_cmp(self, parser):
        assert instr(parser, "cmp r1 r2") == instr(parser, "sub r1 r2 r0")

    def test_mov(self, parser):
        assert instr(parser, "mov r1 r2") == instr(parser, "add r1 r0 r2")

    def test_lsh(self, parser):
        assert instr(parser, "lsh r3 r4") == instr(parser, "add r3 r3 r4")

    def test_inc(self, parser):
        assert instr(parser, "inc r5") == instr(parser, "adi r5 1")

    def test_dec(self, parser):
        assert instr(parser, "dec r5") == instr(parser, "adi r5 -1")

    def test_not(self, parser):
        assert instr(parser, "not r1 r2") == instr(parser, "nor r1 r0 r2")

    def test_neg(self, parser):
        assert instr(parser, "neg r1 r2") == instr(parser, "sub r0 r1 r2")

    def test_pseudo_mnemonic_recorded(self, parser):
        """The statement keeps the mnemonic as written."""
        stmt = parse(parser, "cmp r1 r2")
        assert stmt.mnemonic == "cmp"
        assert stmt.instruction.MNEMONIC == "sub"

    @pytest.mark.parametrize("mnemonic", sorted(MNEMONICS))
    def test_variant_matches_table_opcode(self, parser, mnemonic):
        """Every mnemonic builds the variant for its table opcode."""
        info = MNEMONICS[mnemonic]
        args = [SAMPLE_OPERANDS[name] for name in info.operands]
        instruction = parser.parse_instruction(mnemonic, args)
        assert type(instruction) is INSTRUCTION_TYPES[info.opcode]
        assert instruction.opcode is info.opcode

    def test_mismatched_builder_rejected(self, parser, monkeypatch):
        monkeypatch.setitem(parser._builders, "inc", lambda args: NoOperation())
        with pytest.raises(AssemblerError, match="inc built NoOperation, expected AddImmediate"):
            parser.parse_instruction("inc", ["r1"])


# =============================================================================
# Arity Tests
# =============================================================================

class TestArity:
    """Test operand count checking."""

    def test_too_few(self, parser):
        with pytest.raises(
            AssemblySyntaxError,
            match=r"Expected RegA, RegB and RegC \(3 arguments\), got 2 instead",
        ):
            parse(parser, "add r1 r2")

    def test_too_many_for_nullary(self, parser):
        with pytest.raises(AssemblySyntaxError, match="Expected no arguments, got 1 instead"):
            parse(parser, "nop r1")

    def test_single_argument_wording(self):
        with pytest.raises(AssemblySyntaxError, match=r"Expected RegA \(1 argument\), got 0"):
            check_arguments(0, ("RegA",))

    def test_exact_count_passes(self):
        check_arguments(2, ("RegA", "RegC"))

    def test_join_with_and(self):
        assert join_with_and(("A",)) == "A"
        assert join_with_and(("A", "B")) == "A and B"
        assert join_with_and(("A", "B", "C")) == "A, B and C"


# =============================================================================
# Define Substitution Tests
# =============================================================================

class TestDefineSubstitution:
    """Test whole-token define substitution."""

    def test_operand_substituted(self, parser):
        defines = {"PORT": "254"}
        assert instr(parser, "ldi r1 PORT", defines) == instr(parser, "ldi r1 254")

    def test_register_alias(self, parser):
        defines = {"COUNTER": "r3"}
        assert instr(parser, "inc COUNTER", defines) == AddImmediate(R(3), Immediate(1))

    def test_whole_tokens_only(self):
        assert substitute_defines(["PORTX", "PORT"], {"PORT": "1"}) == ["PORTX", "1"]

    def test_single_pass(self):
        """A define's value is not expanded again."""
        assert substitute_defines(["A"], {"A": "B", "B": "1"}) == ["B"]

    def test_mnemonic_not_substituted(self, parser):
        with pytest.raises(AssemblySyntaxError, match="Unknown opcode: STOP"):
            parse(parser, "STOP", {"STOP": "hlt"})

    def test_substituted_tokens_recorded(self, parser):
        stmt = parse(parser, "ldi r1 RNG", {"RNG": "254"})
        assert stmt.tokens == ["ldi", "r1", "254"]
