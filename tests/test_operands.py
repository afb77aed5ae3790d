# =============================================================================
# test_operands.py - Operand Parser Unit Tests
# =============================================================================
# Tests for register, immediate, offset, condition and location parsing.
#
# Test coverage includes:
#   - Number formats: decimal, hexadecimal (0x), binary (0b), separators
#   - Character immediates
#   - Range boundaries for every operand kind
#   - Distinct messages for malformed and out-of-range tokens
# =============================================================================

import pytest
from batpu_sdk.assembler.operands import (
    Address,
    Immediate,
    LabelRef,
    Offset,
    Register,
    RelativeLocation,
    parse_condition,
    parse_immediate,
    parse_integer,
    parse_location,
    parse_offset,
    parse_register,
)
from batpu_sdk.cpu import Condition, Machine
from batpu_sdk.errors import AssemblySyntaxError, OperandRangeError


# =============================================================================
# Number Parsing Tests
# =============================================================================

class TestParseInteger:
    """Test numeric literal parsing."""

    @pytest.mark.parametrize("text", ["127", "0x7F", "0x7f", "0b1111111", "0b111_1111", "1_27"])
    def test_representations_agree(self, text):
        """Decimal, hex and binary forms of one value parse equal."""
        assert parse_integer(text) == 127

    def test_negative(self):
        assert parse_integer("-5") == -5
        assert parse_integer("-0x10") == -16

    def test_explicit_plus(self):
        assert parse_integer("+3") == 3

    def test_unsigned_rejects_sign(self):
        with pytest.raises(ValueError):
            parse_integer("-5", signed=False)

    def test_empty(self):
        with pytest.raises(ValueError, match="empty string"):
            parse_integer("0x")

    def test_invalid_digit(self):
        with pytest.raises(ValueError, match="invalid digit"):
            parse_integer("0b102")

    def test_uppercase_prefix_rejected(self):
        """Only lowercase 0x and 0b prefixes are recognised."""
        with pytest.raises(ValueError):
            parse_integer("0XFF")


# =============================================================================
# Register Tests
# =============================================================================

class TestRegister:
    """Test register parsing."""

    @pytest.mark.parametrize("index", range(16))
    def test_every_register(self, index):
        """r0..r15 parse to their index."""
        assert parse_register(f"r{index}") == Register(index)

    def test_out_of_range(self):
        with pytest.raises(OperandRangeError, match="Register 16 out of range"):
            parse_register("r16")

    def test_not_a_number(self):
        with pytest.raises(AssemblySyntaxError, match="expected a register number"):
            parse_register("rX")

    def test_messages_differ(self):
        """Non-digit and out-of-range registers report different messages."""
        with pytest.raises(OperandRangeError) as range_error:
            parse_register("r16")
        with pytest.raises(AssemblySyntaxError) as syntax_error:
            parse_register("rX")
        assert range_error.value.description != syntax_error.value.description

    def test_uppercase_rejected(self):
        with pytest.raises(AssemblySyntaxError, match="lowercase 'r'"):
            parse_register("R1")

    def test_bare_r(self):
        with pytest.raises(AssemblySyntaxError):
            parse_register("r")

    def test_str(self):
        assert str(Register(7)) == "r7"


# =============================================================================
# Immediate Tests
# =============================================================================

class TestImmediate:
    """Test immediate parsing."""

    @pytest.mark.parametrize("text,value", [
        ("0", 0),
        ("255", 255),
        ("-128", -128),
        ("0xFF", 255),
        ("0b1111_1111", 255),
        ("-1", -1),
    ])
    def test_values(self, text, value):
        assert parse_immediate(text).value == value

    @pytest.mark.parametrize("text", ["256", "-129", "0x100"])
    def test_out_of_range(self, text):
        """One past either end fails."""
        with pytest.raises(OperandRangeError, match="out of range"):
            parse_immediate(text)

    def test_bits(self):
        """Negative immediates store their two's-complement byte."""
        assert Immediate(-1).bits == 0xFF
        assert Immediate(-128).bits == 0x80
        assert Immediate(200).bits == 200

    def test_malformed(self):
        with pytest.raises(AssemblySyntaxError, match="Failed to parse immediate"):
            parse_immediate("five")

    @pytest.mark.parametrize("text,value", [("'A'", 1), ("'Z'", 26), ("'.'", 27), ("'!'", 28), ("'?'", 29)])
    def test_characters(self, text, value):
        """Characters map to their display code."""
        assert parse_immediate(text).value == value

    def test_unterminated_character(self):
        with pytest.raises(AssemblySyntaxError, match="must end with"):
            parse_immediate("'A")

    def test_long_character(self):
        with pytest.raises(AssemblySyntaxError, match="single character"):
            parse_immediate("'AB'")

    def test_unsupported_character(self):
        with pytest.raises(AssemblySyntaxError, match="not supported"):
            parse_immediate("'a'")


# =============================================================================
# Offset Tests
# =============================================================================

class TestOffset:
    """Test load/store offset parsing."""

    @pytest.mark.parametrize("text,value", [("-8", -8), ("7", 7), ("0", 0), ("-1", -1)])
    def test_values(self, text, value):
        assert parse_offset(text) == Offset(value)

    @pytest.mark.parametrize("text", ["8", "-9"])
    def test_out_of_range(self, text):
        with pytest.raises(OperandRangeError):
            parse_offset(text)

    def test_bits(self):
        assert Offset(-1).bits == 0xF
        assert Offset(-8).bits == 0x8
        assert Offset(7).bits == 0x7

    def test_malformed(self):
        with pytest.raises(AssemblySyntaxError, match="Failed to parse offset"):
            parse_offset("x")


# =============================================================================
# Condition Tests
# =============================================================================

class TestCondition:
    """Test branch condition parsing."""

    @pytest.mark.parametrize("text,code", [
        ("zero", 0), ("notzero", 1), ("carry", 2), ("notcarry", 3),
    ])
    def test_keywords(self, text, code):
        assert parse_condition(text) == Condition(code)

    def test_case_sensitive(self):
        with pytest.raises(AssemblySyntaxError, match="Unknown condition"):
            parse_condition("ZERO")

    def test_hint_lists_keywords(self):
        with pytest.raises(AssemblySyntaxError) as exc_info:
            parse_condition("eq")
        assert "notcarry" in exc_info.value.hint


# =============================================================================
# Location Tests
# =============================================================================

class TestLocation:
    """Test jump/branch/call target parsing."""

    def test_absolute(self):
        assert parse_location("12") == Address(12)

    def test_hex_absolute(self):
        assert parse_location("0x3FF") == Address(1023)

    def test_absolute_out_of_range(self):
        with pytest.raises(OperandRangeError, match="Address 1024"):
            parse_location("1024")

    def test_relative(self):
        assert parse_location("+3") == RelativeLocation(3)
        assert parse_location("-2") == RelativeLocation(-2)

    def test_relative_malformed(self):
        with pytest.raises(AssemblySyntaxError, match="address offset"):
            parse_location("+x")

    def test_label(self):
        assert parse_location("loop") == LabelRef("loop")

    def test_small_machine(self):
        """The address limit follows the machine."""
        machine = Machine(program_space=16, address_bits=4)
        assert parse_location("15", machine) == Address(15)
        with pytest.raises(OperandRangeError):
            parse_location("16", machine)

    def test_str(self):
        assert str(RelativeLocation(2)) == "+2"
        assert str(RelativeLocation(-1)) == "-1"
