# =============================================================================
# test_lexer.py - Lexer Unit Tests
# =============================================================================
# Tests for the BatPU assembler line splitter and tokenizer.
#
# Test coverage includes:
#   - Comment removal
#   - Blank and comment-only lines
#   - Statement splitting on semicolons
#   - Trailing and empty statement detection
#   - Whitespace tokenization
#   - Line numbering
# =============================================================================

import pytest
from batpu_sdk.assembler.lexer import (
    Fragment,
    iter_lines,
    split_line,
    strip_comment,
    tokenize,
)


# =============================================================================
# Comment Tests
# =============================================================================

class TestComments:
    """Test comment removal."""

    def test_trailing_comment_removed(self):
        """Text after // is dropped."""
        assert strip_comment("ldi r1 5 // load five") == "ldi r1 5"

    def test_comment_only_line(self):
        """A comment-only line becomes empty."""
        assert strip_comment("// nothing here") == ""

    def test_first_marker_wins(self):
        """Everything after the first // is comment."""
        assert strip_comment("nop // a // b") == "nop"

    def test_surrounding_whitespace_trimmed(self):
        assert strip_comment("\t  hlt   ") == "hlt"

    def test_semicolon_inside_comment_ignored(self):
        """Semicolons in comments do not create statements."""
        assert [f.text for f in split_line("nop // a; b")] == ["nop"]


# =============================================================================
# Line Splitting Tests
# =============================================================================

class TestSplitLine:
    """Test splitting a line into statement fragments."""

    @pytest.mark.parametrize("line", ["", "   ", "\t", "// comment", "   // x"])
    def test_blank_lines_yield_nothing(self, line):
        """Blank and comment-only lines produce no statements."""
        assert split_line(line) == []

    def test_single_statement(self):
        fragments = split_line("  add r1 r2 r3  ")
        assert fragments == [Fragment("add r1 r2 r3", 0)]

    def test_multiple_statements(self):
        """Semicolons separate statements on one line."""
        fragments = split_line("ldi r1 5; inc r1 ;dec r1")
        assert [f.text for f in fragments] == ["ldi r1 5", "inc r1", "dec r1"]
        assert [f.index for f in fragments] == [0, 1, 2]
        assert not any(f.is_empty for f in fragments)

    def test_trailing_semicolon(self):
        """The empty piece after a final semicolon is marked trailing."""
        fragments = split_line("nop;")
        assert len(fragments) == 2
        assert fragments[1].is_empty
        assert fragments[1].trailing

    def test_trailing_semicolon_before_comment(self):
        fragments = split_line("nop; // done")
        assert fragments[-1].trailing

    def test_empty_middle_statement(self):
        """An empty statement between semicolons is not trailing."""
        fragments = split_line("nop;;hlt")
        assert [f.text for f in fragments] == ["nop", "", "hlt"]
        assert fragments[1].is_empty
        assert not fragments[1].trailing

    def test_leading_semicolon(self):
        fragments = split_line("; nop")
        assert fragments[0].is_empty
        assert not fragments[0].trailing

    def test_fragment_tokens(self):
        assert split_line("lod r1 r2 -1")[0].tokens == ["lod", "r1", "r2", "-1"]


# =============================================================================
# Tokenizer Tests
# =============================================================================

class TestTokenize:
    """Test whitespace tokenization."""

    def test_spaces_and_tabs(self):
        assert tokenize("ldi\tr1    5") == ["ldi", "r1", "5"]

    def test_empty(self):
        assert tokenize("") == []

    def test_character_literal_is_one_token(self):
        assert tokenize("ldi r1 'A'") == ["ldi", "r1", "'A'"]


# =============================================================================
# Line Numbering Tests
# =============================================================================

class TestIterLines:
    """Test source line numbering."""

    def test_one_based(self):
        assert list(iter_lines("a\nb")) == [(1, "a"), (2, "b")]

    def test_crlf(self):
        """CRLF sources number the same as LF sources."""
        assert list(iter_lines("a\r\nb\r\n")) == [(1, "a"), (2, "b")]

    def test_blank_lines_counted(self):
        assert list(iter_lines("\n\nnop"))[-1] == (3, "nop")

    def test_only_newline_ends_a_line(self):
        """Form feeds and Unicode separators stay inside their line."""
        lines = list(iter_lines("nop // page\x0cbreak\nhlt // a b\x1cc"))
        assert lines == [(1, "nop // page\x0cbreak"), (2, "hlt // a b\x1cc")]

    def test_final_newline_adds_no_line(self):
        assert list(iter_lines("nop\n")) == [(1, "nop")]
        assert list(iter_lines("")) == []
