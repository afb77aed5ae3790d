"""
BatPU Assembly Language Lexer
=============================

This module splits BatPU assembly source into statements and tokens.
The language is line oriented, so lexing is a per-line affair:

1. Everything from the first "//" to the end of the line is a comment.
2. The remaining text is trimmed; an empty line yields no statements.
3. The text is split on ";" so several statements can share a line.
4. Each statement is split on whitespace into tokens.

Example
-------
>>> from batpu_sdk.assembler.lexer import split_line, tokenize
>>> [f.text for f in split_line("ldi r1 5; inc r1  // count up")]
['ldi r1 5', 'inc r1']
>>> tokenize("ldi r1 5")
['ldi', 'r1', '5']

Empty Statements
----------------
"a;;b" and "a;" both contain an empty statement. They are not dropped here:
split_line returns them as fragments with ``is_empty`` set, and marks the
one after a final semicolon with ``trailing``, so the assembler can apply
its configured policy to each case.
"""

from dataclasses import dataclass
from typing import Iterator


COMMENT_MARKER = "//"
STATEMENT_SEPARATOR = ";"


# =============================================================================
# Fragment Data Class
# =============================================================================

@dataclass(frozen=True)
class Fragment:
    """
    One semicolon-delimited statement from a physical line.

    Attributes:
        text: Trimmed statement text
        index: Position of the fragment within its line (0-based)
        trailing: True if this is the empty piece after a final ";"
    """
    text: str
    index: int
    trailing: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.text

    @property
    def tokens(self) -> list[str]:
        return tokenize(self.text)


# =============================================================================
# Line Splitting
# =============================================================================

def strip_comment(line: str) -> str:
    """
    Remove a trailing "//" comment and surrounding whitespace.

    Args:
        line: One physical source line

    Returns:
        The code part of the line, trimmed
    """
    index = line.find(COMMENT_MARKER)
    if index != -1:
        line = line[:index]
    return line.strip()


def split_line(line: str) -> list[Fragment]:
    """
    Split one physical line into statement fragments.

    Args:
        line: One physical source line (without its newline)

    Returns:
        Fragments in source order; an empty list for blank and
        comment-only lines
    """
    code = strip_comment(line)
    if not code:
        return []

    pieces = code.split(STATEMENT_SEPARATOR)
    last = len(pieces) - 1

    fragments = []
    for index, piece in enumerate(pieces):
        text = piece.strip()
        # code is non-empty and trimmed, so only the last piece can follow
        # a final semicolon
        trailing = index == last and index > 0 and not text
        fragments.append(Fragment(text, index, trailing))
    return fragments


def tokenize(statement: str) -> list[str]:
    """
    Split a statement into whitespace-separated tokens.

    Args:
        statement: Statement text

    Returns:
        List of tokens (empty for an empty statement)
    """
    return statement.split()


def iter_lines(source: str) -> Iterator[tuple[int, str]]:
    """
    Yield (line_number, line) pairs with 1-based line numbers.

    Only "\\n" ends a line; a "\\r" before it is dropped, so CRLF sources
    number the same way as LF sources. Other control characters such as
    form feeds stay inside their line. A final newline does not start an
    extra line.
    """
    lines = source.split("\n")
    if lines[-1] == "":
        lines.pop()

    for number, line in enumerate(lines, start=1):
        yield number, line.removesuffix("\r")
