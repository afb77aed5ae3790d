"""
Program Image Serialization
===========================

Two on-disk forms of an assembled program:

- **binary**: each word as two bytes, most significant byte first
- **text**: each word as sixteen "0"/"1" characters, one word per line,
  no newline after the last word

The text form is what the BatPU-2 schematic loaders read; the binary form
is the compact image.
"""

from pathlib import Path
from typing import Iterable
import logging
import struct


logger = logging.getLogger(__name__)


WORD_MASK = 0xFFFF
WORD_FORMAT = ">H"


def to_binary(words: Iterable[int]) -> bytes:
    """
    Serialize words as big-endian 16-bit values.

    Args:
        words: Instruction words (0-0xFFFF)

    Returns:
        Two bytes per word
    """
    return b"".join(struct.pack(WORD_FORMAT, word & WORD_MASK) for word in words)


def to_text(words: Iterable[int]) -> str:
    """
    Serialize words as newline-separated 16-character binary strings.
    """
    return "\n".join(format(word & WORD_MASK, "016b") for word in words)


def from_binary(data: bytes) -> list[int]:
    """
    Read a binary image back into words.

    Raises:
        ValueError: If the data holds an odd number of bytes
    """
    if len(data) % 2:
        raise ValueError(f"binary image has odd length {len(data)}")
    return [word for (word,) in struct.iter_unpack(WORD_FORMAT, data)]


def write_image(filepath: str | Path, words: list[int], text: bool = False) -> None:
    """
    Write a program image to disk.

    Args:
        filepath: Destination path
        words: Instruction words
        text: Write the text form instead of binary
    """
    path = Path(filepath)
    if text:
        path.write_text(to_text(words))
    else:
        path.write_bytes(to_binary(words))
    logger.debug(f"Wrote {len(words)} words to {path} ({'text' if text else 'binary'})")
