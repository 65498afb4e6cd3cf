from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Tuple, Union

logger = logging.getLogger(__name__)


# ---------------------------
# Character classes
# ---------------------------

WHITESPACE = frozenset(" \n\t")
PUNCTUATION = frozenset(".:;,-")


class CharCategory(Enum):
    GLYPH = "glyph"
    WHITESPACE = "whitespace"
    PUNCTUATION = "punctuation"


def char_category(ch: str) -> CharCategory:
    if ch in WHITESPACE:
        return CharCategory.WHITESPACE
    if ch in PUNCTUATION:
        return CharCategory.PUNCTUATION
    return CharCategory.GLYPH


def is_whitespace(ch: str) -> bool:
    return char_category(ch) is CharCategory.WHITESPACE


_FLATTEN = str.maketrans({"\n": " ", "\r": " ", "\t": " "})


def sanitize(value: str) -> str:
    """Flatten line breaks (and tabs) so a slice renders on one line, one cell per char."""
    return value.translate(_FLATTEN)


# ---------------------------
# Buffer + cursor
# ---------------------------

@dataclass(frozen=True)
class WordRange:
    """Half-open [start, end) slice of the buffer holding the current word."""

    start: int = 0
    end: int = 0

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


START = WordRange(0, 0)


@dataclass(frozen=True)
class TextBuffer:
    chars: str = ""

    @classmethod
    def from_string(cls, raw: str) -> "TextBuffer":
        return cls(raw.replace("\r\n", "\n"))

    def __len__(self) -> int:
        return len(self.chars)

    def __getitem__(self, index):
        return self.chars[index]

    def words(self) -> Iterator[WordRange]:
        cursor = START
        while True:
            cursor, done = advance(self, cursor)
            if cursor.is_empty:
                return
            yield cursor
            if done:
                return

    def has_words(self) -> bool:
        return any(not is_whitespace(ch) for ch in self.chars)


def load_text(path: Union[str, Path]) -> TextBuffer:
    """Read the whole file; OSError / UnicodeDecodeError propagate."""
    raw = Path(path).read_text(encoding="utf-8")
    text = TextBuffer.from_string(raw)
    logger.info("Loaded %s (%d chars)", path, len(text))
    return text


# ---------------------------
# Navigation
# ---------------------------

def advance(text: TextBuffer, cursor: WordRange) -> Tuple[WordRange, bool]:
    """
    Move to the next word. Returns (range, reached_end).
    Past the last word the range collapses to (N, N).
    """
    n = len(text)
    start = cursor.end
    while start < n and is_whitespace(text[start]):
        start += 1
    if start >= n:
        return WordRange(n, n), True

    end = start + 1
    while end < n and not is_whitespace(text[end]):
        end += 1
    return WordRange(start, end), end >= n


def retreat(text: TextBuffer, cursor: WordRange) -> Tuple[WordRange, bool]:
    """
    Move to the previous word. Returns (range, reached_start).
    With no earlier word the cursor is returned as-is.
    """
    end = cursor.start
    while end > 0 and is_whitespace(text[end - 1]):
        end -= 1
    if end == 0:
        return cursor, True

    start = end
    while start > 0 and not is_whitespace(text[start - 1]):
        start -= 1
    return WordRange(start, end), start == 0


# ---------------------------
# Display strings
# ---------------------------

def word_text(text: TextBuffer, cursor: WordRange) -> str:
    return sanitize(text[cursor.start:cursor.end])


def context_before(text: TextBuffer, cursor: WordRange, length: int) -> str:
    length = max(0, length)
    chunk = text[max(0, cursor.start - length):cursor.start]
    return sanitize(" " * (length - len(chunk)) + chunk)


def context_after(text: TextBuffer, cursor: WordRange, length: int) -> str:
    length = max(0, length)
    chunk = text[cursor.end:cursor.end + length]
    return sanitize(chunk + " " * (length - len(chunk)))
