"""Text statistics. Pure functions of the extracted text."""

from __future__ import annotations

import math

from docpipe.models import Statistics

DEFAULT_READING_WPM = 200


def word_count(text: str) -> int:
    """Whitespace-delimited, non-empty tokens."""
    return len(text.split())


def char_count(text: str) -> int:
    """Length in code points, whitespace included."""
    return len(text)


def reading_minutes(words: int, *, wpm: int = DEFAULT_READING_WPM) -> int:
    if words <= 0:
        return 0
    return math.ceil(words / wpm)


def compute_statistics(text: str, *, wpm: int = DEFAULT_READING_WPM) -> Statistics:
    words = word_count(text)
    return Statistics(
        word_count=words,
        char_count=char_count(text),
        estimated_reading_minutes=reading_minutes(words, wpm=wpm),
    )
