"""Unit tests for text statistics (pure functions, no store or network)."""

from __future__ import annotations

import pytest

from docpipe.ingestion.stats import (
    char_count,
    compute_statistics,
    reading_minutes,
    word_count,
)


class TestWordCount:
    def test_empty_string(self):
        assert word_count("") == 0

    def test_whitespace_only(self):
        assert word_count("   \n\t  ") == 0

    def test_mixed_whitespace_separators(self):
        assert word_count("a  b\tc") == 3

    def test_leading_and_trailing_whitespace_ignored(self):
        assert word_count("  hello world \n") == 2

    def test_newlines_separate_words(self):
        assert word_count("one\ntwo\r\nthree") == 3


class TestCharCount:
    def test_counts_whitespace(self):
        assert char_count("a  b\tc") == 6

    def test_counts_code_points(self):
        assert char_count("naïve café") == 10

    def test_empty(self):
        assert char_count("") == 0


class TestReadingMinutes:
    @pytest.mark.parametrize(
        ("words", "expected"),
        [(0, 0), (1, 1), (199, 1), (200, 1), (201, 2), (400, 2), (401, 3)],
    )
    def test_ceiling_of_words_over_200(self, words: int, expected: int):
        assert reading_minutes(words) == expected

    def test_custom_speed(self):
        assert reading_minutes(250, wpm=100) == 3


class TestComputeStatistics:
    def test_all_fields(self):
        stats = compute_statistics("a  b\tc")
        assert stats.word_count == 3
        assert stats.char_count == 6
        assert stats.estimated_reading_minutes == 1

    def test_empty_text(self):
        stats = compute_statistics("")
        assert stats.word_count == 0
        assert stats.char_count == 0
        assert stats.estimated_reading_minutes == 0

    def test_deterministic(self):
        text = "The same input always gives the same numbers. " * 50
        assert compute_statistics(text) == compute_statistics(text)

    def test_serialized_with_camel_case_keys(self):
        dumped = compute_statistics("one two").to_wire_dict()
        assert dumped == {"wordCount": 2, "charCount": 7, "estimatedReadingMinutes": 1}
