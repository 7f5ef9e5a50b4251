"""Local keyword-frequency analysis. Deterministic, no network."""

from __future__ import annotations

import re
from collections import Counter

from docpipe.models import HeuristicAnalysis, Keyword

_NON_WORD = re.compile(r"[^\w\s]")

DEFAULT_KEYWORD_LIMIT = 10
DEFAULT_SUMMARY_CHARS = 500
# Tokens this short or shorter are ignored
MAX_IGNORED_TOKEN_LEN = 3


def extract_keywords(text: str, *, limit: int = DEFAULT_KEYWORD_LIMIT) -> list[Keyword]:
    """Most frequent tokens, ties broken by first occurrence."""
    words = [w for w in _NON_WORD.sub("", text.lower()).split() if len(w) > MAX_IGNORED_TOKEN_LEN]
    # Counter keeps insertion order, and most_common() is stable on equal counts
    counts = Counter(words)
    return [Keyword(term=w, count=c) for w, c in counts.most_common(limit)]


def make_summary(text: str, *, max_chars: int = DEFAULT_SUMMARY_CHARS) -> str:
    summary = text[:max_chars].strip()
    if len(text) > max_chars:
        summary += "..."
    return summary


class HeuristicAnalyzer:
    def __init__(
        self,
        *,
        keyword_limit: int = DEFAULT_KEYWORD_LIMIT,
        summary_chars: int = DEFAULT_SUMMARY_CHARS,
    ) -> None:
        self._keyword_limit = keyword_limit
        self._summary_chars = summary_chars

    def analyze(self, text: str) -> HeuristicAnalysis:
        return HeuristicAnalysis(
            summary=make_summary(text, max_chars=self._summary_chars),
            keywords=extract_keywords(text, limit=self._keyword_limit),
        )
