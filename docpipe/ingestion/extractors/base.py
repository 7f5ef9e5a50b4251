from __future__ import annotations

import re
from abc import ABC, abstractmethod

from docpipe.ingestion.types import ExtractResult
from docpipe.models import WorkMessage

_BLANK_RUN = re.compile(r"\n{4,}")


class Extractor(ABC):
    """One text-extraction strategy, selected by the message's declared extension."""

    strategy: str = ""

    @abstractmethod
    def can_handle(self, message: WorkMessage) -> bool: ...

    @abstractmethod
    def extract(self, *, message: WorkMessage, data: bytes) -> ExtractResult:
        """Raise ExtractionError when ``data`` cannot be parsed."""


def normalize_text(text: str) -> str:
    """Drop NUL characters, cap blank-line runs at three, trim the ends."""
    if not text:
        return ""
    return _BLANK_RUN.sub("\n\n\n", text.replace("\x00", "")).strip()
