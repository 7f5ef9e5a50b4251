from __future__ import annotations

from docpipe.ingestion.extractors.base import Extractor
from docpipe.ingestion.types import ExtractResult
from docpipe.models import WorkMessage


class TextExtractor(Extractor):
    """Plain UTF-8 text, returned exactly as decoded."""

    strategy = "text"

    def can_handle(self, message: WorkMessage) -> bool:
        return message.file_type == ".txt"

    def extract(self, *, message: WorkMessage, data: bytes) -> ExtractResult:
        # Undecodable bytes become U+FFFD rather than failing the document
        text = data.decode("utf-8", errors="replace")
        return ExtractResult(
            text=text,
            pages=None,
            extraction_meta={"strategy": self.strategy, "bytes": len(data)},
        )
