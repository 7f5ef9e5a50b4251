from __future__ import annotations

import io
import logging

from pypdf import PdfReader

from docpipe.errors import ExtractionError
from docpipe.ingestion.extractors.base import Extractor, normalize_text
from docpipe.ingestion.types import ExtractResult
from docpipe.models import WorkMessage

logger = logging.getLogger(__name__)


class PdfExtractor(Extractor):
    strategy = "pypdf"

    def can_handle(self, message: WorkMessage) -> bool:
        return message.file_type == ".pdf"

    def extract(self, *, message: WorkMessage, data: bytes) -> ExtractResult:
        try:
            r = PdfReader(io.BytesIO(data))
            pages = len(r.pages)
            parts: list[str] = []
            for p in r.pages:
                t = p.extract_text() or ""
                if t.strip():
                    parts.append(t)
        except Exception as e:
            raise ExtractionError(message.doc_id, self.strategy, f"{type(e).__name__}: {e}") from e

        text = normalize_text("\n".join(parts))
        if not text:
            logger.warning("PDF %s has %d page(s) but no extractable text", message.doc_id, pages)
        return ExtractResult(
            text=text,
            pages=pages,
            extraction_meta={"strategy": self.strategy, "pages": pages},
        )
