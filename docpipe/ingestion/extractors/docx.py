from __future__ import annotations

import io

import docx  # python-docx

from docpipe.errors import ExtractionError
from docpipe.ingestion.extractors.base import Extractor, normalize_text
from docpipe.ingestion.types import ExtractResult
from docpipe.models import WorkMessage


class DocxExtractor(Extractor):
    """Word documents. Legacy binary ``.doc`` files are routed here too and
    fail with ExtractionError unless they are really OOXML under the old name."""

    strategy = "docx"

    def can_handle(self, message: WorkMessage) -> bool:
        return message.file_type in (".docx", ".doc")

    def extract(self, *, message: WorkMessage, data: bytes) -> ExtractResult:
        try:
            d = docx.Document(io.BytesIO(data))
        except Exception as e:
            raise ExtractionError(message.doc_id, self.strategy, f"{type(e).__name__}: {e}") from e

        parts: list[str] = []
        for p in d.paragraphs:
            if p.text and p.text.strip():
                parts.append(p.text)
        for table in d.tables:
            for row in table.rows:
                cells = [c.text.strip() for c in row.cells if c.text and c.text.strip()]
                if cells:
                    parts.append("\t".join(cells))
        text = normalize_text("\n".join(parts))
        return ExtractResult(
            text=text,
            pages=None,
            extraction_meta={"strategy": self.strategy, "paragraphs": len(d.paragraphs)},
        )
