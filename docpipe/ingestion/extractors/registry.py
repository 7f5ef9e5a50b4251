from __future__ import annotations

import logging

from docpipe.ingestion.extractors.base import Extractor
from docpipe.ingestion.extractors.docx import DocxExtractor
from docpipe.ingestion.extractors.pdf import PdfExtractor
from docpipe.ingestion.extractors.text import TextExtractor
from docpipe.ingestion.types import ExtractResult
from docpipe.models import WorkMessage

logger = logging.getLogger(__name__)


def default_extractors() -> list[Extractor]:
    return [PdfExtractor(), DocxExtractor(), TextExtractor()]


def extract_text(extractors: list[Extractor], *, message: WorkMessage, data: bytes) -> ExtractResult:
    """Dispatch on the declared extension.

    Unrecognized extensions produce empty text so a record is still written;
    parse failures in a matching extractor raise ExtractionError.
    """
    extractor = next((ex for ex in extractors if ex.can_handle(message)), None)
    if extractor is None:
        logger.warning(
            "No extractor for %s (declared type %r); recording empty text",
            message.doc_id,
            message.file_type,
        )
        return ExtractResult(text="", pages=None, extraction_meta={"strategy": "none"})
    return extractor.extract(message=message, data=data)
