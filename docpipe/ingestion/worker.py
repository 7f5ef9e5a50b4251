from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

from docpipe.analysis.base import Analyzer
from docpipe.ingestion.extractors.base import Extractor
from docpipe.ingestion.extractors.registry import default_extractors, extract_text
from docpipe.ingestion.stats import DEFAULT_READING_WPM, compute_statistics
from docpipe.ingestion.types import WorkerStage
from docpipe.models import ResultRecord, WorkMessage
from docpipe.stores.blob_store import BlobStore

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(UTC)


class DocumentWorker:
    """Turns one work message into one persisted result record.

    ``process`` runs fetch -> extract -> statistics -> analyze -> persist and
    returns only once the record is written. Every failure propagates to the
    caller; the caller acknowledges the message only after a normal return.
    Reprocessing the same message overwrites the record with identical
    statistics.
    """

    def __init__(
        self,
        *,
        blob_store: BlobStore,
        analyzer: Analyzer,
        extractors: list[Extractor] | None = None,
        reading_wpm: int = DEFAULT_READING_WPM,
    ) -> None:
        self._store = blob_store
        self._analyzer = analyzer
        self._extractors = extractors if extractors is not None else default_extractors()
        self._wpm = reading_wpm

    async def handle_delivery(self, body: str, *, message_id: str = "", receive_count: int = 1) -> ResultRecord:
        """Decode a raw queue payload and process it."""
        message = WorkMessage.decode(body)
        return await self.process(message, message_id=message_id, receive_count=receive_count)

    async def process(
        self,
        message: WorkMessage,
        *,
        message_id: str = "",
        receive_count: int = 1,
    ) -> ResultRecord:
        doc_id = message.doc_id
        log_extra = {"doc_id": doc_id, "message_id": message_id, "receive_count": receive_count}

        self._log_stage(WorkerStage.RECEIVED, log_extra)
        # Blocking I/O -> run in thread to not block event loop
        data = await asyncio.to_thread(self._store.get_upload, doc_id)
        if message.file_size != len(data):
            logger.info(
                "Declared size %d differs from stored size %d for %s",
                message.file_size,
                len(data),
                doc_id,
                extra=log_extra,
            )

        self._log_stage(WorkerStage.EXTRACTING, log_extra)
        exr = await asyncio.to_thread(extract_text, self._extractors, message=message, data=data)
        text = exr.text
        logger.debug(
            "Extracted %d characters from %s",
            len(text),
            doc_id,
            extra={**log_extra, **exr.extraction_meta, "pages": exr.pages},
        )
        stats = compute_statistics(text, wpm=self._wpm)

        self._log_stage(WorkerStage.ANALYZING, log_extra)
        analysis = await asyncio.to_thread(self._analyzer.analyze, text)

        record = ResultRecord(
            doc_id=doc_id,
            file_name=message.file_name,
            file_type=message.file_type,
            processed_at=_now(),
            statistics=stats,
            analysis=analysis,
            full_text=text,
        )

        self._log_stage(WorkerStage.PERSISTING, log_extra)
        await asyncio.to_thread(self._store.put_result, doc_id, record.to_json())

        logger.info(
            "Result saved for %s: %d words, %d characters, analysis=%s",
            doc_id,
            stats.word_count,
            stats.char_count,
            record.analysis.source,
            extra=log_extra,
        )
        return record

    @staticmethod
    def _log_stage(stage: WorkerStage, extra: dict[str, object]) -> None:
        logger.debug("%s %s", stage.value, extra["doc_id"], extra={**extra, "stage": stage.value})
