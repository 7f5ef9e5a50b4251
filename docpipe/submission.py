"""Job submission: validate one upload, store it, enqueue one work message."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from datetime import UTC, datetime

from docpipe.errors import ClientInputError, TransientStoreError
from docpipe.identity import file_extension, new_document_id
from docpipe.models import WorkMessage
from docpipe.stores.blob_store import BlobStore
from docpipe.stores.work_queue import WorkQueue

logger = logging.getLogger(__name__)


class SubmissionService:
    def __init__(
        self,
        *,
        blob_store: BlobStore,
        work_queue: WorkQueue,
        allowed_extensions: Iterable[str],
    ) -> None:
        self._store = blob_store
        self._queue = work_queue
        self._allowed = tuple(allowed_extensions)

    def validate(self, file_name: str | None) -> str:
        """Return the file's extension, or raise ClientInputError."""
        if not file_name:
            raise ClientInputError("No file uploaded")
        ext = file_extension(file_name)
        if ext not in self._allowed:
            raise ClientInputError(
                f"File type {ext or '(none)'} not supported. Allowed: {', '.join(self._allowed)}"
            )
        return ext

    async def submit(
        self,
        *,
        file_name: str | None,
        data: bytes,
        content_type: str | None = None,
    ) -> WorkMessage:
        """Store the raw bytes, then enqueue. Nothing is written if validation fails."""
        if not file_name:
            raise ClientInputError("No file uploaded")
        ext = self.validate(file_name)

        doc_id = new_document_id(file_name)
        message = WorkMessage(
            doc_id=doc_id,
            file_name=file_name,
            file_size=len(data),
            file_type=ext,
            uploaded_at=datetime.now(UTC),
        )

        # The blob must exist before any worker can see a message for it.
        await asyncio.to_thread(self._store.put_upload, doc_id, data, content_type=content_type)
        logger.info("Stored upload %s (%d bytes)", doc_id, len(data), extra={"doc_id": doc_id})

        try:
            message_id = await asyncio.to_thread(self._queue.send, message)
        except Exception:
            await self._discard_upload(doc_id)
            raise
        logger.info(
            "Queued %s for processing",
            doc_id,
            extra={"doc_id": doc_id, "message_id": message_id},
        )
        return message

    async def _discard_upload(self, doc_id: str) -> None:
        """Remove an upload that never got a queue message, so it does not report as processing."""
        try:
            await asyncio.to_thread(self._store.delete_upload, doc_id)
        except TransientStoreError as e:
            logger.warning("Could not remove orphaned upload %s: %s", doc_id, e, extra={"doc_id": doc_id})
        else:
            logger.info("Removed upload %s after enqueue failure", doc_id, extra={"doc_id": doc_id})
