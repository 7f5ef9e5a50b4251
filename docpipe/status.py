"""Document lifecycle resolution for the results endpoint."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any

from docpipe.stores.blob_store import BlobStore


class DocumentStatus(str, Enum):
    NOT_FOUND = "not_found"
    PROCESSING = "processing"
    COMPLETED = "completed"


@dataclass(frozen=True)
class DocumentResolution:
    doc_id: str
    status: DocumentStatus
    record: dict[str, Any] | None = None


async def resolve_document(store: BlobStore, doc_id: str) -> DocumentResolution:
    """Result record first, then the raw upload.

    A stored result means completed whether or not the upload still exists;
    an upload without a result means processing; neither means not found.
    """
    record = await asyncio.to_thread(store.get_result, doc_id)
    if record is not None:
        return DocumentResolution(doc_id=doc_id, status=DocumentStatus.COMPLETED, record=record)

    if await asyncio.to_thread(store.upload_exists, doc_id):
        return DocumentResolution(doc_id=doc_id, status=DocumentStatus.PROCESSING)

    return DocumentResolution(doc_id=doc_id, status=DocumentStatus.NOT_FOUND)
