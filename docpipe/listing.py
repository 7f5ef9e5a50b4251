from __future__ import annotations

import asyncio
from datetime import UTC, datetime

from docpipe.identity import doc_id_from_result_key
from docpipe.models import DocumentEntry
from docpipe.stores.blob_store import BlobStore

_EPOCH = datetime.min.replace(tzinfo=UTC)


async def list_completed_documents(store: BlobStore) -> list[DocumentEntry]:
    """Completed documents, newest first."""
    blobs = await asyncio.to_thread(store.list_results)
    entries = [
        DocumentEntry(
            doc_id=doc_id_from_result_key(b.name),
            file_name=b.name,
            size=b.size,
            created_on=b.created_on,
            last_modified=b.last_modified,
        )
        for b in blobs
    ]
    entries.sort(key=lambda e: e.created_on or _EPOCH, reverse=True)
    return entries
