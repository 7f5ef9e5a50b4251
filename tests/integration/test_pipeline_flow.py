"""End-to-end flow: upload, poll while queued, process, poll and list."""

from __future__ import annotations

import io

import pytest
from httpx import AsyncClient

from docpipe.ingestion.listener import QueueListener
from tests.fakes import FakeWorkQueue

TEXT = (
    "Pipeline workers extract text from uploaded documents. "
    "Workers compute statistics and keywords for every document."
)


async def _upload(client: AsyncClient, name: str, data: bytes, content_type: str) -> str:
    resp = await client.post("/upload", files={"file": (name, data, content_type)})
    assert resp.status_code == 200
    return resp.json()["docId"]


class TestPipelineFlow:
    async def test_text_document_lifecycle(self, client: AsyncClient, listener: QueueListener):
        doc_id = await _upload(client, "notes.txt", TEXT.encode(), "text/plain")

        resp = await client.get("/results", params={"docId": doc_id})
        assert resp.status_code == 202

        stats = await listener.run(once=True)
        assert stats == {"received": 1, "completed": 1, "failed": 0}

        resp = await client.get("/results", params={"docId": doc_id})
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "completed"
        assert body["fileName"] == "notes.txt"
        assert body["statistics"] == {
            "wordCount": 15,
            "charCount": len(TEXT),
            "estimatedReadingMinutes": 1,
        }
        keywords = body["analysis"]["keywords"]
        assert keywords[0] == {"term": "workers", "count": 2}
        assert {"term": "documents", "count": 1} in keywords

        resp = await client.get("/documents")
        assert [d["docId"] for d in resp.json()["documents"]] == [doc_id]

    async def test_docx_document_lifecycle(self, client: AsyncClient, listener: QueueListener):
        docx = pytest.importorskip("docx")
        doc = docx.Document()
        doc.add_paragraph("Quarterly revenue report.")
        doc.add_paragraph("Revenue grew in every region.")
        buf = io.BytesIO()
        doc.save(buf)

        doc_id = await _upload(
            client,
            "Q3 Report.docx",
            buf.getvalue(),
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        )
        await listener.run(once=True)

        body = (await client.get("/results", params={"docId": doc_id})).json()
        assert body["fullText"] == "Quarterly revenue report.\nRevenue grew in every region."
        assert body["statistics"]["wordCount"] == 8

    async def test_broken_document_ends_in_poison_queue(
        self,
        client: AsyncClient,
        listener: QueueListener,
        work_queue: FakeWorkQueue,
    ):
        doc_id = await _upload(client, "broken.pdf", b"not really a pdf", "application/pdf")

        for _ in range(work_queue.max_receive_count):
            assert (await listener.run(once=True))["failed"] == 1
            work_queue.expire_visibility()
        await listener.run(once=True)

        assert len(work_queue.poison) == 1
        assert work_queue.acked == []
        # Without a result the upload keeps reporting as processing
        assert (await client.get("/results", params={"docId": doc_id})).status_code == 202
        assert (await client.get("/documents")).json()["count"] == 0

    async def test_duplicate_delivery_overwrites_identically(
        self,
        client: AsyncClient,
        listener: QueueListener,
        work_queue: FakeWorkQueue,
    ):
        doc_id = await _upload(client, "notes.txt", TEXT.encode(), "text/plain")
        # Simulate an at-least-once duplicate of the same message
        work_queue.send_raw(work_queue.messages[0].body)

        stats = await listener.run(once=True)
        assert stats["completed"] == 2

        body = (await client.get("/results", params={"docId": doc_id})).json()
        assert body["statistics"]["wordCount"] == 15
        assert (await client.get("/documents")).json()["count"] == 1
