"""Integration fixtures: the API, the queue listener and the worker wired
together over the in-memory store and queue."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from docpipe.analysis.heuristic import HeuristicAnalyzer
from docpipe.app import create_app, limiter
from docpipe.config import PipelineConfig
from docpipe.ingestion.listener import QueueListener
from docpipe.ingestion.worker import DocumentWorker
from tests.fakes import FakeBlobStore, FakeWorkQueue


@pytest.fixture
def events() -> list[tuple[str, str]]:
    return []


@pytest.fixture
def blob_store(events: list[tuple[str, str]]) -> FakeBlobStore:
    return FakeBlobStore(events)


@pytest.fixture
def work_queue(events: list[tuple[str, str]], pipeline_config: PipelineConfig) -> FakeWorkQueue:
    return FakeWorkQueue(events, max_receive_count=pipeline_config.max_receive_count)


@pytest.fixture
def listener(
    pipeline_config: PipelineConfig, blob_store: FakeBlobStore, work_queue: FakeWorkQueue
) -> QueueListener:
    worker = DocumentWorker(
        blob_store=blob_store,  # type: ignore[arg-type]
        analyzer=HeuristicAnalyzer(
            keyword_limit=pipeline_config.keyword_limit,
            summary_chars=pipeline_config.summary_chars,
        ),
        reading_wpm=pipeline_config.reading_wpm,
    )
    return QueueListener(
        queue=work_queue,  # type: ignore[arg-type]
        worker=worker,
        concurrency=pipeline_config.worker_concurrency,
        wait_seconds=pipeline_config.wait_time_seconds,
        visibility_timeout=pipeline_config.visibility_timeout_seconds,
        max_receive_count=pipeline_config.max_receive_count,
    )


@pytest.fixture
async def client(pipeline_config: PipelineConfig, blob_store: FakeBlobStore, work_queue: FakeWorkQueue):
    app = create_app(pipeline_config, blob_store=blob_store, work_queue=work_queue)  # type: ignore[arg-type]
    limiter.reset()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
