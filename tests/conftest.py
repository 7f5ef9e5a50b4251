"""Shared test fixtures for the docpipe test suite."""

from __future__ import annotations

import pytest

from docpipe.config import PipelineConfig


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    return PipelineConfig(
        gcp_project="test-project",
        storage_endpoint=None,
        upload_bucket="test-uploads",
        result_bucket="test-processed",
        queue_name="document-processing",
        queue_url="https://sqs.test/000000000000/document-processing",
        dead_letter_queue_name="document-processing-poison",
        aws_region="us-east-1",
        sqs_endpoint=None,
        allowed_extensions=(".pdf", ".docx", ".doc", ".txt"),
        max_upload_bytes=1024 * 1024,
        analysis_mode="heuristic",
        gemini_api_key=None,
        gemini_model="gemini-2.0-flash",
        analysis_max_chars=30_000,
        analysis_timeout_seconds=60,
        reading_wpm=200,
        summary_chars=500,
        keyword_limit=10,
        worker_concurrency=2,
        visibility_timeout_seconds=30,
        wait_time_seconds=0,
        max_receive_count=3,
        cors_allow_origins=("*",),
        json_logs=False,
    )
