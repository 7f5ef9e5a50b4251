"""Environment-variable-driven configuration for the document pipeline.

A single immutable ``PipelineConfig`` is built once per process (API lifespan or
worker entry point) and handed to every component that needs it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

ANALYSIS_MODES = ("heuristic", "gemini")


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_csv(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _get_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or not v.strip():
        return default
    return int(v)


def _normalize_ext(ext: str) -> str:
    ext = ext.strip().lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    return ext


@dataclass(frozen=True)
class PipelineConfig:
    # GCS (upload + result stores)
    gcp_project: str | None
    storage_endpoint: str | None
    upload_bucket: str
    result_bucket: str

    # SQS (work queue)
    queue_name: str
    queue_url: str | None
    dead_letter_queue_name: str
    aws_region: str
    sqs_endpoint: str | None

    # Submission
    allowed_extensions: tuple[str, ...]
    max_upload_bytes: int

    # Analysis
    analysis_mode: str
    gemini_api_key: str | None
    gemini_model: str
    analysis_max_chars: int
    analysis_timeout_seconds: int
    reading_wpm: int
    summary_chars: int
    keyword_limit: int

    # Worker
    worker_concurrency: int
    visibility_timeout_seconds: int
    wait_time_seconds: int
    max_receive_count: int

    # HTTP
    cors_allow_origins: tuple[str, ...]

    # Logging
    json_logs: bool

    @classmethod
    def from_env(cls) -> PipelineConfig:
        allowed = tuple(
            _normalize_ext(e) for e in _env_csv("DOCPIPE_ALLOWED_EXTENSIONS", ".pdf,.docx,.doc,.txt")
        )
        return cls(
            gcp_project=os.getenv("GOOGLE_CLOUD_PROJECT") or None,
            storage_endpoint=os.getenv("DOCPIPE_STORAGE_ENDPOINT") or None,
            upload_bucket=os.getenv("DOCPIPE_UPLOAD_BUCKET", "uploads"),
            result_bucket=os.getenv("DOCPIPE_RESULT_BUCKET", "processed"),
            queue_name=os.getenv("DOCPIPE_QUEUE_NAME", "document-processing"),
            queue_url=os.getenv("DOCPIPE_QUEUE_URL") or None,
            dead_letter_queue_name=os.getenv(
                "DOCPIPE_DEAD_LETTER_QUEUE_NAME", "document-processing-poison"
            ),
            aws_region=os.getenv("AWS_REGION", "us-east-1"),
            sqs_endpoint=os.getenv("DOCPIPE_SQS_ENDPOINT") or None,
            allowed_extensions=allowed,
            max_upload_bytes=_get_int("DOCPIPE_MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
            analysis_mode=os.getenv("DOCPIPE_ANALYSIS_MODE", "heuristic").strip().lower(),
            gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("DOCPIPE_GEMINI_MODEL", "gemini-2.0-flash"),
            analysis_max_chars=_get_int("DOCPIPE_ANALYSIS_MAX_CHARS", 30_000),
            analysis_timeout_seconds=_get_int("DOCPIPE_ANALYSIS_TIMEOUT_SECONDS", 60),
            reading_wpm=_get_int("DOCPIPE_READING_WPM", 200),
            summary_chars=_get_int("DOCPIPE_SUMMARY_CHARS", 500),
            keyword_limit=_get_int("DOCPIPE_KEYWORD_LIMIT", 10),
            worker_concurrency=_get_int("DOCPIPE_WORKER_CONCURRENCY", 4),
            visibility_timeout_seconds=_get_int("DOCPIPE_VISIBILITY_TIMEOUT_SECONDS", 300),
            wait_time_seconds=_get_int("DOCPIPE_WAIT_TIME_SECONDS", 20),
            max_receive_count=_get_int("DOCPIPE_MAX_RECEIVE_COUNT", 5),
            cors_allow_origins=tuple(_env_csv("DOCPIPE_CORS_ALLOW_ORIGINS", "*")),
            json_logs=_env_bool("DOCPIPE_JSON_LOGS", bool(os.getenv("K_SERVICE"))),
        )

    def validate(self) -> None:
        if not self.upload_bucket or not self.result_bucket:
            raise ValueError("DOCPIPE_UPLOAD_BUCKET and DOCPIPE_RESULT_BUCKET must not be empty")
        if not self.allowed_extensions:
            raise ValueError("DOCPIPE_ALLOWED_EXTENSIONS was set but parsed as empty")
        if self.analysis_mode not in ANALYSIS_MODES:
            raise ValueError(
                f"DOCPIPE_ANALYSIS_MODE must be one of {', '.join(ANALYSIS_MODES)}, "
                f"got '{self.analysis_mode}'"
            )
        if self.analysis_mode == "gemini" and not self.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required when DOCPIPE_ANALYSIS_MODE=gemini")
        if self.reading_wpm < 1:
            raise ValueError("DOCPIPE_READING_WPM must be >= 1")
        if self.analysis_max_chars < 1:
            raise ValueError("DOCPIPE_ANALYSIS_MAX_CHARS must be >= 1")
        if self.worker_concurrency < 1:
            raise ValueError("DOCPIPE_WORKER_CONCURRENCY must be >= 1")
        if not 0 <= self.wait_time_seconds <= 20:
            raise ValueError("DOCPIPE_WAIT_TIME_SECONDS must be between 0 and 20")
        if self.max_receive_count < 1:
            raise ValueError("DOCPIPE_MAX_RECEIVE_COUNT must be >= 1")
