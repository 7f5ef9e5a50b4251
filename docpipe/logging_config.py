"""Logging setup shared by the API and the worker process.

Deployed processes emit one JSON object per line for Cloud Logging
(python-json-logger); local runs get a compact text format. Pipeline
correlation fields passed via ``extra=`` are copied into Cloud Logging labels
so a document can be followed from upload to result.
"""

from __future__ import annotations

import logging
import uuid

from pythonjsonlogger.json import JsonFormatter

# Fields that identify a document or a delivery across processes
CORRELATION_FIELDS = ("doc_id", "message_id", "request_id")

_LABELS_KEY = "logging.googleapis.com/labels"

# SDK loggers that drown out pipeline events at DEBUG
_QUIET_LOGGERS = ("botocore", "boto3", "urllib3", "google.auth", "httpx", "httpcore")

_TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s:%(lineno)d  %(message)s"


class GCPJsonFormatter(JsonFormatter):
    """Cloud Logging flavoured JSON: ``severity`` instead of ``levelname``."""

    def add_fields(
        self,
        log_record: dict[str, object],
        record: logging.LogRecord,
        message_dict: dict[str, object],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.pop("levelname", None)
        # NOTSET has no Cloud Logging counterpart
        log_record["severity"] = record.levelname if record.levelno else "DEFAULT"

        labels = {k: str(log_record[k]) for k in CORRELATION_FIELDS if log_record.get(k)}
        if labels:
            log_record[_LABELS_KEY] = labels


def _build_formatter(json_logs: bool) -> logging.Formatter:
    if json_logs:
        return GCPJsonFormatter(
            fmt="%(message)s %(name)s %(funcName)s %(lineno)d",
            rename_fields={"name": "logger"},
        )
    return logging.Formatter(_TEXT_FORMAT, datefmt="%H:%M:%S")


def setup_logging(*, level: str = "INFO", json_logs: bool = False) -> None:
    """Replace the root handlers with a single stream handler.

    ``json_logs`` comes from ``PipelineConfig.json_logs`` (on by default under
    Cloud Run).
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler()
    handler.setFormatter(_build_formatter(json_logs))
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(root.level, logging.WARNING))


def generate_request_id() -> str:
    """Short random id for the ``x-request-id`` header."""
    return uuid.uuid4().hex[:16]
