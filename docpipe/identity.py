"""Document identity scheme.

A document id is ``<epoch millis>-<sanitized file name>``. The same id keys the
raw upload blob and the queue message; the result record lives at
``<id>.json``. Two uploads of the same file name within the same millisecond
collide; the second upload overwrites the first.
"""

from __future__ import annotations

import re
import time

RESULT_SUFFIX = ".json"

_UNSAFE = re.compile(r"[^A-Za-z0-9.-]")


def sanitize_filename(file_name: str) -> str:
    return _UNSAFE.sub("_", file_name)


def file_extension(file_name: str) -> str:
    """Return the lowercased substring from the last ``.``, or ``""``."""
    idx = file_name.rfind(".")
    if idx < 0:
        return ""
    return file_name[idx:].lower()


def new_document_id(file_name: str, *, now_ms: int | None = None) -> str:
    ts = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    return f"{ts}-{sanitize_filename(file_name)}"


def result_key(doc_id: str) -> str:
    return f"{doc_id}{RESULT_SUFFIX}"


def doc_id_from_result_key(key: str) -> str:
    return key.removesuffix(RESULT_SUFFIX)
