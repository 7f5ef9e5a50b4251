from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class WorkerStage(str, Enum):
    """Stages of one worker attempt on one delivery."""

    RECEIVED = "received"
    EXTRACTING = "extracting"
    ANALYZING = "analyzing"
    PERSISTING = "persisting"
    ACKNOWLEDGED = "acknowledged"
    FAILED = "failed"


@dataclass(frozen=True)
class ExtractResult:
    text: str
    pages: int | None
    extraction_meta: dict[str, Any]
