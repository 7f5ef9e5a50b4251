"""Pydantic schemas: queue message, persisted result record, API responses.

Wire and persisted shapes use camelCase keys; Python code uses snake_case
attributes. Every persisted/queued shape carries ``schemaVersion``.
"""

from __future__ import annotations

import base64
import binascii
from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from docpipe.errors import MessageParseError

WORK_MESSAGE_VERSION = 1
RESULT_RECORD_VERSION = 1


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire_dict(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# -- Queue --------------------------------------------------------------------


class WorkMessage(_WireModel):
    """One unit of queued work. Only ``doc_id`` is authoritative."""

    doc_id: str = Field(..., min_length=1)
    file_name: str
    file_size: int = Field(..., ge=0)
    file_type: str
    uploaded_at: datetime
    schema_version: int = WORK_MESSAGE_VERSION

    def encode(self) -> str:
        """JSON, UTF-8, then base64: the queue transport payload."""
        raw = self.model_dump_json(by_alias=True).encode("utf-8")
        return base64.b64encode(raw).decode("ascii")

    @classmethod
    def decode(cls, body: str) -> WorkMessage:
        try:
            raw = base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError) as e:
            raise MessageParseError(f"Message body is not valid base64: {e}") from e
        try:
            return cls.model_validate_json(raw)
        except ValidationError as e:
            raise MessageParseError(f"Invalid work message: {e}") from e


# -- Result record ------------------------------------------------------------


class Keyword(_WireModel):
    term: str
    count: int | None = None


class Statistics(_WireModel):
    word_count: int
    char_count: int
    estimated_reading_minutes: int


class HeuristicAnalysis(_WireModel):
    source: Literal["heuristic"] = "heuristic"
    summary: str
    keywords: list[Keyword] = Field(default_factory=list)
    themes: list[str] = Field(default_factory=list)
    document_type: str = "unknown"
    tone: str = "unknown"


class GeminiAnalysis(_WireModel):
    source: Literal["gemini"] = "gemini"
    summary: str
    keywords: list[Keyword] = Field(default_factory=list)
    themes: list[str] = Field(default_factory=list)
    document_type: str
    tone: str
    truncated: bool = False


class DegradedAnalysis(_WireModel):
    """External analysis answered with something we could not parse."""

    source: Literal["degraded"] = "degraded"
    summary: str
    keywords: list[Keyword] = Field(default_factory=list)
    themes: list[str] = Field(default_factory=list)
    document_type: str = "unknown"
    tone: str = "unknown"
    truncated: bool = False


Analysis = Annotated[
    HeuristicAnalysis | GeminiAnalysis | DegradedAnalysis,
    Field(discriminator="source"),
]


class ResultRecord(_WireModel):
    doc_id: str
    file_name: str
    file_type: str
    processed_at: datetime
    statistics: Statistics
    analysis: Analysis
    full_text: str
    schema_version: int = RESULT_RECORD_VERSION

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


# -- API responses ------------------------------------------------------------


class UploadResponse(_WireModel):
    success: bool = True
    doc_id: str
    file_name: str
    file_size: int
    message: str = "File uploaded successfully and queued for processing"


class ProcessingResponse(_WireModel):
    status: Literal["processing"] = "processing"
    doc_id: str
    message: str = "Document is still being processed. Please try again in a few moments."


class NotFoundResponse(_WireModel):
    status: Literal["not_found"] = "not_found"
    doc_id: str
    error: str = "Document not found"


class ErrorResponse(_WireModel):
    error: str
    details: str | None = None


class DocumentEntry(_WireModel):
    doc_id: str
    file_name: str
    size: int | None = None
    created_on: datetime | None = None
    last_modified: datetime | None = None


class DocumentListResponse(_WireModel):
    success: bool = True
    count: int
    documents: list[DocumentEntry]


class HealthResponse(BaseModel):
    status: str
    error: str | None = None
