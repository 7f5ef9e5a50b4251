"""Exception taxonomy for the pipeline.

Request-driven components map these to HTTP responses; the worker lets all of
them propagate so the queue redelivers the message. Degraded analysis is not an
exception (see ``docpipe.models.DegradedAnalysis``).
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base for all pipeline errors."""


class ClientInputError(PipelineError):
    """Caller sent something unusable (no file, bad extension, missing param)."""


class TransientStoreError(PipelineError):
    """Blob store or queue unreachable or rejected the call."""


class UploadMissingError(PipelineError):
    """A work message referenced an upload that is not in the store."""

    def __init__(self, doc_id: str) -> None:
        super().__init__(f"Upload not found for document '{doc_id}'")
        self.doc_id = doc_id


class ExtractionError(PipelineError):
    """Document bytes could not be parsed by the selected extractor."""

    def __init__(self, doc_id: str, strategy: str, reason: str) -> None:
        super().__init__(f"{strategy} extraction failed for '{doc_id}': {reason}")
        self.doc_id = doc_id
        self.strategy = strategy


class AnalysisServiceError(PipelineError):
    """The external analysis call itself failed (network, quota, timeout)."""


class MessageParseError(PipelineError):
    """A queue payload could not be decoded into a WorkMessage."""
