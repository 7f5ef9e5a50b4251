"""Unit tests for the queue message and result record schemas."""

from __future__ import annotations

import base64
import json
from datetime import UTC, datetime

import pytest

from docpipe.errors import MessageParseError
from docpipe.models import (
    DegradedAnalysis,
    HeuristicAnalysis,
    Keyword,
    ResultRecord,
    Statistics,
    WorkMessage,
)


def _message() -> WorkMessage:
    return WorkMessage(
        doc_id="1700000000000-report.pdf",
        file_name="report.pdf",
        file_size=1024,
        file_type=".pdf",
        uploaded_at=datetime(2026, 1, 15, 12, 0, tzinfo=UTC),
    )


class TestWorkMessageWireFormat:
    def test_encoded_as_base64_json_with_camel_case_keys(self):
        payload = json.loads(base64.b64decode(_message().encode()))
        assert payload["docId"] == "1700000000000-report.pdf"
        assert payload["fileName"] == "report.pdf"
        assert payload["fileSize"] == 1024
        assert payload["fileType"] == ".pdf"
        assert payload["uploadedAt"].startswith("2026-01-15T12:00:00")
        assert payload["schemaVersion"] == 1

    def test_decode(self):
        decoded = WorkMessage.decode(_message().encode())
        assert decoded == _message()

    def test_decode_rejects_non_base64(self):
        with pytest.raises(MessageParseError, match="base64"):
            WorkMessage.decode("not base64 at all!")

    def test_decode_rejects_non_json(self):
        body = base64.b64encode(b"plain text").decode()
        with pytest.raises(MessageParseError, match="Invalid work message"):
            WorkMessage.decode(body)

    def test_decode_rejects_missing_doc_id(self):
        body = base64.b64encode(json.dumps({"fileName": "a.txt"}).encode()).decode()
        with pytest.raises(MessageParseError):
            WorkMessage.decode(body)

    def test_decode_ignores_unknown_fields(self):
        payload = json.loads(base64.b64decode(_message().encode()))
        payload["futureField"] = "x"
        body = base64.b64encode(json.dumps(payload).encode()).decode()
        assert WorkMessage.decode(body).doc_id == "1700000000000-report.pdf"


class TestResultRecord:
    def _record(self, analysis) -> ResultRecord:
        return ResultRecord(
            doc_id="1-a.txt",
            file_name="a.txt",
            file_type=".txt",
            processed_at=datetime(2026, 1, 15, tzinfo=UTC),
            statistics=Statistics(word_count=2, char_count=9, estimated_reading_minutes=1),
            analysis=analysis,
            full_text="alpha beta",
        )

    def test_pretty_printed_camel_case_json(self):
        raw = self._record(HeuristicAnalysis(summary="alpha beta")).to_json()
        assert raw.startswith("{\n  ")
        data = json.loads(raw)
        assert data["docId"] == "1-a.txt"
        assert data["fullText"] == "alpha beta"
        assert data["statistics"]["estimatedReadingMinutes"] == 1
        assert data["analysis"]["documentType"] == "unknown"
        assert data["schemaVersion"] == 1

    def test_analysis_variant_survives_reload(self):
        record = self._record(DegradedAnalysis(summary="raw reply", truncated=True))
        reloaded = ResultRecord.model_validate_json(record.to_json())
        assert isinstance(reloaded.analysis, DegradedAnalysis)
        assert reloaded.analysis.truncated is True

    def test_keywords_serialized_as_term_count(self):
        analysis = HeuristicAnalysis(summary="", keywords=[Keyword(term="alpha", count=3)])
        data = json.loads(self._record(analysis).to_json())
        assert data["analysis"]["keywords"] == [{"term": "alpha", "count": 3}]
