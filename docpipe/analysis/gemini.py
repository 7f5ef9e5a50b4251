"""External document analysis with Gemini.

The model is asked for a JSON object. The reply is parsed strictly; anything
that does not validate becomes a ``DegradedAnalysis`` carrying the raw reply,
so a bad answer never fails a document whose text was already extracted.
Failures of the call itself (network, quota, timeout) raise
``AnalysisServiceError`` and the message is retried.
"""

from __future__ import annotations

import json
import logging

from google import genai
from google.genai import types
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from docpipe.config import PipelineConfig
from docpipe.errors import AnalysisServiceError
from docpipe.models import DegradedAnalysis, GeminiAnalysis, Keyword

logger = logging.getLogger(__name__)

_PROMPT = """Analyze the document below and respond with a single JSON object with exactly these keys:
- "summary": a concise summary (3-5 sentences)
- "keywords": an array of up to 10 key terms, most important first
- "themes": an array of the main themes
- "documentType": a short label such as "report", "letter", "resume", "contract", "article"
- "tone": a short label such as "formal", "informal", "technical", "persuasive"
{truncation_note}
Document:
---
{excerpt}
---"""

_TRUNCATION_NOTE = "The document was truncated to its first {n} characters.\n"


class _AnalysisPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    summary: str
    keywords: list[str]
    themes: list[str]
    document_type: str = Field(alias="documentType")
    tone: str


def build_gemini_client(cfg: PipelineConfig) -> genai.Client:
    return genai.Client(
        api_key=cfg.gemini_api_key,
        http_options=types.HttpOptions(timeout=cfg.analysis_timeout_seconds * 1000),
    )


def build_excerpt(text: str, max_chars: int) -> tuple[str, bool]:
    if len(text) <= max_chars:
        return text, False
    return text[:max_chars], True


def parse_analysis(raw: str | None, *, truncated: bool) -> GeminiAnalysis | DegradedAnalysis:
    raw = raw or ""
    try:
        data = json.loads(raw)
        payload = _AnalysisPayload.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning("Analysis response was not well-formed, using degraded annotation: %s", e)
        return DegradedAnalysis(summary=raw, truncated=truncated)

    return GeminiAnalysis(
        summary=payload.summary,
        keywords=[Keyword(term=k) for k in payload.keywords],
        themes=payload.themes,
        document_type=payload.document_type,
        tone=payload.tone,
        truncated=truncated,
    )


class GeminiAnalyzer:
    def __init__(self, *, client: genai.Client, model: str, max_chars: int) -> None:
        self._client = client
        self._model = model
        self._max_chars = max_chars

    def analyze(self, text: str) -> GeminiAnalysis | DegradedAnalysis:
        excerpt, truncated = build_excerpt(text, self._max_chars)
        prompt = _PROMPT.format(
            truncation_note=_TRUNCATION_NOTE.format(n=self._max_chars) if truncated else "",
            excerpt=excerpt,
        )
        try:
            response = self._client.models.generate_content(
                model=self._model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    response_mime_type="application/json",
                    temperature=0.2,
                ),
            )
        except Exception as e:
            raise AnalysisServiceError(f"Gemini analysis call failed: {type(e).__name__}: {e}") from e

        return parse_analysis(response.text, truncated=truncated)
