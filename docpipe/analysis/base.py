from __future__ import annotations

from typing import Protocol

from docpipe.analysis.gemini import GeminiAnalyzer, build_gemini_client
from docpipe.analysis.heuristic import HeuristicAnalyzer
from docpipe.config import PipelineConfig
from docpipe.models import DegradedAnalysis, GeminiAnalysis, HeuristicAnalysis


class Analyzer(Protocol):
    def analyze(self, text: str) -> HeuristicAnalysis | GeminiAnalysis | DegradedAnalysis: ...


def build_analyzer(cfg: PipelineConfig) -> Analyzer:
    """Analyzer selected by ``DOCPIPE_ANALYSIS_MODE``."""
    if cfg.analysis_mode == "gemini":
        return GeminiAnalyzer(
            client=build_gemini_client(cfg),
            model=cfg.gemini_model,
            max_chars=cfg.analysis_max_chars,
        )
    return HeuristicAnalyzer(keyword_limit=cfg.keyword_limit, summary_chars=cfg.summary_chars)
