from __future__ import annotations  # Session report package exports

from .aggregator import (
    ReportAggregator,
    average_scores,
    count_flags,
    fallback_narrative,
    pair_transcripts,
    summarize,
)
from .models import (
    EvaluationSummary,
    QuestionAssessment,
    ReportFlags,
    ReportNarrative,
    ReportRecord,
    ReportScores,
    ReportSummary,
)
from .pdf import generate_report_pdf
from .store import ReportStore

__all__ = [
    "EvaluationSummary",
    "QuestionAssessment",
    "ReportAggregator",
    "ReportFlags",
    "ReportNarrative",
    "ReportRecord",
    "ReportScores",
    "ReportStore",
    "ReportSummary",
    "average_scores",
    "count_flags",
    "fallback_narrative",
    "generate_report_pdf",
    "pair_transcripts",
    "summarize",
]
