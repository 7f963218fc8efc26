from __future__ import annotations  # Re-export interview_evaluation public API

from .evaluation import (
    AnswerEvaluator,
    AnswerFlags,
    Evaluation,
    EvaluationSource,
    RubricScore,
    Sentiment,
    fallback_evaluation,
)

__all__ = [
    "AnswerEvaluator",
    "AnswerFlags",
    "Evaluation",
    "EvaluationSource",
    "RubricScore",
    "Sentiment",
    "fallback_evaluation",
]
