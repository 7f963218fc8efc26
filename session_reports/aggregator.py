"""Report aggregation over a completed interview's responses."""
from __future__ import annotations

import logging
import math
from textwrap import dedent
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

from pydantic import BaseModel, Field

from errors import IncompleteResponses, NotCompleted
from interview_session import InterviewRecord, QuestionRecord, ResponseRecord
from llm_gateway import LlmGatewayError, ModelClient, call
from observability import log_event
from storage.sqlite import utc_now

from .models import (
    EvaluationSummary,
    QuestionAssessment,
    ReportFlags,
    ReportNarrative,
    ReportRecord,
    ReportScores,
    ReportSummary,
)
from .store import ReportStore

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response"
TRANSCRIPT_SEPARATOR = "\n\n"

FALLBACK_SUMMARY = "Overall performance shows potential with room for improvement"
FALLBACK_STRENGTHS = ("Good technical foundation", "Clear communication", "Enthusiastic approach")
FALLBACK_WEAKNESSES = (
    "Could provide more specific examples",
    "Technical depth can be improved",
    "Practice more complex scenarios",
)
FALLBACK_RECOMMENDATIONS = (
    "Practice targeted questions from your tech stack",
    "Prepare project metrics",
    "Rehearse concise answers",
)
FALLBACK_HIREABILITY = 60
FALLBACK_ASSESSMENT = "Answered adequately; provide more depth and concrete examples."


class _AssessmentReply(BaseModel):
    question: str = ""
    assessment: str = ""


class _NarrativeReply(BaseModel):  # Lenient shape accepted from the model
    summary: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    hireability: float = FALLBACK_HIREABILITY
    perQuestion: List[_AssessmentReply] = Field(default_factory=list)


def average_scores(responses: Sequence[ResponseRecord]) -> ReportScores:  # Means over responses; zeros when empty
    count = len(responses)
    if count == 0:
        return ReportScores()
    return ReportScores(
        technicalDepth=sum(r.evaluation.technicalDepth.score for r in responses) / count,
        clarity=sum(r.evaluation.clarity.score for r in responses) / count,
        confidence=sum(r.evaluation.confidence.score for r in responses) / count,
        overall=sum(r.evaluation.overallScore for r in responses) / count,
    )


def count_flags(responses: Sequence[ResponseRecord]) -> ReportFlags:
    reading = sum(1 for r in responses if r.evaluation.flags.reading)
    silence = sum(1 for r in responses if r.evaluation.flags.silence)
    irrelevant = sum(1 for r in responses if r.evaluation.flags.irrelevant)
    return ReportFlags(
        totalFlags=reading + silence + irrelevant,
        readingCount=reading,
        silenceCount=silence,
        irrelevantCount=irrelevant,
    )


def pair_transcripts(
    questions: Sequence[QuestionRecord],
    responses: Sequence[ResponseRecord],
) -> List[Tuple[str, str]]:  # (question text, transcript) in question order
    by_question: Dict[str, str] = {r.question_id: r.transcript for r in responses}
    return [(q.text, by_question.get(q.question_id, NO_RESPONSE)) for q in questions]


def fallback_narrative(questions: Sequence[QuestionRecord]) -> ReportNarrative:
    return ReportNarrative(
        summary=FALLBACK_SUMMARY,
        strengths=list(FALLBACK_STRENGTHS),
        weaknesses=list(FALLBACK_WEAKNESSES),
        recommendations=list(FALLBACK_RECOMMENDATIONS),
        hireability=FALLBACK_HIREABILITY,
        perQuestion=[QuestionAssessment(question=q.text, assessment=FALLBACK_ASSESSMENT) for q in questions],
        source="fallback",
    )


def summarize(interview: InterviewRecord, responses: Sequence[ResponseRecord]) -> EvaluationSummary:  # Valid in any interview state
    return EvaluationSummary(
        interview_id=interview.interview_id,
        status=interview.status,
        answered=len(responses),
        total_questions=interview.total_questions,
        scores=average_scores(responses),
        flags=count_flags(responses),
        responses=list(responses),
    )


class ReportAggregator:
    """Reduces a completed interview into a persisted report.

    Every call writes a new report and repoints the interview at it; earlier
    reports stay in storage but are no longer referenced.
    """

    def __init__(self, model: Optional[ModelClient], store: ReportStore) -> None:
        self._model = model
        self._store = store

    def generate(
        self,
        interview: InterviewRecord,
        questions: Sequence[QuestionRecord],
        responses: Sequence[ResponseRecord],
    ) -> ReportRecord:
        if interview.status != "completed":
            raise NotCompleted("Interview must be completed before generating a report")
        if len(responses) < interview.total_questions:
            raise IncompleteResponses(
                f"Expected {interview.total_questions} responses, found {len(responses)}"
            )
        scores = average_scores(responses)
        pairs = pair_transcripts(questions, responses)
        narrative = self._narrative(interview.interview_id, pairs, questions)
        report = ReportRecord(
            report_id=uuid4().hex,
            interview_id=interview.interview_id,
            user_id=interview.user_id,
            summary=ReportSummary(
                totalQuestions=interview.total_questions,
                averageScore=scores.overall,
                strengths=narrative.strengths,
                weaknesses=narrative.weaknesses,
                recommendations=narrative.recommendations,
            ),
            scores=scores,
            flags=count_flags(responses),
            narrative=narrative,
            transcript=TRANSCRIPT_SEPARATOR.join(r.transcript for r in responses),
            created_at=utc_now(),
        )
        self._store.save(report)
        log_event(
            "report.generated",
            interview.interview_id,
            report_id=report.report_id,
            source=narrative.source,
        )
        return report

    def _narrative(
        self,
        interview_id: str,
        pairs: Sequence[Tuple[str, str]],
        questions: Sequence[QuestionRecord],
    ) -> ReportNarrative:  # Model narrative, else the templated fallback
        if self._model is None:
            reason = "no_model"
        else:
            try:
                reply = call(_build_task(pairs), _NarrativeReply, model=self._model)
            except LlmGatewayError as exc:
                logger.warning("Report narrative failed, using templated narrative: %s", exc)
                reason = "model_error"
            else:
                if math.isfinite(reply.hireability):
                    return _normalize(reply)
                logger.warning("Report narrative returned a non-finite hireability, using templated narrative")
                reason = "invalid_reply"
        log_event("report.fallback", interview_id, level=logging.WARNING, reason=reason)
        return fallback_narrative(questions)


def _normalize(reply: _NarrativeReply) -> ReportNarrative:
    hireability = int(round(max(0.0, min(100.0, float(reply.hireability)))))
    return ReportNarrative(
        summary=reply.summary.strip(),
        strengths=[item for item in reply.strengths if item.strip()],
        weaknesses=[item for item in reply.weaknesses if item.strip()],
        recommendations=[item for item in reply.recommendations if item.strip()],
        hireability=hireability,
        perQuestion=[
            QuestionAssessment(question=item.question, assessment=item.assessment)
            for item in reply.perQuestion
            if item.question or item.assessment
        ],
        source="model",
    )


def _build_task(pairs: Sequence[Tuple[str, str]]) -> str:  # Compose narrative prompt
    transcript = "\n\n".join(
        f"Q{index}: {question}\nA{index}: {answer}" for index, (question, answer) in enumerate(pairs, start=1)
    )
    return dedent(
        """
        You are an interview coach. Based on the questions and answers below, write concise,
        actionable feedback for the candidate.

        {transcript}

        Return only valid JSON with this exact structure:
        {{
          "summary": "2-3 sentence overview",
          "strengths": ["..."],
          "weaknesses": ["..."],
          "recommendations": ["..."],
          "hireability": 0,
          "perQuestion": [{{"question": "...", "assessment": "..."}}]
        }}
        hireability is an integer from 0 to 100.
        """
    ).strip().format(transcript=transcript)


__all__ = [
    "ReportAggregator",
    "average_scores",
    "count_flags",
    "fallback_narrative",
    "pair_transcripts",
    "summarize",
]
