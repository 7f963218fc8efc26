from __future__ import annotations

import logging
import math
from textwrap import dedent
from typing import Literal, Optional

from pydantic import BaseModel, Field

from llm_gateway import LlmGatewayError, ModelClient, call

logger = logging.getLogger(__name__)

Sentiment = Literal["positive", "neutral", "negative"]
EvaluationSource = Literal["model", "fallback"]

NEUTRAL_SCORE = 3


class RubricScore(BaseModel):  # One 0-5 rubric dimension with feedback
    score: int = Field(ge=0, le=5)
    feedback: str = ""


class AnswerFlags(BaseModel):  # Delivery problems detected in an answer
    reading: bool = False
    silence: bool = False
    irrelevant: bool = False

    def count(self) -> int:
        return int(self.reading) + int(self.silence) + int(self.irrelevant)


class Evaluation(BaseModel):  # Rubric evaluation persisted with a response
    technicalDepth: RubricScore
    clarity: RubricScore
    confidence: RubricScore
    sentiment: Sentiment = "neutral"
    flags: AnswerFlags = Field(default_factory=AnswerFlags)
    overallScore: float = Field(ge=0.0, le=5.0)
    source: EvaluationSource = "model"


class _ReplyScore(BaseModel):  # Lenient shape accepted from the model
    score: float
    feedback: str = ""


class _EvaluationReply(BaseModel):
    technicalDepth: _ReplyScore
    clarity: _ReplyScore
    confidence: _ReplyScore
    sentiment: str = "neutral"
    flags: AnswerFlags = Field(default_factory=AnswerFlags)
    overallScore: Optional[float] = None


def fallback_evaluation() -> Evaluation:  # Fixed neutral evaluation used when scoring fails
    return Evaluation(
        technicalDepth=RubricScore(score=NEUTRAL_SCORE, feedback="Shows basic understanding"),
        clarity=RubricScore(score=NEUTRAL_SCORE, feedback="Clear communication"),
        confidence=RubricScore(score=NEUTRAL_SCORE, feedback="Moderate confidence level"),
        sentiment="neutral",
        flags=AnswerFlags(),
        overallScore=float(NEUTRAL_SCORE),
        source="fallback",
    )


class AnswerEvaluator:  # Scores one transcript against its question
    def __init__(self, model: Optional[ModelClient]) -> None:
        self._model = model

    def evaluate(self, transcript: str, question: str) -> Evaluation:  # Never raises on model failure
        if self._model is None:
            logger.warning("No evaluation model configured; using neutral fallback evaluation")
            return fallback_evaluation()
        try:
            reply = call(_build_task(transcript, question), _EvaluationReply, model=self._model)
        except LlmGatewayError as exc:
            logger.warning("Answer evaluation failed, using neutral fallback evaluation: %s", exc)
            return fallback_evaluation()
        if not _finite(reply):
            logger.warning("Answer evaluation returned non-finite scores, using neutral fallback evaluation")
            return fallback_evaluation()
        return _normalize(reply)


def _finite(reply: _EvaluationReply) -> bool:
    scores = [reply.technicalDepth.score, reply.clarity.score, reply.confidence.score]
    if reply.overallScore is not None:
        scores.append(reply.overallScore)
    return all(math.isfinite(score) for score in scores)


def _clamp_score(value: float) -> int:
    return int(round(max(0.0, min(5.0, float(value)))))


def _normalize(reply: _EvaluationReply) -> Evaluation:  # Clamp model scores into the rubric range
    technical = RubricScore(score=_clamp_score(reply.technicalDepth.score), feedback=reply.technicalDepth.feedback)
    clarity = RubricScore(score=_clamp_score(reply.clarity.score), feedback=reply.clarity.feedback)
    confidence = RubricScore(score=_clamp_score(reply.confidence.score), feedback=reply.confidence.feedback)
    if reply.overallScore is None:
        overall = (technical.score + clarity.score + confidence.score) / 3.0
    else:
        overall = max(0.0, min(5.0, float(reply.overallScore)))
    sentiment = reply.sentiment.strip().lower()
    if sentiment not in ("positive", "neutral", "negative"):
        sentiment = "neutral"
    return Evaluation(
        technicalDepth=technical,
        clarity=clarity,
        confidence=confidence,
        sentiment=sentiment,
        flags=reply.flags,
        overallScore=round(overall, 2),
        source="model",
    )


def _build_task(transcript: str, question: str) -> str:  # Compose evaluation prompt
    return dedent(
        """
        You are an interviewer evaluating a candidate's spoken answer. Rate it on a 0-5 scale for:
        - technicalDepth: accuracy and depth of knowledge
        - clarity: how well concepts are explained
        - confidence: speaking with assurance, without hesitation

        Also detect:
        - sentiment: positive, neutral or negative
        - flags: reading from a script, long silences, irrelevant answer

        Question: {question}
        Transcript: {transcript}

        Return only valid JSON with this exact structure:
        {{
          "technicalDepth": {{"score": 4, "feedback": "..."}},
          "clarity": {{"score": 3, "feedback": "..."}},
          "confidence": {{"score": 4, "feedback": "..."}},
          "sentiment": "positive",
          "flags": {{"reading": false, "silence": false, "irrelevant": false}},
          "overallScore": 3.7
        }}
        """
    ).strip().format(question=question, transcript=transcript)
