from __future__ import annotations  # Interview report domain models

from typing import List, Literal

from pydantic import BaseModel, Field

from interview_session import InterviewStatus, ResponseRecord

NarrativeSource = Literal["model", "fallback"]


class ReportScores(BaseModel):  # Interview-wide rubric averages, each 0-5
    technicalDepth: float = 0.0
    clarity: float = 0.0
    confidence: float = 0.0
    overall: float = 0.0


class ReportFlags(BaseModel):
    totalFlags: int = 0
    readingCount: int = 0
    silenceCount: int = 0
    irrelevantCount: int = 0


class ReportSummary(BaseModel):
    totalQuestions: int
    averageScore: float
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class QuestionAssessment(BaseModel):
    question: str
    assessment: str


class ReportNarrative(BaseModel):  # Model-written or templated feedback for a whole interview
    summary: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    hireability: int = Field(ge=0, le=100)
    perQuestion: List[QuestionAssessment] = Field(default_factory=list)
    source: NarrativeSource = "model"


class ReportRecord(BaseModel):  # Derived, regenerable report over a completed interview
    report_id: str
    interview_id: str
    user_id: str
    summary: ReportSummary
    scores: ReportScores
    flags: ReportFlags
    narrative: ReportNarrative
    transcript: str
    created_at: str


class EvaluationSummary(BaseModel):  # Running aggregate over the responses recorded so far
    interview_id: str
    status: InterviewStatus
    answered: int
    total_questions: int
    scores: ReportScores
    flags: ReportFlags
    responses: List[ResponseRecord] = Field(default_factory=list)


__all__ = [
    "EvaluationSummary",
    "NarrativeSource",
    "QuestionAssessment",
    "ReportFlags",
    "ReportNarrative",
    "ReportRecord",
    "ReportScores",
    "ReportSummary",
]
