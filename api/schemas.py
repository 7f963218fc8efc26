"""Pydantic schemas for the interview practice API."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from accounts import UserRecord
from interview_evaluation import Evaluation
from interview_session import InterviewRecord, QuestionRecord, ResponseRecord
from resume_parsing import Profile
from resumes import ResumeRecord
from session_reports import (
    EvaluationSummary,
    ReportFlags,
    ReportNarrative,
    ReportRecord,
    ReportScores,
    ReportSummary,
)


class RegisterReq(BaseModel):
    name: str
    email: str
    password: str


class LoginReq(BaseModel):
    email: str
    password: str


class CreateInterviewReq(BaseModel):
    resumeId: str


class UserOut(BaseModel):
    id: str
    name: str
    email: str
    createdAt: str

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserOut":
        return cls(id=record.user_id, name=record.name, email=record.email, createdAt=record.created_at)


class AuthResp(BaseModel):
    token: str
    user: UserOut


class ResumeOut(BaseModel):
    id: str
    fileName: str
    mediaType: str
    parsedData: Profile
    profileSource: str
    originalText: str
    createdAt: str

    @classmethod
    def from_record(cls, record: ResumeRecord) -> "ResumeOut":
        return cls(
            id=record.resume_id,
            fileName=record.file_name,
            mediaType=record.media_type,
            parsedData=record.profile,
            profileSource=record.profile_source,
            originalText=record.original_text,
            createdAt=record.created_at,
        )


class QuestionOut(BaseModel):
    id: str
    text: str
    category: str
    order: int
    timeLimit: int

    @classmethod
    def from_record(cls, record: QuestionRecord) -> "QuestionOut":
        return cls(
            id=record.question_id,
            text=record.text,
            category=record.category,
            order=record.order,
            timeLimit=record.time_limit,
        )


class InterviewOut(BaseModel):
    id: str
    resumeId: str
    status: str
    currentQuestionIndex: int
    totalQuestions: int
    questions: List[QuestionOut] = Field(default_factory=list)
    responses: List[str] = Field(default_factory=list)
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    reportId: Optional[str] = None
    createdAt: str

    @classmethod
    def from_record(cls, record: InterviewRecord, questions: List[QuestionRecord]) -> "InterviewOut":
        return cls(
            id=record.interview_id,
            resumeId=record.resume_id,
            status=record.status,
            currentQuestionIndex=record.current_question_index,
            totalQuestions=record.total_questions,
            questions=[QuestionOut.from_record(q) for q in questions],
            responses=list(record.responses),
            startTime=record.start_time,
            endTime=record.end_time,
            reportId=record.report_id,
            createdAt=record.created_at,
        )


class Progress(BaseModel):
    current: int
    total: int


class CurrentQuestionResp(BaseModel):
    completed: bool
    message: Optional[str] = None
    question: Optional[QuestionOut] = None
    progress: Optional[Progress] = None


class ResponseOut(BaseModel):
    id: str
    interviewId: str
    questionId: str
    transcript: str
    audioRef: Optional[str] = None
    videoRef: Optional[str] = None
    evaluation: Evaluation
    duration: float
    createdAt: str

    @classmethod
    def from_record(cls, record: ResponseRecord) -> "ResponseOut":
        return cls(
            id=record.response_id,
            interviewId=record.interview_id,
            questionId=record.question_id,
            transcript=record.transcript,
            audioRef=record.audio_ref,
            videoRef=record.video_ref,
            evaluation=record.evaluation,
            duration=record.duration,
            createdAt=record.created_at,
        )


class SubmitAnswerResp(BaseModel):
    responseId: str
    transcript: str
    evaluation: Evaluation
    completed: bool
    status: str
    currentQuestionIndex: int
    totalQuestions: int


class SummaryResp(BaseModel):
    interviewId: str
    status: str
    answered: int
    totalQuestions: int
    scores: ReportScores
    flags: ReportFlags
    responses: List[ResponseOut] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: EvaluationSummary) -> "SummaryResp":
        return cls(
            interviewId=summary.interview_id,
            status=summary.status,
            answered=summary.answered,
            totalQuestions=summary.total_questions,
            scores=summary.scores,
            flags=summary.flags,
            responses=[ResponseOut.from_record(r) for r in summary.responses],
        )


class ReportOut(BaseModel):
    id: str
    interviewId: str
    summary: ReportSummary
    scores: ReportScores
    flags: ReportFlags
    narrative: ReportNarrative
    transcript: str
    createdAt: str

    @classmethod
    def from_record(cls, record: ReportRecord) -> "ReportOut":
        return cls(
            id=record.report_id,
            interviewId=record.interview_id,
            summary=record.summary,
            scores=record.scores,
            flags=record.flags,
            narrative=record.narrative,
            transcript=record.transcript,
            createdAt=record.created_at,
        )


class MessageResp(BaseModel):
    message: str
