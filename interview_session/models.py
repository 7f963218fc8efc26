from __future__ import annotations  # Interview session records

from dataclasses import dataclass
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from interview_evaluation import Evaluation
from question_builder import Category

InterviewStatus = Literal["pending", "in-progress", "completed"]

AUDIO_TYPES = ("audio/webm", "audio/mp4", "audio/wav", "audio/mpeg")
VIDEO_TYPES = ("video/webm", "video/mp4")
MEDIA_TYPES = AUDIO_TYPES + VIDEO_TYPES


class QuestionRecord(BaseModel):  # Persisted question; order is 1-based
    question_id: str
    interview_id: str
    text: str
    category: Category
    order: int = Field(ge=1)
    time_limit: int = Field(default=120, ge=1)


class InterviewRecord(BaseModel):  # Linear practice session owned by one user
    interview_id: str
    user_id: str
    resume_id: str
    questions: List[str] = Field(default_factory=list)
    responses: List[str] = Field(default_factory=list)
    status: InterviewStatus = "pending"
    current_question_index: int = Field(default=0, ge=0)
    total_questions: int = Field(default=0, ge=0)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    report_id: Optional[str] = None
    version: int = 0
    created_at: str


class ResponseRecord(BaseModel):  # One answered question, immutable once stored
    response_id: str
    interview_id: str
    question_id: str
    transcript: str
    audio_ref: Optional[str] = None
    video_ref: Optional[str] = None
    evaluation: Evaluation
    duration: float = Field(default=0.0, ge=0.0)
    created_at: str


@dataclass
class MediaUpload:  # Captured answer media as received from the client
    data: bytes
    media_type: str
    file_name: str = ""

    @property
    def is_audio(self) -> bool:
        return self.media_type in AUDIO_TYPES

    @property
    def is_video(self) -> bool:
        return self.media_type in VIDEO_TYPES


@dataclass
class CurrentQuestion:  # Question at the live index, or the completed sentinel
    completed: bool
    question: Optional[QuestionRecord]
    current: int
    total: int


@dataclass
class SubmitOutcome:
    response: ResponseRecord
    interview: InterviewRecord
    completed: bool

    @property
    def evaluation(self) -> Evaluation:
        return self.response.evaluation


__all__ = [
    "AUDIO_TYPES",
    "CurrentQuestion",
    "InterviewRecord",
    "InterviewStatus",
    "MEDIA_TYPES",
    "MediaUpload",
    "QuestionRecord",
    "ResponseRecord",
    "SubmitOutcome",
    "VIDEO_TYPES",
]
