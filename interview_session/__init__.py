from __future__ import annotations  # Re-export interview_session public API

from .controller import SessionController, validate_media
from .models import (
    AUDIO_TYPES,
    MEDIA_TYPES,
    VIDEO_TYPES,
    CurrentQuestion,
    InterviewRecord,
    InterviewStatus,
    MediaUpload,
    QuestionRecord,
    ResponseRecord,
    SubmitOutcome,
)
from .store import InterviewStore
from .transcriber import HttpTranscriber, Transcriber, transcriber_for

__all__ = [
    "AUDIO_TYPES",
    "CurrentQuestion",
    "HttpTranscriber",
    "InterviewRecord",
    "InterviewStatus",
    "InterviewStore",
    "MEDIA_TYPES",
    "MediaUpload",
    "QuestionRecord",
    "ResponseRecord",
    "SessionController",
    "SubmitOutcome",
    "Transcriber",
    "VIDEO_TYPES",
    "transcriber_for",
    "validate_media",
]
