"""Domain errors shared by the resume, interview and report services."""
from __future__ import annotations


class InterviewError(Exception):  # Base for rejections reported to the caller
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnsupportedFormat(InterviewError):  # Declared media type is not accepted
    status_code = 415


class FileTooLarge(InterviewError):
    status_code = 413


class ExtractionFailed(InterviewError):  # Document parser raised
    status_code = 422


class NotFound(InterviewError):  # Missing, or owned by another user
    status_code = 404


class QuestionMismatch(InterviewError):  # Question is not the interview's current question
    status_code = 400


class AlreadyCompleted(InterviewError):
    status_code = 409


class NotCompleted(InterviewError):
    status_code = 409


class IncompleteResponses(InterviewError):
    status_code = 409


class ConcurrentUpdate(InterviewError):  # Optimistic version check lost a race
    status_code = 409


class AuthError(InterviewError):
    status_code = 401


class DuplicateAccount(InterviewError):
    status_code = 409


__all__ = [
    "InterviewError",
    "UnsupportedFormat",
    "FileTooLarge",
    "ExtractionFailed",
    "NotFound",
    "QuestionMismatch",
    "AlreadyCompleted",
    "NotCompleted",
    "IncompleteResponses",
    "ConcurrentUpdate",
    "AuthError",
    "DuplicateAccount",
]
