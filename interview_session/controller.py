"""Interview progression: create, start, current question and answer submission.

The controller is the only writer of interview state. An interview moves
``pending -> in-progress -> completed`` and never leaves ``completed``.
Submissions for one interview are serialized by an in-process lock, and the
store re-checks the interview ``version`` inside the write transaction so a
second process cannot double-advance the index either.
"""
from __future__ import annotations

import logging
import threading
import time
import weakref
from pathlib import PurePath
from typing import Dict, List, Optional, Sequence

from config.settings import settings
from errors import AlreadyCompleted, FileTooLarge, NotFound, QuestionMismatch, UnsupportedFormat
from interview_evaluation import AnswerEvaluator, Evaluation, fallback_evaluation
from llm_gateway import LlmGatewayError
from observability import log_event
from question_builder import QuestionSetBuilder
from resume_parsing import Profile
from storage.blobs import BlobStore
from storage.sqlite import utc_now

from .models import MEDIA_TYPES, CurrentQuestion, InterviewRecord, MediaUpload, QuestionRecord, SubmitOutcome
from .store import InterviewStore
from .transcriber import Transcriber

logger = logging.getLogger(__name__)

_INTERVIEW_LOCKS: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()  # Entry lives while a caller holds the lock
_INTERVIEW_LOCKS_GUARD = threading.Lock()


def validate_media(media_type: str, size: int) -> None:  # Content-type category and size only; codecs are not inspected
    if media_type not in MEDIA_TYPES:
        raise UnsupportedFormat(f"Unsupported media type: {media_type}")
    if size > settings.MAX_MEDIA_BYTES:
        limit_mb = settings.MAX_MEDIA_BYTES // (1024 * 1024)
        raise FileTooLarge(f"Media file must be less than {limit_mb}MB")


def _lock_for(interview_id: str) -> threading.Lock:
    with _INTERVIEW_LOCKS_GUARD:
        lock = _INTERVIEW_LOCKS.get(interview_id)
        if lock is None:
            lock = threading.Lock()
            _INTERVIEW_LOCKS[interview_id] = lock
    return lock


class SessionController:
    def __init__(
        self,
        store: InterviewStore,
        builder: QuestionSetBuilder,
        evaluator: AnswerEvaluator,
        *,
        blobs: Optional[BlobStore] = None,
        transcriber: Optional[Transcriber] = None,
        time_limit: Optional[int] = None,
        placeholder: Optional[str] = None,
    ) -> None:
        self._store = store
        self._builder = builder
        self._evaluator = evaluator
        self._blobs = blobs
        self._transcriber = transcriber
        self._time_limit = time_limit or settings.DEFAULT_TIME_LIMIT
        self._placeholder = placeholder or settings.TRANSCRIPT_PLACEHOLDER

    def create(self, user_id: str, resume_id: str, profile: Profile) -> InterviewRecord:  # Build questions and persist a pending interview
        drafts = self._builder.build(profile)
        interview, _ = self._store.create(
            user_id=user_id,
            resume_id=resume_id,
            drafts=drafts,
            time_limit=self._time_limit,
        )
        log_event("interview.created", interview.interview_id, user_id=user_id, total=interview.total_questions)
        return interview

    def get(self, interview_id: str, *, user_id: str) -> InterviewRecord:
        interview = self._store.get(interview_id, user_id=user_id)
        if interview is None:
            raise NotFound("Interview not found")
        return interview

    def list_for_user(self, user_id: str) -> List[InterviewRecord]:
        return self._store.list_for_user(user_id)

    def questions(self, interview_id: str, *, user_id: str) -> List[QuestionRecord]:
        self.get(interview_id, user_id=user_id)
        return self._store.questions(interview_id)

    def start(self, interview_id: str, *, user_id: str) -> InterviewRecord:  # Repeated calls re-stamp start_time
        with _lock_for(interview_id):
            interview = self.get(interview_id, user_id=user_id)
            if interview.status == "completed":
                log_event("answer.rejected", interview_id, level=logging.WARNING, reason="start_after_completion")
                raise AlreadyCompleted("Interview already completed")
            started = self._store.mark_started(interview, start_time=utc_now())
        log_event("interview.started", interview_id, user_id=user_id, status=started.status)
        return started

    def current_question(self, interview_id: str, *, user_id: str) -> CurrentQuestion:
        interview = self.get(interview_id, user_id=user_id)
        questions = self._store.questions(interview_id)
        total = len(questions)
        index = interview.current_question_index
        if index >= total:
            return CurrentQuestion(completed=True, question=None, current=total, total=total)
        return CurrentQuestion(completed=False, question=questions[index], current=index + 1, total=total)

    def submit_answer(
        self,
        interview_id: str,
        *,
        user_id: str,
        question_id: str,
        transcript: Optional[str] = None,
        media: Sequence[MediaUpload] = (),
        duration: float = 0.0,
    ) -> SubmitOutcome:
        """Record the answer to the current question and advance the interview.

        Raises:
            NotFound: the interview does not exist for this user.
            AlreadyCompleted: every question already has a response.
            QuestionMismatch: ``question_id`` is not the current question.
            ConcurrentUpdate: the interview changed between read and write.
        """

        with _lock_for(interview_id):
            interview = self.get(interview_id, user_id=user_id)
            questions = self._store.questions(interview_id)
            question = self._check_submission(interview, questions, question_id)
            started_at = time.perf_counter()

            audio = _first(media, audio=True)
            video = _first(media, audio=False)
            stored = self._store_media(audio, video)
            try:
                final_transcript = self._resolve_transcript(interview_id, transcript, audio or video)
                evaluation = self._evaluate(interview_id, question, final_transcript)
                next_index = interview.current_question_index + 1
                completed = next_index >= len(questions)
                now = utc_now()
                response, updated = self._store.record_response(
                    interview,
                    question_id=question.question_id,
                    transcript=final_transcript,
                    evaluation=evaluation,
                    duration=max(0.0, float(duration or 0.0)),
                    audio_ref=stored.get("audio"),
                    video_ref=stored.get("video"),
                    next_index=next_index,
                    status="completed" if completed else "in-progress",
                    start_time=interview.start_time or now,
                    end_time=now if completed else None,
                )
            except Exception:
                for ref in stored.values():
                    self._blobs.delete(ref)
                raise

        log_event(
            "answer.submitted",
            interview_id,
            question_id=question.question_id,
            index=next_index,
            total=len(questions),
            source=evaluation.source,
            ms=int((time.perf_counter() - started_at) * 1000),
        )
        if completed:
            log_event("interview.completed", interview_id, user_id=user_id, total=len(questions))
        return SubmitOutcome(response=response, interview=updated, completed=completed)

    def _check_submission(
        self,
        interview: InterviewRecord,
        questions: Sequence[QuestionRecord],
        question_id: str,
    ) -> QuestionRecord:  # Enforce completion and current-question rules
        if interview.status == "completed" or interview.current_question_index >= len(questions):
            log_event("answer.rejected", interview.interview_id, level=logging.WARNING, question_id=question_id, reason="completed")
            raise AlreadyCompleted("Interview already completed")
        by_id = {question.question_id: question for question in questions}
        if question_id not in by_id:
            log_event("answer.rejected", interview.interview_id, level=logging.WARNING, question_id=question_id, reason="unknown_question")
            raise QuestionMismatch("Question does not belong to this interview")
        current = questions[interview.current_question_index]
        if current.question_id != question_id:
            reason = "already_answered" if by_id[question_id].order <= current.order else "out_of_order"
            log_event("answer.rejected", interview.interview_id, level=logging.WARNING, question_id=question_id, reason=reason)
            raise QuestionMismatch("Question is not the current question of this interview")
        return current

    def _store_media(self, audio: Optional[MediaUpload], video: Optional[MediaUpload]) -> Dict[str, str]:
        stored: Dict[str, str] = {}
        if self._blobs is None:
            return stored
        for kind, upload in (("audio", audio), ("video", video)):
            if upload is None:
                continue
            try:
                stored[kind] = self._blobs.put(upload.data, PurePath(upload.file_name).suffix)
            except Exception:
                for ref in stored.values():
                    self._blobs.delete(ref)
                raise
        return stored

    def _resolve_transcript(self, interview_id: str, transcript: Optional[str], media: Optional[MediaUpload]) -> str:
        """Client transcript, else transcription of the captured media, else the placeholder."""

        if transcript and transcript.strip():
            return transcript.strip()
        if media is not None and self._transcriber is not None:
            try:
                text = self._transcriber.transcribe(media.data, media.media_type)
            except LlmGatewayError as exc:
                logger.warning("Transcription failed for interview %s: %s", interview_id, exc)
            else:
                if text and text.strip():
                    return text.strip()
        return self._placeholder

    def _evaluate(self, interview_id: str, question: QuestionRecord, transcript: str) -> Evaluation:
        try:
            evaluation = self._evaluator.evaluate(transcript, question.text)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Answer evaluator raised for interview %s, using neutral fallback: %s", interview_id, exc)
            evaluation = fallback_evaluation()
        if evaluation.source == "fallback":
            log_event(
                "evaluation.fallback",
                interview_id,
                level=logging.WARNING,
                question_id=question.question_id,
                source=evaluation.source,
            )
        return evaluation


def _first(media: Sequence[MediaUpload], *, audio: bool) -> Optional[MediaUpload]:
    for upload in media:
        if upload.data and (upload.is_audio if audio else upload.is_video):
            return upload
    return None


__all__ = ["SessionController", "validate_media"]
