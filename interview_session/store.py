from __future__ import annotations  # Interview, question and response persistence

import sqlite3
from typing import List, Optional, Sequence, Tuple
from uuid import uuid4

from errors import ConcurrentUpdate, QuestionMismatch
from interview_evaluation import Evaluation
from question_builder import QuestionDraft
from storage.sqlite import SqliteStore, utc_now

from .models import InterviewRecord, InterviewStatus, QuestionRecord, ResponseRecord


class InterviewStore(SqliteStore):  # SQLite-backed interview storage scoped by user
    def _ensure_schema(self) -> None:  # Create interview tables if missing
        conn = self._connect()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS interviews (
                    interview_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    resume_id TEXT NOT NULL,
                    status TEXT NOT NULL,
                    current_question_index INTEGER NOT NULL DEFAULT 0,
                    total_questions INTEGER NOT NULL,
                    start_time TEXT,
                    end_time TEXT,
                    report_id TEXT,
                    version INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS interview_questions (
                    question_id TEXT PRIMARY KEY,
                    interview_id TEXT NOT NULL,
                    text TEXT NOT NULL,
                    category TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    time_limit INTEGER NOT NULL,
                    UNIQUE(interview_id, position),
                    FOREIGN KEY(interview_id) REFERENCES interviews(interview_id) ON DELETE CASCADE
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS responses (
                    response_id TEXT PRIMARY KEY,
                    interview_id TEXT NOT NULL,
                    question_id TEXT NOT NULL UNIQUE,
                    transcript TEXT NOT NULL,
                    audio_ref TEXT,
                    video_ref TEXT,
                    evaluation_json TEXT NOT NULL,
                    duration REAL NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY(interview_id) REFERENCES interviews(interview_id) ON DELETE CASCADE,
                    FOREIGN KEY(question_id) REFERENCES interview_questions(question_id)
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_interviews_user ON interviews(user_id)")
            conn.commit()
        finally:
            conn.close()

    def create(
        self,
        *,
        user_id: str,
        resume_id: str,
        drafts: Sequence[QuestionDraft],
        time_limit: int,
    ) -> Tuple[InterviewRecord, List[QuestionRecord]]:  # Insert interview and its questions in one transaction
        interview_id = uuid4().hex
        now = utc_now()
        questions = [
            QuestionRecord(
                question_id=uuid4().hex,
                interview_id=interview_id,
                text=draft.question,
                category=draft.category,
                order=position,
                time_limit=time_limit,
            )
            for position, draft in enumerate(drafts, start=1)
        ]
        record = InterviewRecord(
            interview_id=interview_id,
            user_id=user_id,
            resume_id=resume_id,
            questions=[question.question_id for question in questions],
            status="pending",
            current_question_index=0,
            total_questions=len(questions),
            created_at=now,
        )
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO interviews (
                    interview_id, user_id, resume_id, status, current_question_index,
                    total_questions, version, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.interview_id,
                    record.user_id,
                    record.resume_id,
                    record.status,
                    record.current_question_index,
                    record.total_questions,
                    record.version,
                    record.created_at,
                ),
            )
            conn.executemany(
                """
                INSERT INTO interview_questions (question_id, interview_id, text, category, position, time_limit)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (q.question_id, q.interview_id, q.text, q.category, q.order, q.time_limit)
                    for q in questions
                ],
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
        return record, questions

    def get(self, interview_id: str, *, user_id: str) -> Optional[InterviewRecord]:  # Load interview owned by user_id
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT * FROM interviews WHERE interview_id = ? AND user_id = ?",
                (interview_id, user_id),
            ).fetchone()
            if row is None:
                return None
            return self._hydrate(conn, row)
        finally:
            conn.close()

    def get_by_id(self, interview_id: str) -> Optional[InterviewRecord]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM interviews WHERE interview_id = ?", (interview_id,)).fetchone()
            if row is None:
                return None
            return self._hydrate(conn, row)
        finally:
            conn.close()

    def list_for_user(self, user_id: str) -> List[InterviewRecord]:  # Newest first
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                SELECT * FROM interviews
                WHERE user_id = ?
                ORDER BY datetime(created_at) DESC, rowid DESC
                """,
                (user_id,),
            ).fetchall()
            return [self._hydrate(conn, row) for row in rows]
        finally:
            conn.close()

    def questions(self, interview_id: str) -> List[QuestionRecord]:  # Questions in traversal order
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                SELECT question_id, interview_id, text, category, position, time_limit
                FROM interview_questions
                WHERE interview_id = ?
                ORDER BY position ASC
                """,
                (interview_id,),
            ).fetchall()
        finally:
            conn.close()
        return [_question_from_row(row) for row in rows]

    def responses(self, interview_id: str) -> List[ResponseRecord]:  # Responses in question order
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                SELECT r.* FROM responses r
                JOIN interview_questions q ON q.question_id = r.question_id
                WHERE r.interview_id = ?
                ORDER BY q.position ASC
                """,
                (interview_id,),
            ).fetchall()
        finally:
            conn.close()
        return [_response_from_row(row) for row in rows]

    def get_response(self, response_id: str, *, user_id: str) -> Optional[ResponseRecord]:  # Ownership checked through the interview
        conn = self._connect()
        try:
            row = conn.execute(
                """
                SELECT r.* FROM responses r
                JOIN interviews i ON i.interview_id = r.interview_id
                WHERE r.response_id = ? AND i.user_id = ?
                """,
                (response_id, user_id),
            ).fetchone()
        finally:
            conn.close()
        return _response_from_row(row) if row is not None else None

    def mark_started(self, interview: InterviewRecord, *, start_time: str) -> InterviewRecord:  # Conditional on version
        conn = self._connect()
        try:
            cursor = conn.execute(
                """
                UPDATE interviews
                SET status = 'in-progress', start_time = ?, version = version + 1
                WHERE interview_id = ? AND version = ? AND status != 'completed'
                """,
                (start_time, interview.interview_id, interview.version),
            )
            if cursor.rowcount == 0:
                conn.rollback()
                raise ConcurrentUpdate("Interview was modified concurrently, please retry")
            conn.commit()
        finally:
            conn.close()
        return interview.model_copy(
            update={"status": "in-progress", "start_time": start_time, "version": interview.version + 1}
        )

    def record_response(
        self,
        interview: InterviewRecord,
        *,
        question_id: str,
        transcript: str,
        evaluation: Evaluation,
        duration: float,
        audio_ref: Optional[str],
        video_ref: Optional[str],
        next_index: int,
        status: InterviewStatus,
        start_time: Optional[str],
        end_time: Optional[str],
    ) -> Tuple[ResponseRecord, InterviewRecord]:
        """Insert the response and advance the interview atomically.

        The interview update is guarded by ``version``; a stale record raises
        ``ConcurrentUpdate`` and a second response for the same question raises
        ``QuestionMismatch``. Neither leaves a partial write behind.
        """

        response = ResponseRecord(
            response_id=uuid4().hex,
            interview_id=interview.interview_id,
            question_id=question_id,
            transcript=transcript,
            audio_ref=audio_ref,
            video_ref=video_ref,
            evaluation=evaluation,
            duration=duration,
            created_at=utc_now(),
        )
        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            conn.execute(
                """
                INSERT INTO responses (
                    response_id, interview_id, question_id, transcript, audio_ref,
                    video_ref, evaluation_json, duration, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    response.response_id,
                    response.interview_id,
                    response.question_id,
                    response.transcript,
                    response.audio_ref,
                    response.video_ref,
                    response.evaluation.model_dump_json(),
                    response.duration,
                    response.created_at,
                ),
            )
            cursor = conn.execute(
                """
                UPDATE interviews
                SET current_question_index = ?, status = ?, start_time = ?, end_time = ?, version = version + 1
                WHERE interview_id = ? AND version = ?
                """,
                (next_index, status, start_time, end_time, interview.interview_id, interview.version),
            )
            if cursor.rowcount == 0:
                conn.rollback()
                raise ConcurrentUpdate("Interview was modified concurrently, please retry")
            conn.commit()
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            raise QuestionMismatch("This question has already been answered") from exc
        finally:
            conn.close()
        updated = interview.model_copy(
            update={
                "responses": [*interview.responses, response.response_id],
                "current_question_index": next_index,
                "status": status,
                "start_time": start_time,
                "end_time": end_time,
                "version": interview.version + 1,
            }
        )
        return response, updated

    def _hydrate(self, conn: sqlite3.Connection, row: sqlite3.Row) -> InterviewRecord:  # Attach ordered question and response ids
        question_ids = [
            item["question_id"]
            for item in conn.execute(
                "SELECT question_id FROM interview_questions WHERE interview_id = ? ORDER BY position ASC",
                (row["interview_id"],),
            ).fetchall()
        ]
        response_ids = [
            item["response_id"]
            for item in conn.execute(
                """
                SELECT r.response_id FROM responses r
                JOIN interview_questions q ON q.question_id = r.question_id
                WHERE r.interview_id = ?
                ORDER BY q.position ASC
                """,
                (row["interview_id"],),
            ).fetchall()
        ]
        return InterviewRecord(
            interview_id=row["interview_id"],
            user_id=row["user_id"],
            resume_id=row["resume_id"],
            questions=question_ids,
            responses=response_ids,
            status=row["status"],
            current_question_index=row["current_question_index"],
            total_questions=row["total_questions"],
            start_time=row["start_time"],
            end_time=row["end_time"],
            report_id=row["report_id"],
            version=row["version"],
            created_at=row["created_at"],
        )


def _question_from_row(row: sqlite3.Row) -> QuestionRecord:
    return QuestionRecord(
        question_id=row["question_id"],
        interview_id=row["interview_id"],
        text=row["text"],
        category=row["category"],
        order=row["position"],
        time_limit=row["time_limit"],
    )


def _response_from_row(row: sqlite3.Row) -> ResponseRecord:
    return ResponseRecord(
        response_id=row["response_id"],
        interview_id=row["interview_id"],
        question_id=row["question_id"],
        transcript=row["transcript"],
        audio_ref=row["audio_ref"],
        video_ref=row["video_ref"],
        evaluation=Evaluation.model_validate_json(row["evaluation_json"]),
        duration=row["duration"],
        created_at=row["created_at"],
    )


__all__ = ["InterviewStore"]
