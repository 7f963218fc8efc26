from __future__ import annotations  # Resume document and profile persistence

import sqlite3
from typing import List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel

from resume_parsing import Profile
from storage.sqlite import SqliteStore, utc_now


class ResumeRecord(BaseModel):  # Uploaded resume with its extracted profile
    resume_id: str
    user_id: str
    file_name: str
    media_type: str
    blob_ref: str
    original_text: str
    profile: Profile
    profile_source: Literal["model", "fallback"]
    created_at: str


class ResumeStore(SqliteStore):  # SQLite-backed resume storage scoped by user
    def _ensure_schema(self) -> None:  # Create resume table if missing
        conn = self._connect()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS resumes (
                    resume_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    file_name TEXT NOT NULL,
                    media_type TEXT NOT NULL,
                    blob_ref TEXT NOT NULL,
                    original_text TEXT NOT NULL,
                    profile_json TEXT NOT NULL,
                    profile_source TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_resumes_user ON resumes(user_id)")
            conn.commit()
        finally:
            conn.close()

    def create(
        self,
        *,
        user_id: str,
        file_name: str,
        media_type: str,
        blob_ref: str,
        original_text: str,
        profile: Profile,
        profile_source: str,
    ) -> ResumeRecord:  # Persist a new resume record
        record = ResumeRecord(
            resume_id=uuid4().hex,
            user_id=user_id,
            file_name=file_name,
            media_type=media_type,
            blob_ref=blob_ref,
            original_text=original_text,
            profile=profile,
            profile_source=profile_source,
            created_at=utc_now(),
        )
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO resumes (
                    resume_id, user_id, file_name, media_type, blob_ref,
                    original_text, profile_json, profile_source, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.resume_id,
                    record.user_id,
                    record.file_name,
                    record.media_type,
                    record.blob_ref,
                    record.original_text,
                    record.profile.model_dump_json(),
                    record.profile_source,
                    record.created_at,
                ),
            )
            conn.commit()
        finally:
            conn.close()
        return record

    def get(self, resume_id: str, *, user_id: str) -> Optional[ResumeRecord]:  # Load a resume owned by user_id
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT * FROM resumes WHERE resume_id = ? AND user_id = ?",
                (resume_id, user_id),
            ).fetchone()
        finally:
            conn.close()
        return _resume_from_row(row) if row is not None else None

    def list_for_user(self, user_id: str) -> List[ResumeRecord]:  # Newest first
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                SELECT * FROM resumes
                WHERE user_id = ?
                ORDER BY datetime(created_at) DESC, rowid DESC
                """,
                (user_id,),
            ).fetchall()
        finally:
            conn.close()
        return [_resume_from_row(row) for row in rows]

    def delete(self, resume_id: str, *, user_id: str) -> bool:
        conn = self._connect()
        try:
            cursor = conn.execute(
                "DELETE FROM resumes WHERE resume_id = ? AND user_id = ?",
                (resume_id, user_id),
            )
            conn.commit()
            return cursor.rowcount > 0
        finally:
            conn.close()


def _resume_from_row(row: sqlite3.Row) -> ResumeRecord:
    return ResumeRecord(
        resume_id=row["resume_id"],
        user_id=row["user_id"],
        file_name=row["file_name"],
        media_type=row["media_type"],
        blob_ref=row["blob_ref"],
        original_text=row["original_text"],
        profile=Profile.model_validate_json(row["profile_json"]),
        profile_source=row["profile_source"],
        created_at=row["created_at"],
    )


__all__ = ["ResumeRecord", "ResumeStore"]
