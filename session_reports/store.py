from __future__ import annotations  # Report persistence layer

import sqlite3
from typing import List, Optional

from errors import NotFound
from storage.sqlite import SqliteStore

from .models import ReportRecord


class ReportStore(SqliteStore):  # SQLite-backed report storage; shares the interviews database
    def _ensure_schema(self) -> None:  # Create report table if missing
        conn = self._connect()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS reports (
                    report_id TEXT PRIMARY KEY,
                    interview_id TEXT NOT NULL,
                    user_id TEXT NOT NULL,
                    report_json TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_reports_interview ON reports(interview_id)")
            conn.commit()
        finally:
            conn.close()

    def save(self, report: ReportRecord) -> None:
        """Insert the report and repoint the interview at it in one transaction."""

        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            conn.execute(
                """
                INSERT INTO reports (report_id, interview_id, user_id, report_json, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    report.report_id,
                    report.interview_id,
                    report.user_id,
                    report.model_dump_json(),
                    report.created_at,
                ),
            )
            cursor = conn.execute(
                "UPDATE interviews SET report_id = ? WHERE interview_id = ? AND user_id = ?",
                (report.report_id, report.interview_id, report.user_id),
            )
            if cursor.rowcount == 0:
                conn.rollback()
                raise NotFound("Interview not found")
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get(self, report_id: str, *, user_id: str) -> Optional[ReportRecord]:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT report_json FROM reports WHERE report_id = ? AND user_id = ?",
                (report_id, user_id),
            ).fetchone()
        finally:
            conn.close()
        return ReportRecord.model_validate_json(row["report_json"]) if row is not None else None

    def list_for_interview(self, interview_id: str) -> List[ReportRecord]:  # Oldest first
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT report_json FROM reports WHERE interview_id = ? ORDER BY rowid ASC",
                (interview_id,),
            ).fetchall()
        finally:
            conn.close()
        return [ReportRecord.model_validate_json(row["report_json"]) for row in rows]


__all__ = ["ReportStore"]
