from __future__ import annotations  # User and bearer-token persistence

import sqlite3
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel

from errors import DuplicateAccount
from storage.sqlite import SqliteStore, utc_now


class UserRecord(BaseModel):  # Stored account; password_hash never leaves the service layer
    user_id: str
    email: str
    name: str
    password_hash: str
    created_at: str


class UserStore(SqliteStore):  # SQLite-backed user and token storage
    def _ensure_schema(self) -> None:  # Create user tables if missing
        conn = self._connect()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    user_id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    name TEXT NOT NULL,
                    password_hash TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS auth_tokens (
                    token TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY(user_id) REFERENCES users(user_id) ON DELETE CASCADE
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def create_user(self, *, email: str, name: str, password_hash: str) -> UserRecord:  # Insert a user; email is stored lower-cased
        record = UserRecord(
            user_id=uuid4().hex,
            email=email.strip().lower(),
            name=name,
            password_hash=password_hash,
            created_at=utc_now(),
        )
        conn = self._connect()
        try:
            conn.execute(
                """
                INSERT INTO users (user_id, email, name, password_hash, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (record.user_id, record.email, record.name, record.password_hash, record.created_at),
            )
            conn.commit()
        except sqlite3.IntegrityError as exc:
            raise DuplicateAccount("An account with this email already exists") from exc
        finally:
            conn.close()
        return record

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT user_id, email, name, password_hash, created_at FROM users WHERE email = ?",
                (email.strip().lower(),),
            ).fetchone()
        finally:
            conn.close()
        return _user_from_row(row) if row is not None else None

    def get(self, user_id: str) -> Optional[UserRecord]:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT user_id, email, name, password_hash, created_at FROM users WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        finally:
            conn.close()
        return _user_from_row(row) if row is not None else None

    def save_token(self, token: str, user_id: str) -> None:
        conn = self._connect()
        try:
            conn.execute(
                "INSERT INTO auth_tokens (token, user_id, created_at) VALUES (?, ?, ?)",
                (token, user_id, utc_now()),
            )
            conn.commit()
        finally:
            conn.close()

    def user_for_token(self, token: str) -> Optional[UserRecord]:  # Resolve a bearer token to its user
        conn = self._connect()
        try:
            row = conn.execute(
                """
                SELECT u.user_id, u.email, u.name, u.password_hash, u.created_at
                FROM auth_tokens t
                JOIN users u ON u.user_id = t.user_id
                WHERE t.token = ?
                """,
                (token,),
            ).fetchone()
        finally:
            conn.close()
        return _user_from_row(row) if row is not None else None


def _user_from_row(row: sqlite3.Row) -> UserRecord:
    return UserRecord(
        user_id=row["user_id"],
        email=row["email"],
        name=row["name"],
        password_hash=row["password_hash"],
        created_at=row["created_at"],
    )


__all__ = ["UserRecord", "UserStore"]
