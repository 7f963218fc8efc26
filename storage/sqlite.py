"""SQLite helpers shared by the persistence layer."""
from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Union


def utc_now() -> str:  # ISO timestamp used for created_at columns
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class SqliteStore:  # Base class for one-table-family stores on a shared database file
    def __init__(self, path: Union[str, Path]) -> None:  # Initialize store with database path
        self._path = Path(path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:  # Open SQLite connection with schema settings
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self._path, timeout=10.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _ensure_schema(self) -> None:  # Subclasses create their tables here
        raise NotImplementedError


__all__ = ["SqliteStore", "utc_now"]
