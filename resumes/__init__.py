from __future__ import annotations  # Re-export resumes public API

from .service import ResumeService
from .store import ResumeRecord, ResumeStore

__all__ = ["ResumeRecord", "ResumeService", "ResumeStore"]
