"""Resume upload pipeline: validate, store the document, extract text and profile."""
from __future__ import annotations

import logging
from pathlib import PurePath
from typing import List

from errors import ExtractionFailed, NotFound
from resume_parsing import ProfileExtractor, decode_best_effort, extract_text, validate_upload
from storage.blobs import BlobStore

from .store import ResumeRecord, ResumeStore

logger = logging.getLogger(__name__)


class ResumeService:
    def __init__(self, store: ResumeStore, blobs: BlobStore, extractor: ProfileExtractor) -> None:
        self._store = store
        self._blobs = blobs
        self._extractor = extractor

    def upload(self, user_id: str, *, file_name: str, media_type: str, data: bytes) -> ResumeRecord:
        """Persist an uploaded resume.

        Type and size are checked first and rejected outright. A parser failure
        does not abort the upload: the raw bytes are decoded best-effort and the
        profile comes from the heuristic path.
        """

        validate_upload(media_type, len(data))
        try:
            text = extract_text(data, media_type)
        except ExtractionFailed:
            logger.warning("Resume text extraction failed for %s, decoding raw bytes", file_name)
            text = decode_best_effort(data)
        profile, source = self._extractor.extract(text)
        blob_ref = self._blobs.put(data, PurePath(file_name).suffix)
        try:
            return self._store.create(
                user_id=user_id,
                file_name=file_name,
                media_type=media_type,
                blob_ref=blob_ref,
                original_text=text,
                profile=profile,
                profile_source=source,
            )
        except Exception:
            self._blobs.delete(blob_ref)
            raise

    def get(self, resume_id: str, *, user_id: str) -> ResumeRecord:
        record = self._store.get(resume_id, user_id=user_id)
        if record is None:
            raise NotFound("Resume not found")
        return record

    def list_for_user(self, user_id: str) -> List[ResumeRecord]:
        return self._store.list_for_user(user_id)

    def delete(self, resume_id: str, *, user_id: str) -> None:  # Drop the record and its stored document
        record = self.get(resume_id, user_id=user_id)
        self._store.delete(resume_id, user_id=user_id)
        self._blobs.delete(record.blob_ref)


__all__ = ["ResumeService"]
