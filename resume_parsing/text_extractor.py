"""Plain-text extraction from uploaded resume documents."""
from __future__ import annotations

import io
import logging
import re

import docx
from pypdf import PdfReader

from config.settings import settings
from errors import ExtractionFailed, FileTooLarge, UnsupportedFormat

logger = logging.getLogger(__name__)

PDF_TYPE = "application/pdf"
DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_TYPE = "text/plain"

SUPPORTED_TYPES = (PDF_TYPE, DOCX_TYPE, TEXT_TYPE)

_INLINE_SPACE_RE = re.compile(r"[^\S\n]+")
_NEWLINES_RE = re.compile(r"\s*\n\s*")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def validate_upload(media_type: str, size: int) -> None:
    """Reject documents of an unaccepted type or above the size limit."""

    if media_type not in SUPPORTED_TYPES:
        raise UnsupportedFormat("Only PDF, DOCX and plain-text resumes are allowed")
    if size > settings.MAX_RESUME_BYTES:
        limit_mb = settings.MAX_RESUME_BYTES // (1024 * 1024)
        raise FileTooLarge(f"File size must be less than {limit_mb}MB")


def extract_text(data: bytes, media_type: str) -> str:
    """Return normalized text for a document of the declared type.

    Raises:
        UnsupportedFormat: the declared type is not one of ``SUPPORTED_TYPES``.
        ExtractionFailed: the document parser raised.
    """

    if media_type not in SUPPORTED_TYPES:
        raise UnsupportedFormat(f"Unsupported file type: {media_type}")
    try:
        if media_type == PDF_TYPE:
            raw = _pdf_text(data)
        elif media_type == DOCX_TYPE:
            raw = _docx_text(data)
        else:
            raw = data.decode("utf-8")
    except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to parse %s document: %s", media_type, exc)
        raise ExtractionFailed("Failed to parse resume file") from exc
    return normalize_text(raw)


def decode_best_effort(data: bytes) -> str:
    """Decode raw bytes as UTF-8, dropping undecodable sequences."""

    return normalize_text(data.decode("utf-8", errors="ignore"))


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to single spaces and newline runs to one newline."""

    cleaned = _CONTROL_RE.sub(" ", text.replace("\r\n", "\n").replace("\r", "\n"))
    cleaned = _INLINE_SPACE_RE.sub(" ", cleaned)
    cleaned = _NEWLINES_RE.sub("\n", cleaned)
    return cleaned.strip()


def _pdf_text(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _docx_text(data: bytes) -> str:
    document = docx.Document(io.BytesIO(data))
    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append(" | ".join(cell.text for cell in row.cells))
    return "\n".join(lines)
