from __future__ import annotations  # Re-export resume_parsing public API

from .heuristics import extract_profile_fallback
from .models import Education, Experience, Internship, Profile, Project
from .profile_extractor import ProfileExtractor, ProfileSource
from .text_extractor import (
    DOCX_TYPE,
    PDF_TYPE,
    SUPPORTED_TYPES,
    TEXT_TYPE,
    decode_best_effort,
    extract_text,
    normalize_text,
    validate_upload,
)

__all__ = [
    "DOCX_TYPE",
    "Education",
    "Experience",
    "Internship",
    "PDF_TYPE",
    "Profile",
    "ProfileExtractor",
    "ProfileSource",
    "Project",
    "SUPPORTED_TYPES",
    "TEXT_TYPE",
    "decode_best_effort",
    "extract_profile_fallback",
    "extract_text",
    "normalize_text",
    "validate_upload",
]
