"""Tests for the resume upload pipeline."""
from __future__ import annotations

import pytest

from errors import FileTooLarge, NotFound, UnsupportedFormat
from resume_parsing import PDF_TYPE, TEXT_TYPE, ProfileExtractor
from resumes import ResumeService, ResumeStore
from storage import BlobStore


@pytest.fixture
def blobs(tmp_path):
    return BlobStore(tmp_path / "blobs")


@pytest.fixture
def resumes(tmp_db, blobs):
    return ResumeService(ResumeStore(tmp_db), blobs, ProfileExtractor(None))


def test_text_upload_uses_heuristic_profile(resumes, blobs):
    record = resumes.upload("u1", file_name="cv.txt", media_type=TEXT_TYPE, data=b"Skills: Python, React, AWS")
    assert record.profile.skills == ["Python", "React", "AWS"]
    assert record.profile_source == "fallback"
    assert record.original_text == "Skills: Python, React, AWS"
    assert blobs.read(record.blob_ref) == b"Skills: Python, React, AWS"


def test_model_profile_used_when_available(tmp_db, blobs, make_model):
    model = make_model({"skills": ["Rust"], "projects": [{"title": "Compiler"}]})
    service = ResumeService(ResumeStore(tmp_db), blobs, ProfileExtractor(model))
    record = service.upload("u1", file_name="cv.txt", media_type=TEXT_TYPE, data=b"Rust compiler work")
    assert record.profile_source == "model"
    assert record.profile.projects[0].title == "Compiler"


def test_corrupt_pdf_still_uploads(resumes):
    record = resumes.upload("u1", file_name="cv.pdf", media_type=PDF_TYPE, data=b"Skills: Go, Docker")
    assert record.original_text == "Skills: Go, Docker"
    assert record.profile.skills == ["Go", "Docker"]


def test_rejections_store_nothing(resumes, blobs, tmp_path):
    with pytest.raises(UnsupportedFormat):
        resumes.upload("u1", file_name="cv.png", media_type="image/png", data=b"\x89PNG")
    with pytest.raises(FileTooLarge):
        resumes.upload("u1", file_name="cv.txt", media_type=TEXT_TYPE, data=b"x" * (10 * 1024 * 1024 + 1))
    assert resumes.list_for_user("u1") == []
    assert not (tmp_path / "blobs").exists()


def test_scoped_to_owner_and_delete(resumes, blobs):
    record = resumes.upload("u1", file_name="cv.txt", media_type=TEXT_TYPE, data=b"Skills: Python")
    with pytest.raises(NotFound):
        resumes.get(record.resume_id, user_id="u2")
    with pytest.raises(NotFound):
        resumes.delete(record.resume_id, user_id="u2")
    assert [r.resume_id for r in resumes.list_for_user("u1")] == [record.resume_id]
    resumes.delete(record.resume_id, user_id="u1")
    assert resumes.list_for_user("u1") == []
    with pytest.raises(NotFound):
        blobs.read(record.blob_ref)
