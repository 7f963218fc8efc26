"""FastAPI routes for resume upload and retrieval."""
from __future__ import annotations

from pathlib import PurePath
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool

from accounts import UserRecord
from api.deps import Services, current_user, get_services
from api.schemas import MessageResp, ResumeOut
from resume_parsing import DOCX_TYPE, PDF_TYPE, TEXT_TYPE


router = APIRouter(prefix="/api/resume", tags=["resume"])

_TYPES_BY_SUFFIX = {".pdf": PDF_TYPE, ".docx": DOCX_TYPE, ".txt": TEXT_TYPE}


def _declared_type(upload: UploadFile) -> str:  # Fall back to the file suffix for generic content types
    declared = (upload.content_type or "").split(";")[0].strip().lower()
    if declared and declared != "application/octet-stream":
        return declared
    suffix = PurePath(upload.filename or "").suffix.lower()
    return _TYPES_BY_SUFFIX.get(suffix, declared or "application/octet-stream")


@router.post("/upload", response_model=ResumeOut, status_code=201)
async def upload_resume(
    resume: UploadFile = File(...),
    user: UserRecord = Depends(current_user),
    services: Services = Depends(get_services),
) -> ResumeOut:
    data = await resume.read()
    record = await run_in_threadpool(
        services.resumes.upload,
        user.user_id,
        file_name=resume.filename or "resume",
        media_type=_declared_type(resume),
        data=data,
    )
    return ResumeOut.from_record(record)


@router.get("", response_model=List[ResumeOut])
def list_resumes(
    user: UserRecord = Depends(current_user),
    services: Services = Depends(get_services),
) -> List[ResumeOut]:
    return [ResumeOut.from_record(r) for r in services.resumes.list_for_user(user.user_id)]


@router.get("/{resume_id}", response_model=ResumeOut)
def get_resume(
    resume_id: str,
    user: UserRecord = Depends(current_user),
    services: Services = Depends(get_services),
) -> ResumeOut:
    return ResumeOut.from_record(services.resumes.get(resume_id, user_id=user.user_id))


@router.delete("/{resume_id}", response_model=MessageResp)
def delete_resume(
    resume_id: str,
    user: UserRecord = Depends(current_user),
    services: Services = Depends(get_services),
) -> MessageResp:
    services.resumes.delete(resume_id, user_id=user.user_id)
    return MessageResp(message="Resume deleted successfully")
