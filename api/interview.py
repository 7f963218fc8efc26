"""FastAPI routes for interview creation and progression."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool

from accounts import UserRecord
from api.deps import Services, current_user, get_services
from api.schemas import (
    CreateInterviewReq,
    CurrentQuestionResp,
    InterviewOut,
    Progress,
    QuestionOut,
    SubmitAnswerResp,
)
from interview_session import MediaUpload, validate_media


router = APIRouter(prefix="/api/interview", tags=["interview"])


async def _read_media(upload: Optional[UploadFile]) -> Optional[MediaUpload]:  # Validate and load one optional media part
    if upload is None or not upload.filename:
        return None
    data = await upload.read()
    if not data:
        return None
    media_type = (upload.content_type or "").split(";")[0].strip().lower()
    validate_media(media_type, len(data))
    return MediaUpload(data=data, media_type=media_type, file_name=upload.filename)


@router.post("/create", response_model=InterviewOut, status_code=201)
def create_interview(
    payload: CreateInterviewReq,
    user: UserRecord = Depends(current_user),
    services: Services = Depends(get_services),
) -> InterviewOut:
    resume = services.resumes.get(payload.resumeId, user_id=user.user_id)
    interview = services.controller.create(user.user_id, resume.resume_id, resume.profile)
    questions = services.interviews.questions(interview.interview_id)
    return InterviewOut.from_record(interview, questions)


@router.get("", response_model=List[InterviewOut])
def list_interviews(
    user: UserRecord = Depends(current_user),
    services: Services = Depends(get_services),
) -> List[InterviewOut]:
    return [
        InterviewOut.from_record(interview, services.interviews.questions(interview.interview_id))
        for interview in services.controller.list_for_user(user.user_id)
    ]


@router.get("/{interview_id}", response_model=InterviewOut)
def get_interview(
    interview_id: str,
    user: UserRecord = Depends(current_user),
    services: Services = Depends(get_services),
) -> InterviewOut:
    interview = services.controller.get(interview_id, user_id=user.user_id)
    return InterviewOut.from_record(interview, services.interviews.questions(interview_id))


@router.get("/{interview_id}/current-question", response_model=CurrentQuestionResp, response_model_exclude_none=True)
def current_question(
    interview_id: str,
    user: UserRecord = Depends(current_user),
    services: Services = Depends(get_services),
) -> CurrentQuestionResp:
    current = services.controller.current_question(interview_id, user_id=user.user_id)
    if current.completed or current.question is None:
        return CurrentQuestionResp(completed=True, message="Interview completed")
    return CurrentQuestionResp(
        completed=False,
        question=QuestionOut.from_record(current.question),
        progress=Progress(current=current.current, total=current.total),
    )


@router.post("/{interview_id}/start", response_model=InterviewOut)
def start_interview(
    interview_id: str,
    user: UserRecord = Depends(current_user),
    services: Services = Depends(get_services),
) -> InterviewOut:
    interview = services.controller.start(interview_id, user_id=user.user_id)
    return InterviewOut.from_record(interview, services.interviews.questions(interview_id))


@router.post("/{interview_id}/submit-answer", response_model=SubmitAnswerResp)
async def submit_answer(
    interview_id: str,
    questionId: str = Form(...),
    transcript: Optional[str] = Form(None),
    duration: float = Form(0.0),
    audio: Optional[UploadFile] = File(None),
    video: Optional[UploadFile] = File(None),
    user: UserRecord = Depends(current_user),
    services: Services = Depends(get_services),
) -> SubmitAnswerResp:
    media = [item for item in (await _read_media(audio), await _read_media(video)) if item is not None]
    outcome = await run_in_threadpool(
        services.controller.submit_answer,
        interview_id,
        user_id=user.user_id,
        question_id=questionId,
        transcript=transcript,
        media=media,
        duration=duration,
    )
    return SubmitAnswerResp(
        responseId=outcome.response.response_id,
        transcript=outcome.response.transcript,
        evaluation=outcome.evaluation,
        completed=outcome.completed,
        status=outcome.interview.status,
        currentQuestionIndex=outcome.interview.current_question_index,
        totalQuestions=outcome.interview.total_questions,
    )
