"""FastAPI routes for evaluation summaries and reports."""
from __future__ import annotations

import re

from fastapi import APIRouter, Depends, Response

from accounts import UserRecord
from api.deps import Services, current_user, get_services
from api.schemas import ReportOut, ResponseOut, SummaryResp
from errors import NotFound
from session_reports import generate_report_pdf, summarize


router = APIRouter(prefix="/api/evaluation", tags=["evaluation"])


def _safe_slug(value: str) -> str:  # Sanitize value for filenames
    return re.sub(r"[^A-Za-z0-9_-]+", "-", value).strip("-") or "report"


@router.get("/report/{report_id}", response_model=ReportOut)
def get_report(
    report_id: str,
    user: UserRecord = Depends(current_user),
    services: Services = Depends(get_services),
) -> ReportOut:
    report = services.reports.get(report_id, user_id=user.user_id)
    if report is None:
        raise NotFound("Report not found")
    return ReportOut.from_record(report)


@router.get("/report/{report_id}/pdf")
def get_report_pdf(
    report_id: str,
    user: UserRecord = Depends(current_user),
    services: Services = Depends(get_services),
) -> Response:
    report = services.reports.get(report_id, user_id=user.user_id)
    if report is None:
        raise NotFound("Report not found")
    payload = generate_report_pdf(report)
    filename = f"interview-report-{_safe_slug(report.report_id)}.pdf"
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return Response(content=payload, media_type="application/pdf", headers=headers)


@router.get("/response/{response_id}", response_model=ResponseOut)
def get_response(
    response_id: str,
    user: UserRecord = Depends(current_user),
    services: Services = Depends(get_services),
) -> ResponseOut:
    record = services.interviews.get_response(response_id, user_id=user.user_id)
    if record is None:
        raise NotFound("Response not found")
    return ResponseOut.from_record(record)


@router.get("/{interview_id}/summary", response_model=SummaryResp)
def evaluation_summary(
    interview_id: str,
    user: UserRecord = Depends(current_user),
    services: Services = Depends(get_services),
) -> SummaryResp:
    interview = services.controller.get(interview_id, user_id=user.user_id)
    responses = services.interviews.responses(interview_id)
    return SummaryResp.from_summary(summarize(interview, responses))


@router.post("/{interview_id}/generate-report", response_model=ReportOut, status_code=201)
def generate_report(
    interview_id: str,
    user: UserRecord = Depends(current_user),
    services: Services = Depends(get_services),
) -> ReportOut:
    interview = services.controller.get(interview_id, user_id=user.user_id)
    report = services.aggregator.generate(
        interview,
        services.interviews.questions(interview_id),
        services.interviews.responses(interview_id),
    )
    return ReportOut.from_record(report)
