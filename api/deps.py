"""Service wiring and FastAPI dependencies."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from accounts import AccountService, UserRecord, UserStore
from config import (
    EVALUATION_KEY,
    NARRATIVE_KEY,
    PROFILE_KEY,
    QUESTIONS_KEY,
    AppConfig,
    load_routes,
)
from config.settings import settings
from errors import AuthError
from interview_evaluation import AnswerEvaluator
from interview_session import InterviewStore, SessionController, Transcriber, transcriber_for
from llm_gateway import ModelClient, gateway_for
from question_builder import QuestionSetBuilder
from resume_parsing import ProfileExtractor
from resumes import ResumeService, ResumeStore
from session_reports import ReportAggregator, ReportStore
from storage.blobs import BlobStore

logger = logging.getLogger(__name__)

MODEL_KEYS = (PROFILE_KEY, QUESTIONS_KEY, EVALUATION_KEY, NARRATIVE_KEY)

_bearer = HTTPBearer(auto_error=False)
_services: Optional["Services"] = None
_services_guard = threading.Lock()


@dataclass
class Services:  # Everything a request handler needs, built once per process
    accounts: AccountService
    resumes: ResumeService
    interviews: InterviewStore
    controller: SessionController
    reports: ReportStore
    aggregator: ReportAggregator
    blobs: BlobStore


def build_services(
    *,
    db_path: Optional[str] = None,
    upload_dir: Optional[str] = None,
    config: Optional[AppConfig] = None,
    models: Optional[Mapping[str, Optional[ModelClient]]] = None,
    transcriber: Optional[Transcriber] = None,
) -> Services:
    """Wire stores and components.

    ``models`` maps registry keys to model clients and replaces the configured
    routes entirely; a key that is absent or ``None`` runs its fallback path.
    Without ``models`` the routes, and the transcriber unless one is given,
    come from ``config`` (or ``APP_CONFIG_PATH``).
    """

    db = Path(db_path or settings.DB_PATH)
    if models is None:
        cfg = config if config is not None else load_routes(Path(settings.APP_CONFIG_PATH))
        models = {key: gateway_for(key, cfg) for key in MODEL_KEYS}
        if transcriber is None:
            transcriber = transcriber_for(cfg)
    blobs = BlobStore(upload_dir or settings.UPLOAD_DIR)
    interviews = InterviewStore(db)
    reports = ReportStore(db)
    controller = SessionController(
        interviews,
        QuestionSetBuilder(models.get(QUESTIONS_KEY), count=settings.QUESTION_COUNT),
        AnswerEvaluator(models.get(EVALUATION_KEY)),
        blobs=blobs,
        transcriber=transcriber,
    )
    for key in MODEL_KEYS:
        if models.get(key) is None:
            logger.info("No model for %s; fallback path active", key)
    return Services(
        accounts=AccountService(UserStore(db)),
        resumes=ResumeService(ResumeStore(db), blobs, ProfileExtractor(models.get(PROFILE_KEY))),
        interviews=interviews,
        controller=controller,
        reports=reports,
        aggregator=ReportAggregator(models.get(NARRATIVE_KEY), reports),
        blobs=blobs,
    )


def get_services() -> Services:  # Lazily build the process-wide services from settings
    global _services
    with _services_guard:
        if _services is None:
            _services = build_services()
        return _services


def current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    services: Services = Depends(get_services),
) -> UserRecord:
    if credentials is None or not credentials.credentials:
        raise AuthError("Authentication required")
    return services.accounts.identify(credentials.credentials)


__all__ = ["MODEL_KEYS", "Services", "build_services", "current_user", "get_services"]
