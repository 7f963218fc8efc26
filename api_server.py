from __future__ import annotations  # FastAPI server exposing the interview practice backend

import logging
import sqlite3

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api import auth, evaluation, interview, resume
from errors import InterviewError


logger = logging.getLogger(__name__)

app = FastAPI(title="Interview Practice API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)

app.include_router(auth.router)
app.include_router(resume.router)
app.include_router(interview.router)
app.include_router(evaluation.router)


@app.exception_handler(InterviewError)
async def handle_interview_error(request: Request, exc: InterviewError) -> JSONResponse:  # Rejections keep their mapped status
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(sqlite3.Error)
async def handle_storage_error(request: Request, exc: sqlite3.Error) -> JSONResponse:  # Persistence failures surface as a generic 500
    logger.exception("Storage failure on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/api/health")
def health() -> dict:  # Liveness probe
    return {"status": "OK", "message": "Interview practice API is running"}
