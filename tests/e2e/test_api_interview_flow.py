"""End-to-end interview flow: create, answer every question, report."""
from __future__ import annotations

import pytest

from api.deps import build_services
from config.settings import settings


@pytest.fixture
def services(monkeypatch):
    monkeypatch.setattr(settings, "QUESTION_COUNT", 3)
    return build_services(models={})


def _interview(client, headers):
    resume = client.post(
        "/api/resume/upload",
        files={"resume": ("resume.txt", b"Skills: Python, React, AWS", "text/plain")},
        headers=headers,
    )
    assert resume.status_code == 201, resume.text
    created = client.post("/api/interview/create", json={"resumeId": resume.json()["id"]}, headers=headers)
    assert created.status_code == 201, created.text
    return created.json()


def _submit(client, headers, interview_id, question_id, transcript, files=None):
    return client.post(
        f"/api/interview/{interview_id}/submit-answer",
        data={"questionId": question_id, "transcript": transcript, "duration": "12.5"},
        files=files,
        headers=headers,
    )


def _answer_all(client, headers, interview):
    for transcript in ("a", "b", "c"):
        current = client.get(f"/api/interview/{interview['id']}/current-question", headers=headers).json()
        resp = _submit(client, headers, interview["id"], current["question"]["id"], transcript)
        assert resp.status_code == 200, resp.text
    return resp.json()


def test_questions_follow_resume_skills(client, auth_headers):
    interview = _interview(client, auth_headers)
    assert interview["status"] == "pending"
    assert interview["totalQuestions"] == 3
    assert "Python" in interview["questions"][0]["text"]
    assert [q["order"] for q in interview["questions"]] == [1, 2, 3]


def test_full_interview(client, auth_headers):
    interview = _interview(client, auth_headers)
    started = client.post(f"/api/interview/{interview['id']}/start", headers=auth_headers)
    assert started.json()["status"] == "in-progress"

    current = client.get(f"/api/interview/{interview['id']}/current-question", headers=auth_headers).json()
    assert current["completed"] is False
    assert current["progress"] == {"current": 1, "total": 3}

    last = _answer_all(client, auth_headers, interview)
    assert last["completed"] is True
    assert last["status"] == "completed"
    assert last["currentQuestionIndex"] == 3
    assert last["evaluation"]["overallScore"] == 3.0

    sentinel = client.get(f"/api/interview/{interview['id']}/current-question", headers=auth_headers).json()
    assert sentinel == {"completed": True, "message": "Interview completed"}

    detail = client.get(f"/api/interview/{interview['id']}", headers=auth_headers).json()
    assert detail["status"] == "completed"
    assert len(detail["responses"]) == 3
    assert detail["endTime"]


def test_submit_after_completion_conflicts(client, auth_headers):
    interview = _interview(client, auth_headers)
    _answer_all(client, auth_headers, interview)
    resp = _submit(client, auth_headers, interview["id"], interview["questions"][0]["id"], "again")
    assert resp.status_code == 409
    assert client.post(f"/api/interview/{interview['id']}/start", headers=auth_headers).status_code == 409


def test_foreign_question_rejected(client, auth_headers):
    interview = _interview(client, auth_headers)
    other = _interview(client, auth_headers)
    resp = _submit(client, auth_headers, interview["id"], other["questions"][0]["id"], "a")
    assert resp.status_code == 400
    skipped = _submit(client, auth_headers, interview["id"], interview["questions"][1]["id"], "a")
    assert skipped.status_code == 400


def test_audio_answer_is_stored(client, auth_headers):
    interview = _interview(client, auth_headers)
    files = {"audio": ("answer.webm", b"\x1a\x45\xdf\xa3audio", "audio/webm")}
    resp = _submit(client, auth_headers, interview["id"], interview["questions"][0]["id"], "", files=files)
    assert resp.status_code == 200, resp.text
    assert resp.json()["transcript"] == "Transcript not available"

    detail = client.get(f"/api/evaluation/response/{resp.json()['responseId']}", headers=auth_headers).json()
    assert detail["audioRef"].endswith(".webm")
    assert detail["duration"] == 12.5


def test_unsupported_media_rejected(client, auth_headers):
    interview = _interview(client, auth_headers)
    files = {"audio": ("answer.ogg", b"OggS", "audio/ogg")}
    resp = _submit(client, auth_headers, interview["id"], interview["questions"][0]["id"], "a", files=files)
    assert resp.status_code == 415
    current = client.get(f"/api/interview/{interview['id']}/current-question", headers=auth_headers).json()
    assert current["progress"]["current"] == 1


def test_interview_scoped_to_owner(client, auth_headers, other_headers):
    interview = _interview(client, auth_headers)
    assert client.get(f"/api/interview/{interview['id']}", headers=other_headers).status_code == 404
    assert client.get(f"/api/interview/{interview['id']}/current-question", headers=other_headers).status_code == 404
    resp = _submit(client, other_headers, interview["id"], interview["questions"][0]["id"], "a")
    assert resp.status_code == 404
    assert client.get("/api/interview", headers=other_headers).json() == []


def test_summary_and_reports(client, auth_headers, other_headers):
    interview = _interview(client, auth_headers)
    early = client.post(f"/api/evaluation/{interview['id']}/generate-report", headers=auth_headers)
    assert early.status_code == 409

    summary = client.get(f"/api/evaluation/{interview['id']}/summary", headers=auth_headers).json()
    assert summary["answered"] == 0
    assert summary["scores"]["overall"] == 0.0

    _answer_all(client, auth_headers, interview)
    summary = client.get(f"/api/evaluation/{interview['id']}/summary", headers=auth_headers).json()
    assert summary["answered"] == 3
    assert summary["scores"]["overall"] == pytest.approx(3.0)

    first = client.post(f"/api/evaluation/{interview['id']}/generate-report", headers=auth_headers)
    second = client.post(f"/api/evaluation/{interview['id']}/generate-report", headers=auth_headers)
    assert first.status_code == 201
    assert first.json()["id"] != second.json()["id"]
    assert first.json()["transcript"] == "a\n\nb\n\nc"
    assert first.json()["narrative"]["source"] == "fallback"

    detail = client.get(f"/api/interview/{interview['id']}", headers=auth_headers).json()
    assert detail["reportId"] == second.json()["id"]

    report_id = second.json()["id"]
    assert client.get(f"/api/evaluation/report/{report_id}", headers=auth_headers).status_code == 200
    assert client.get(f"/api/evaluation/report/{report_id}", headers=other_headers).status_code == 404

    pdf = client.get(f"/api/evaluation/report/{report_id}/pdf", headers=auth_headers)
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")
