"""Tests for interview progression through the session controller."""
from __future__ import annotations

import gc
import threading
import time

import pytest

import interview_session.controller as controller_module
from errors import AlreadyCompleted, InterviewError, NotFound, QuestionMismatch
from interview_evaluation import AnswerEvaluator, fallback_evaluation
from interview_session import InterviewStore, MediaUpload, SessionController
from llm_gateway import LlmGatewayError
from question_builder import QuestionSetBuilder
from resume_parsing import Profile
from storage import BlobStore

PROFILE = Profile(skills=["Python", "React", "AWS"])


class _RaisingEvaluator:
    def evaluate(self, transcript, question):
        raise ValueError("evaluator exploded")


class _SlowEvaluator:
    def __init__(self, delay=0.05):
        self.delay = delay

    def evaluate(self, transcript, question):
        time.sleep(self.delay)
        return fallback_evaluation()


class _Transcriber:
    def __init__(self, text="transcribed answer", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def transcribe(self, data, media_type):
        self.calls.append((data, media_type))
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def blobs(tmp_path):
    return BlobStore(tmp_path / "blobs")


def _controller(tmp_db, *, evaluator=None, transcriber=None, blobs=None, count=3):
    return SessionController(
        InterviewStore(tmp_db),
        QuestionSetBuilder(None, count=count),
        evaluator or AnswerEvaluator(None),
        blobs=blobs,
        transcriber=transcriber,
    )


def _answer(controller, interview_id, transcript="answer", **kwargs):
    current = controller.current_question(interview_id, user_id="u1")
    return controller.submit_answer(
        interview_id,
        user_id="u1",
        question_id=current.question.question_id,
        transcript=transcript,
        **kwargs,
    )


def test_create_is_pending_with_ordered_questions(tmp_db):
    controller = _controller(tmp_db)
    interview = controller.create("u1", "r1", PROFILE)
    assert interview.status == "pending"
    assert interview.total_questions == 3
    assert interview.current_question_index == 0
    questions = controller.questions(interview.interview_id, user_id="u1")
    assert [q.order for q in questions] == [1, 2, 3]
    assert [q.question_id for q in questions] == interview.questions
    assert "Python" in questions[0].text
    assert questions[0].time_limit == 120


def test_full_progression(tmp_db):
    controller = _controller(tmp_db)
    interview_id = controller.create("u1", "r1", PROFILE).interview_id
    started = controller.start(interview_id, user_id="u1")
    assert started.status == "in-progress"
    assert started.start_time

    first = controller.current_question(interview_id, user_id="u1")
    assert (first.completed, first.current, first.total) == (False, 1, 3)

    outcomes = [_answer(controller, interview_id, text) for text in ("a", "b", "c")]
    assert [o.completed for o in outcomes] == [False, False, True]
    assert [o.interview.current_question_index for o in outcomes] == [1, 2, 3]

    final = controller.get(interview_id, user_id="u1")
    assert final.status == "completed"
    assert final.current_question_index == 3
    assert final.end_time
    assert final.responses == [o.response.response_id for o in outcomes]

    sentinel = controller.current_question(interview_id, user_id="u1")
    assert sentinel.completed is True
    assert sentinel.question is None


def test_submit_after_completion_rejected(tmp_db):
    controller = _controller(tmp_db, count=1)
    interview_id = controller.create("u1", "r1", PROFILE).interview_id
    question_id = controller.questions(interview_id, user_id="u1")[0].question_id
    _answer(controller, interview_id)
    with pytest.raises(AlreadyCompleted):
        controller.submit_answer(interview_id, user_id="u1", question_id=question_id, transcript="again")
    with pytest.raises(AlreadyCompleted):
        controller.start(interview_id, user_id="u1")


def test_out_of_order_and_foreign_questions_rejected(tmp_db):
    controller = _controller(tmp_db)
    interview_id = controller.create("u1", "r1", PROFILE).interview_id
    other_id = controller.create("u1", "r1", PROFILE).interview_id
    questions = controller.questions(interview_id, user_id="u1")
    foreign = controller.questions(other_id, user_id="u1")[0]

    with pytest.raises(QuestionMismatch):
        controller.submit_answer(interview_id, user_id="u1", question_id=questions[1].question_id, transcript="x")
    with pytest.raises(QuestionMismatch):
        controller.submit_answer(interview_id, user_id="u1", question_id=foreign.question_id, transcript="x")
    assert InterviewStore(tmp_db).responses(interview_id) == []

    _answer(controller, interview_id)
    with pytest.raises(QuestionMismatch):
        controller.submit_answer(interview_id, user_id="u1", question_id=questions[0].question_id, transcript="x")
    assert controller.get(interview_id, user_id="u1").current_question_index == 1
    assert len(InterviewStore(tmp_db).responses(interview_id)) == 1


def test_concurrent_submissions_record_one_response(tmp_db):
    controllers = [_controller(tmp_db, evaluator=_SlowEvaluator()) for _ in range(2)]
    interview_id = controllers[0].create("u1", "r1", PROFILE).interview_id
    question_id = controllers[0].current_question(interview_id, user_id="u1").question.question_id
    outcomes = []
    errors = []

    def submit(controller):
        try:
            outcomes.append(
                controller.submit_answer(interview_id, user_id="u1", question_id=question_id, transcript="same")
            )
        except InterviewError as exc:
            errors.append(exc)

    threads = [threading.Thread(target=submit, args=(controllers[i % 2],)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(outcomes) == 1
    assert len(errors) == 3
    assert len(InterviewStore(tmp_db).responses(interview_id)) == 1
    assert controllers[1].get(interview_id, user_id="u1").current_question_index == 1


def test_interview_lock_released_after_submission(tmp_db):
    controller = _controller(tmp_db)
    interview_id = controller.create("u1", "r1", PROFILE).interview_id
    _answer(controller, interview_id)
    gc.collect()
    assert interview_id not in controller_module._INTERVIEW_LOCKS


def test_other_user_cannot_see_interview(tmp_db):
    controller = _controller(tmp_db)
    interview_id = controller.create("u1", "r1", PROFILE).interview_id
    with pytest.raises(NotFound):
        controller.get(interview_id, user_id="u2")
    with pytest.raises(NotFound):
        controller.current_question(interview_id, user_id="u2")
    assert controller.list_for_user("u2") == []


def test_submit_on_pending_interview_stamps_start(tmp_db):
    controller = _controller(tmp_db)
    interview_id = controller.create("u1", "r1", PROFILE).interview_id
    outcome = _answer(controller, interview_id)
    assert outcome.interview.status == "in-progress"
    assert outcome.interview.start_time


def test_evaluator_exception_uses_fallback_and_advances(tmp_db):
    controller = _controller(tmp_db, evaluator=_RaisingEvaluator())
    interview_id = controller.create("u1", "r1", PROFILE).interview_id
    outcome = _answer(controller, interview_id)
    assert outcome.evaluation.technicalDepth.score == 3
    assert outcome.evaluation.overallScore == 3.0
    assert outcome.evaluation.source == "fallback"
    assert outcome.interview.current_question_index == 1


def test_client_transcript_wins(tmp_db, blobs):
    transcriber = _Transcriber()
    controller = _controller(tmp_db, transcriber=transcriber, blobs=blobs)
    interview_id = controller.create("u1", "r1", PROFILE).interview_id
    audio = MediaUpload(data=b"RIFF....", media_type="audio/wav", file_name="answer.wav")
    outcome = _answer(controller, interview_id, "  typed answer  ", media=[audio])
    assert outcome.response.transcript == "typed answer"
    assert transcriber.calls == []
    assert outcome.response.audio_ref.endswith(".wav")
    assert blobs.read(outcome.response.audio_ref) == b"RIFF...."


def test_media_is_transcribed_without_client_transcript(tmp_db, blobs):
    transcriber = _Transcriber("spoken words")
    controller = _controller(tmp_db, transcriber=transcriber, blobs=blobs)
    interview_id = controller.create("u1", "r1", PROFILE).interview_id
    video = MediaUpload(data=b"\x1a\x45\xdf\xa3", media_type="video/webm", file_name="answer.webm")
    outcome = _answer(controller, interview_id, None, media=[video])
    assert outcome.response.transcript == "spoken words"
    assert transcriber.calls == [(b"\x1a\x45\xdf\xa3", "video/webm")]
    assert outcome.response.video_ref
    assert outcome.response.audio_ref is None


def test_placeholder_when_no_transcript(tmp_db):
    failing = _Transcriber(error=LlmGatewayError("speech service down"))
    controller = _controller(tmp_db, transcriber=failing)
    interview_id = controller.create("u1", "r1", PROFILE).interview_id
    audio = MediaUpload(data=b"abc", media_type="audio/webm")
    assert _answer(controller, interview_id, "", media=[audio]).response.transcript == "Transcript not available"
    assert _answer(controller, interview_id, None).response.transcript == "Transcript not available"


def test_duration_is_recorded(tmp_db):
    controller = _controller(tmp_db)
    interview_id = controller.create("u1", "r1", PROFILE).interview_id
    assert _answer(controller, interview_id, duration=42.5).response.duration == 42.5
