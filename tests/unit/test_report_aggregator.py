"""Tests for report aggregation, narratives and regeneration."""
from __future__ import annotations

import pytest

from errors import IncompleteResponses, NotCompleted
from interview_evaluation import AnswerFlags, Evaluation, RubricScore
from interview_session import InterviewStore
from question_builder import QuestionDraft
from session_reports import ReportAggregator, ReportStore, generate_report_pdf, summarize
from session_reports.aggregator import FALLBACK_HIREABILITY, FALLBACK_SUMMARY, NO_RESPONSE, pair_transcripts

DRAFTS = [QuestionDraft(category="technical", question=f"Question {i}?") for i in range(1, 4)]


def _evaluation(technical, clarity, confidence, overall, **flags):
    return Evaluation(
        technicalDepth=RubricScore(score=technical),
        clarity=RubricScore(score=clarity),
        confidence=RubricScore(score=confidence),
        flags=AnswerFlags(**flags),
        overallScore=overall,
    )


EVALUATIONS = [
    _evaluation(4, 3, 5, 4.1, reading=True),
    _evaluation(2, 4, 3, 3.0, silence=True, reading=True),
    _evaluation(5, 5, 4, 4.7),
]


@pytest.fixture
def interviews(tmp_db):
    return InterviewStore(tmp_db)


@pytest.fixture
def reports(tmp_db, interviews):
    return ReportStore(tmp_db)


def _answered(store, answers):
    interview, questions = store.create(user_id="u1", resume_id="r1", drafts=DRAFTS, time_limit=120)
    for index, (transcript, evaluation) in enumerate(answers, start=1):
        completed = index == len(questions)
        _, interview = store.record_response(
            interview,
            question_id=questions[index - 1].question_id,
            transcript=transcript,
            evaluation=evaluation,
            duration=10.0,
            audio_ref=None,
            video_ref=None,
            next_index=index,
            status="completed" if completed else "in-progress",
            start_time="2024-05-01T10:00:00+00:00",
            end_time="2024-05-01T10:15:00+00:00" if completed else None,
        )
    return interview, questions, store.responses(interview.interview_id)


def _completed(store):
    return _answered(store, zip(("first", "second", "third"), EVALUATIONS))


def test_scores_are_plain_means(interviews, reports):
    interview, questions, responses = _completed(interviews)
    report = ReportAggregator(None, reports).generate(interview, questions, responses)
    assert report.scores.technicalDepth == pytest.approx(11 / 3, abs=1e-6)
    assert report.scores.clarity == pytest.approx(4.0, abs=1e-6)
    assert report.scores.confidence == pytest.approx(4.0, abs=1e-6)
    assert report.scores.overall == pytest.approx((4.1 + 3.0 + 4.7) / 3, abs=1e-6)
    assert report.summary.averageScore == report.scores.overall
    assert report.summary.totalQuestions == 3
    assert report.flags.totalFlags == 3
    assert report.flags.readingCount == 2
    assert report.flags.silenceCount == 1
    assert report.flags.irrelevantCount == 0
    assert report.transcript == "first\n\nsecond\n\nthird"


def test_fallback_narrative_without_model(interviews, reports):
    interview, questions, responses = _completed(interviews)
    narrative = ReportAggregator(None, reports).generate(interview, questions, responses).narrative
    assert narrative.source == "fallback"
    assert narrative.summary == FALLBACK_SUMMARY
    assert narrative.hireability == FALLBACK_HIREABILITY
    assert [item.question for item in narrative.perQuestion] == ["Question 1?", "Question 2?", "Question 3?"]


def test_model_narrative(interviews, reports, make_model):
    interview, questions, responses = _completed(interviews)
    model = make_model(
        {
            "summary": "  Strong backend fundamentals.  ",
            "strengths": ["Depth", " "],
            "weaknesses": ["Pacing"],
            "recommendations": ["Mock interviews"],
            "hireability": 140,
            "perQuestion": [{"question": "Question 1?", "assessment": "Good"}],
        }
    )
    report = ReportAggregator(model, reports).generate(interview, questions, responses)
    assert report.narrative.source == "model"
    assert report.narrative.summary == "Strong backend fundamentals."
    assert report.narrative.strengths == ["Depth"]
    assert report.narrative.hireability == 100
    assert report.summary.weaknesses == ["Pacing"]
    assert "Q2: Question 2?\nA2: second" in model.prompts[0]


def test_model_failure_uses_fallback(interviews, reports, make_model):
    interview, questions, responses = _completed(interviews)
    model = make_model("no json at all")
    assert ReportAggregator(model, reports).generate(interview, questions, responses).narrative.source == "fallback"


def test_non_finite_hireability_uses_fallback(interviews, reports, make_model):
    interview, questions, responses = _completed(interviews)
    model = make_model('{"summary": "Fine", "hireability": NaN}')
    narrative = ReportAggregator(model, reports).generate(interview, questions, responses).narrative
    assert narrative.source == "fallback"
    assert narrative.hireability == FALLBACK_HIREABILITY
    assert narrative.summary == FALLBACK_SUMMARY


def test_not_completed_rejected(interviews, reports):
    interview, questions, responses = _answered(interviews, [("first", EVALUATIONS[0])])
    with pytest.raises(NotCompleted):
        ReportAggregator(None, reports).generate(interview, questions, responses)


def test_missing_responses_rejected(interviews, reports):
    interview, questions, responses = _completed(interviews)
    with pytest.raises(IncompleteResponses):
        ReportAggregator(None, reports).generate(interview, questions, responses[:2])


def test_regeneration_repoints_interview(interviews, reports):
    interview, questions, responses = _completed(interviews)
    aggregator = ReportAggregator(None, reports)
    first = aggregator.generate(interview, questions, responses)
    second = aggregator.generate(interview, questions, responses)
    assert first.report_id != second.report_id
    assert interviews.get_by_id(interview.interview_id).report_id == second.report_id
    assert [r.report_id for r in reports.list_for_interview(interview.interview_id)] == [
        first.report_id,
        second.report_id,
    ]
    assert reports.get(first.report_id, user_id="u1") == first
    assert reports.get(first.report_id, user_id="u2") is None


def test_summary_before_any_answer(interviews):
    interview, _ = interviews.create(user_id="u1", resume_id="r1", drafts=DRAFTS, time_limit=120)
    summary = summarize(interview, [])
    assert summary.answered == 0
    assert summary.scores.overall == 0.0
    assert summary.flags.totalFlags == 0


def test_unanswered_questions_pair_with_placeholder(interviews):
    _, questions, responses = _answered(interviews, [("first", EVALUATIONS[0])])
    pairs = pair_transcripts(questions, responses)
    assert pairs[0] == ("Question 1?", "first")
    assert pairs[2] == ("Question 3?", NO_RESPONSE)


def test_pdf_rendering(interviews, reports):
    interview, questions, responses = _completed(interviews)
    report = ReportAggregator(None, reports).generate(interview, questions, responses)
    assert generate_report_pdf(report).startswith(b"%PDF")
