from interview_evaluation import AnswerEvaluator
from interview_session import InterviewStore, SessionController
from observability.admin_cli import main
from question_builder import QuestionSetBuilder
from resume_parsing import Profile


def test_tail_interviews_and_responses(tmp_db, capsys):
    controller = SessionController(InterviewStore(tmp_db), QuestionSetBuilder(None, count=2), AnswerEvaluator(None))
    interview = controller.create("u1", "r1", Profile(skills=["Python"]))
    question = controller.current_question(interview.interview_id, user_id="u1").question
    controller.submit_answer(interview.interview_id, user_id="u1", question_id=question.question_id, transcript="a")

    main(["--tail-interviews", "5", "--tail-responses", "5"])
    out = capsys.readouterr().out
    assert f"{interview.interview_id}/u1 in-progress 1/2 report=-" in out
    assert "overall=3.0 source=fallback flags=-" in out
