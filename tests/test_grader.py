import pytest

from conftest import make_question
from errors import GradingInputInvalid
from grader import (
    NO_ANSWER,
    assessment_message,
    calculate_percentage,
    grade_quiz,
    grade_session,
    is_correct,
    letter_grade,
)
from models import QuizSession


@pytest.mark.parametrize("submitted", [" Paris ", "paris", "Paris", "PARIS\n"])
def test_answers_match_ignoring_case_and_whitespace(submitted):
    assert is_correct(submitted, "Paris")


def test_wrong_answer_is_incorrect():
    assert not is_correct("Lyon", "Paris")


def test_missing_answer_scores_zero():
    summary = grade_quiz([make_question("q1", "42")], {})
    assert summary.score == 0
    assert summary.total_questions == 1
    assert summary.percentage == 0
    assert summary.grade == "F"
    assert summary.per_question[0].user_answer == NO_ANSWER
    assert summary.per_question[0].is_correct is False


def test_empty_answer_counts_as_missing():
    summary = grade_quiz([make_question("q1", "42")], {"q1": ""})
    assert summary.per_question[0].user_answer == NO_ANSWER
    assert summary.score == 0


def test_sentinel_text_never_matches_a_missing_answer():
    summary = grade_quiz([make_question("q1", NO_ANSWER)], {})
    assert summary.score == 0


def test_true_false_and_short_answer_scenario():
    questions = [
        make_question("q1", "True", qtype="true-false"),
        make_question("q2", "Mitochondria"),
    ]
    summary = grade_quiz(questions, {"q1": "true", "q2": "mitochondria"})
    assert summary.score == 2
    assert summary.percentage == 100
    assert summary.grade == "A+"
    assert summary.assessment == assessment_message(100)


def test_unanswered_questions_stay_in_total():
    questions = [make_question(f"q{i}", "x") for i in range(1, 5)]
    summary = grade_quiz(questions, {"q1": "x", "q3": "x"})
    assert summary.score == 2
    assert summary.total_questions == 4
    assert summary.percentage == 50
    assert [r.question_id for r in summary.per_question] == ["q1", "q2", "q3", "q4"]


def test_grading_is_idempotent():
    questions = [make_question("q1", "a"), make_question("q2", "b"), make_question("q3", "c")]
    answers = {"q1": "A", "q3": "nope"}
    assert grade_quiz(questions, answers) == grade_quiz(questions, answers)


def test_empty_question_list_is_rejected():
    with pytest.raises(GradingInputInvalid):
        grade_quiz([], {"q1": "a"})


@pytest.mark.parametrize(
    "score,total,expected",
    [(0, 3, 0), (1, 3, 33), (2, 3, 67), (3, 3, 100), (1, 8, 13), (7, 8, 88), (1, 200, 1), (1, 400, 0)],
)
def test_percentage_rounds_half_up(score, total, expected):
    assert calculate_percentage(score, total) == expected


def test_percentage_is_monotonic_in_score():
    for total in range(1, 41):
        values = [calculate_percentage(s, total) for s in range(total + 1)]
        assert values == sorted(values)
        assert values[0] == 0 and values[-1] == 100


@pytest.mark.parametrize(
    "percentage,grade",
    [
        (100, "A+"), (97, "A+"), (96, "A"), (93, "A"), (92, "A-"), (90, "A-"), (89, "B+"),
        (87, "B+"), (83, "B"), (80, "B-"), (77, "C+"), (73, "C"), (70, "C-"), (69, "D+"),
        (67, "D+"), (66, "D"), (65, "D"), (64, "F"), (0, "F"),
    ],
)
def test_letter_grade_bands(percentage, grade):
    assert letter_grade(percentage) == grade


def test_assessment_tiers():
    assert "mastered" in assessment_message(90)
    assert "solid understanding" in assessment_message(89)
    assert "solid understanding" in assessment_message(70)
    assert "Review the explanations" in assessment_message(69)
    assert "Review the explanations" in assessment_message(50)
    assert "Keep studying" in assessment_message(49)


def test_grade_session_reads_camel_case_payload():
    session = QuizSession.model_validate(
        {
            "questions": [
                {"id": "q1", "type": "short-answer", "question": "Capital of France?",
                 "correctAnswer": "Paris", "explanation": "Stated in the text."},
            ],
            "userAnswers": {"q1": " paris"},
        }
    )
    summary = grade_session(session)
    assert summary.score == 1
    assert summary.per_question[0].correct_answer == "Paris"
