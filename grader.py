"""
Grading for submitted quizzes.
Scores answers against the canonical answers and derives percentage, letter grade and feedback.
"""
from typing import List, Mapping, Optional

from errors import GradingInputInvalid
from models import GradedSummary, Question, QuestionResult, QuizSession

NO_ANSWER = "No answer provided"

# first match wins, top-down
GRADE_BANDS = [
    (97, "A+"),
    (93, "A"),
    (90, "A-"),
    (87, "B+"),
    (83, "B"),
    (80, "B-"),
    (77, "C+"),
    (73, "C"),
    (70, "C-"),
    (67, "D+"),
    (65, "D"),
]
FAILING_GRADE = "F"

ASSESSMENT_TIERS = [
    (90, "Excellent work! You've mastered this material."),
    (70, "Great job! You have a solid understanding."),
    (50, "Good effort! Review the explanations to improve."),
]
DEFAULT_ASSESSMENT = "Keep studying! Focus on the areas you missed."


def normalize_answer(answer: str) -> str:
    return answer.strip().lower()


def is_correct(submitted: Optional[str], correct_answer: str) -> bool:
    """Case-insensitive, whitespace-trimmed comparison. Missing answers are never correct."""
    if not submitted:
        return False
    return normalize_answer(submitted) == normalize_answer(correct_answer)


def calculate_percentage(score: int, total: int) -> int:
    """round(100 * score / total), halves rounded up."""
    if total <= 0:
        raise GradingInputInvalid("total must be positive")
    return (200 * score + total) // (2 * total)


def letter_grade(percentage: int) -> str:
    for threshold, grade in GRADE_BANDS:
        if percentage >= threshold:
            return grade
    return FAILING_GRADE


def assessment_message(percentage: int) -> str:
    for threshold, message in ASSESSMENT_TIERS:
        if percentage >= threshold:
            return message
    return DEFAULT_ASSESSMENT


def grade_quiz(questions: List[Question], user_answers: Mapping[str, str]) -> GradedSummary:
    """
    Grade a quiz.

    Args:
        questions: The generated questions, in quiz order
        user_answers: Submitted answers keyed by question id; unanswered ids may be absent

    Returns:
        GradedSummary with one result per question

    Raises:
        GradingInputInvalid: if there are no questions
    """
    if not questions:
        raise GradingInputInvalid("At least one question is required")

    results = []
    for q in questions:
        submitted = user_answers.get(q.id)
        results.append(
            QuestionResult(
                question_id=q.id,
                user_answer=submitted or NO_ANSWER,
                is_correct=is_correct(submitted, q.correct_answer),
                correct_answer=q.correct_answer,
                explanation=q.explanation,
            )
        )

    score = sum(1 for r in results if r.is_correct)
    total = len(questions)
    percentage = calculate_percentage(score, total)
    return GradedSummary(
        score=score,
        total_questions=total,
        percentage=percentage,
        grade=letter_grade(percentage),
        assessment=assessment_message(percentage),
        per_question=results,
    )


def grade_session(session: QuizSession) -> GradedSummary:
    return grade_quiz(session.questions, session.user_answers)
