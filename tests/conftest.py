import pytest

from models import Question, QuizConfig


def raw_question(qtype="multiple-choice", **overrides):
    base = {
        "multiple-choice": {
            "type": "multiple-choice",
            "question": "Which organelle produces most of the cell's ATP?",
            "options": ["Nucleus", "Mitochondria", "Ribosome", "Golgi apparatus"],
            "correctAnswer": "Mitochondria",
            "explanation": "The material calls mitochondria the powerhouse of the cell.",
        },
        "true-false": {
            "type": "true-false",
            "question": "Plant cells have a cell wall.",
            "correctAnswer": "True",
            "explanation": "The material states plant cells are surrounded by a cell wall.",
        },
        "short-answer": {
            "type": "short-answer",
            "question": "The ____ controls what enters and leaves the cell.",
            "correctAnswer": "cell membrane",
            "explanation": "The material describes the cell membrane as selectively permeable.",
        },
    }[qtype]
    return {**base, **overrides}


class FakeCapability:
    """Stands in for the model: returns canned responses and records prompts."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []
        self.schemas = []

    def __call__(self, prompt, schema):
        self.prompts.append(prompt)
        self.schemas.append(schema)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def config():
    return QuizConfig(length=3, difficulty="medium", question_types=["multiple-choice", "true-false", "short-answer"])


@pytest.fixture
def material():
    return (
        "Cells are the basic unit of life. Mitochondria are the powerhouse of the cell. "
        "Plant cells are surrounded by a cell wall. The cell membrane is selectively permeable."
    )


@pytest.fixture
def three_questions():
    return {"questions": [raw_question("multiple-choice"), raw_question("true-false"), raw_question("short-answer")]}


def make_question(qid, correct_answer, qtype="short-answer"):
    return Question(
        id=qid,
        type=qtype,
        prompt=f"Question {qid}",
        correct_answer=correct_answer,
        explanation="From the study material.",
    )
