from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

QuestionType = Literal["multiple-choice", "true-false", "short-answer"]
Difficulty = Literal["easy", "medium", "hard"]

MULTIPLE_CHOICE_OPTIONS = 4


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuestionDraft(CamelModel):
    """A question as produced by the generator, before ids are trusted."""

    id: Optional[str] = None
    type: QuestionType
    prompt: str = Field(alias="question", min_length=1)
    options: Optional[List[str]] = None
    correct_answer: str
    explanation: str = Field(min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _drop_stray_options(cls, data: Any) -> Any:
        # only multiple-choice questions carry options
        if isinstance(data, dict) and data.get("type") != "multiple-choice" and data.get("options") is not None:
            data = {**data, "options": None}
        return data

    @model_validator(mode="after")
    def _check_options(self):
        if self.type == "multiple-choice":
            if not self.options or len(self.options) != MULTIPLE_CHOICE_OPTIONS:
                raise ValueError("multiple-choice questions need exactly 4 options")
        return self


class Question(QuestionDraft):
    model_config = ConfigDict(frozen=True)

    id: str


class QuizDraft(CamelModel):
    questions: List[QuestionDraft]


class QuizConfig(CamelModel):
    model_config = ConfigDict(frozen=True)

    length: int = Field(ge=1)
    difficulty: Difficulty
    question_types: List[QuestionType] = Field(min_length=1)

    @field_validator("question_types")
    @classmethod
    def _dedupe(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(v))


class GenerateBody(CamelModel):
    study_material: Optional[str] = None
    config: Optional[QuizConfig] = None


class GenerationMetadata(CamelModel):
    total_questions: int
    difficulty: Difficulty
    question_types: List[QuestionType]
    generated_at: datetime


class GenerateResponse(CamelModel):
    questions: List[Question]
    metadata: GenerationMetadata


class QuizSession(CamelModel):
    """Questions plus whatever answers the user submitted, keyed by question id."""

    questions: List[Question]
    user_answers: Dict[str, str] = {}


class QuestionResult(CamelModel):
    question_id: str
    user_answer: str
    is_correct: bool
    correct_answer: str
    explanation: str


class GradedSummary(CamelModel):
    score: int
    total_questions: int
    percentage: int = Field(ge=0, le=100)
    grade: str
    assessment: str
    per_question: List[QuestionResult]
