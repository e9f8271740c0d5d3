import os
import json
import logging
from functools import lru_cache
from typing import Any, Callable, List, Optional, Tuple, Union

from dotenv import load_dotenv
import google.generativeai as genai
from pydantic import ValidationError

from errors import GenerationFailed, InvalidInput
from models import Question, QuestionDraft, QuizConfig, QuizDraft

load_dotenv()

logger = logging.getLogger(__name__)


def _env_number(name: str, default: str, cast: Callable[[str], Any], minimum: float) -> Any:
    raw = os.getenv(name, default)
    try:
        value = cast(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from None
    if value < minimum:
        raise RuntimeError(f"{name} must be at least {minimum}, got {raw!r}")
    return value


GENERATION_TIMEOUT = _env_number("GENERATION_TIMEOUT", "60", float, 1)
# extra attempts are opt-in; by default a call reaches the model once
GENERATION_ATTEMPTS = _env_number("GENERATION_ATTEMPTS", "1", int, 1)
STRICT_ANSWER_CHECK = os.getenv("STRICT_ANSWER_CHECK", "false").lower() in ("1", "true", "yes")

# (prompt, schema) -> parsed JSON
Capability = Callable[[str, dict], Any]

DIFFICULTY_FRAMING = {
    "easy": "Basic recall and understanding",
    "medium": "Application and analysis",
    "hard": "Synthesis and evaluation",
}

PROMPT_TEMPLATE = """You are an expert quiz generator. Create a comprehensive quiz based on the provided study material.

Study Material:
{study_material}

Quiz Requirements:
- Number of questions: {length}
- Difficulty level: {difficulty}
- Question types: {question_types}

Instructions:
1. Generate exactly {length} questions from the study material
2. Use ONLY these question types, distributed as evenly as possible: {question_types}
3. For multiple-choice questions: provide exactly 4 options with only 1 correct answer, and make correctAnswer match one option exactly
4. For true-false questions: make statements that are clearly and unambiguously true or false; correctAnswer must be "True" or "False"
5. For short-answer questions: create fill-in-the-blank style questions answered by a single short phrase
6. Difficulty level "{difficulty}": {framing}
7. Each question must include a detailed explanation referencing the original material
8. Cover different parts of the study material; never test the same fact twice
9. Make questions specific and avoid ambiguity
10. For multiple-choice, ensure distractors are plausible but clearly incorrect
"""

RETRY_REMINDER = (
    "\n\nREMINDER: Return exactly {length} questions as JSON matching the schema. "
    "Multiple-choice questions need exactly 4 options."
)

_QUESTION_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "type": {
            "type": "STRING",
            "format": "enum",
            "enum": ["multiple-choice", "true-false", "short-answer"],
        },
        "question": {"type": "STRING"},
        "options": {"type": "ARRAY", "items": {"type": "STRING"}},
        "correctAnswer": {"type": "STRING"},
        "explanation": {"type": "STRING"},
    },
    "required": ["type", "question", "correctAnswer", "explanation"],
}

QUIZ_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {"questions": {"type": "ARRAY", "items": _QUESTION_SCHEMA}},
    "required": ["questions"],
}


def build_prompt(study_material: str, config: QuizConfig) -> str:
    return PROMPT_TEMPLATE.format(
        study_material=study_material,
        length=config.length,
        difficulty=config.difficulty,
        question_types=", ".join(config.question_types),
        framing=DIFFICULTY_FRAMING[config.difficulty],
    )


@lru_cache(maxsize=1)
def _configure() -> None:
    api_key = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
    if not api_key:
        raise RuntimeError("Set GEMINI_API_KEY or GOOGLE_API_KEY in .env")
    genai.configure(api_key=api_key)


@lru_cache(maxsize=1)
def _pick_model() -> str:
    """
    Detect available models on this API key and pick one that supports generateContent.
    Preference: GEMINI_MODEL override > gemini-1.5-flash > any 'flash' > first capable model.
    """
    _configure()
    models = list(genai.list_models())
    gen_models = [m for m in models if "generateContent" in getattr(m, "supported_generation_methods", [])]
    if not gen_models:
        raise RuntimeError("No Gemini models with generateContent are available to this API key.")

    names = [m.name for m in gen_models]
    simple = [n.split("/")[-1] for n in names]

    desired = os.getenv("GEMINI_MODEL")
    if desired:
        if desired in simple:
            return f"models/{desired}"
        if desired.startswith("models/") and desired.split("/")[-1] in simple:
            return desired
        logger.warning("GEMINI_MODEL=%s is not available, picking a default", desired)

    preferences: List[str] = [
        "gemini-1.5-flash",
        "gemini-1.5-flash-8b",
    ]

    for p in preferences:
        if p in simple:
            return f"models/{p}"

    for s in simple:
        if "flash" in s:
            return f"models/{s}"
    return names[0]


def _clean_json_text(text: str) -> str:
    text = (text or "").strip()
    if text.startswith("```"):
        text = text.strip("`").strip()
        if text.startswith("json"):
            text = text[4:].lstrip()
    return text


def call_gemini(prompt: str, schema: dict) -> Any:
    """
    Run Gemini in JSON mode constrained to `schema` and return the parsed response.

    Raises whatever the client raises (including deadline errors after
    GENERATION_TIMEOUT seconds); the caller treats any exception as a failed attempt.
    """
    model = genai.GenerativeModel(
        _pick_model(),
        generation_config={
            "response_mime_type": "application/json",
            "response_schema": schema,
        },
    )
    resp = model.generate_content(prompt, request_options={"timeout": GENERATION_TIMEOUT})
    text = _clean_json_text(getattr(resp, "text", "") or "")
    if not text:
        raise ValueError("Empty model response")
    return json.loads(text)


def _check_answers(drafts: List[QuestionDraft]) -> List[QuestionDraft]:
    checked = []
    for i, q in enumerate(drafts, start=1):
        if q.type == "multiple-choice" and q.correct_answer not in q.options:
            raise ValueError(f"question {i}: correct answer is not one of its options")
        if q.type == "true-false":
            token = q.correct_answer.strip().lower()
            if token not in ("true", "false"):
                raise ValueError(f"question {i}: true-false answer {q.correct_answer!r}")
            q = q.model_copy(update={"correct_answer": token.capitalize()})
        checked.append(q)
    return checked


def _try_once(capability: Capability, prompt: str, config: QuizConfig) -> Tuple[bool, Union[List[QuestionDraft], str]]:
    try:
        data = capability(prompt, QUIZ_RESPONSE_SCHEMA)
        drafts = QuizDraft.model_validate(data).questions
        if len(drafts) != config.length:
            return False, f"expected {config.length} questions, got {len(drafts)}"
        if STRICT_ANSWER_CHECK:
            drafts = _check_answers(drafts)
        return True, drafts
    except ValidationError as e:
        return False, f"schema mismatch: {e.error_count()} error(s): {e}"
    except Exception as e:
        logger.debug("capability call failed", exc_info=True)
        return False, f"{type(e).__name__}: {e}"


def generate_quiz(
    study_material: Optional[str],
    config: Optional[QuizConfig],
    capability: Optional[Capability] = None,
) -> List[Question]:
    """
    Generate `config.length` questions from the study material.

    Args:
        study_material: Source text, embedded verbatim in the prompt
        config: Question count, difficulty and allowed question types
        capability: Schema-constrained generator; defaults to Gemini

    Returns:
        Questions with ids q1..qN in generation order

    Raises:
        InvalidInput: material or config missing (nothing is sent to the model)
        GenerationFailed: every attempt failed
    """
    if not study_material or not study_material.strip() or config is None:
        raise InvalidInput("Missing required parameters")

    capability = capability or call_gemini
    prompt = build_prompt(study_material, config)

    errors: List[str] = []
    for attempt in range(1, GENERATION_ATTEMPTS + 1):
        ok, result = _try_once(capability, prompt, config)
        if ok:
            logger.info(
                "generated %d %s questions on attempt %d", config.length, config.difficulty, attempt
            )
            return [
                Question.model_validate({**q.model_dump(), "id": f"q{i}"})
                for i, q in enumerate(result, start=1)
            ]
        logger.warning("quiz generation attempt %d/%d failed: %s", attempt, GENERATION_ATTEMPTS, result)
        errors.append(result)
        if attempt == 1:
            prompt += RETRY_REMINDER.format(length=config.length)

    raise GenerationFailed(f"Quiz generation failed. Last error: {errors[-1]}")
