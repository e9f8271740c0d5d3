import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import llm_quiz_generator
from errors import GenerationFailed, GradingInputInvalid, InvalidInput
from grader import grade_session
from log_config import configure_logging
from models import GenerateBody, GenerateResponse, GenerationMetadata, GradedSummary, QuizSession

logger = logging.getLogger(__name__)

GENERATION_FAILED_MESSAGE = "Failed to generate quiz. Please try again."

app = FastAPI(title="Study Quiz Generator API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    configure_logging()


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request parameters", "details": jsonable_encoder(details)},
    )


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    return JSONResponse(status_code=400, content={"error": "Missing required parameters"})


@app.exception_handler(GenerationFailed)
async def generation_failed_handler(request: Request, exc: GenerationFailed):
    # provider detail stays in the logs
    logger.error("quiz generation failed: %s", exc)
    return JSONResponse(status_code=500, content={"error": GENERATION_FAILED_MESSAGE})


@app.exception_handler(GradingInputInvalid)
async def grading_input_handler(request: Request, exc: GradingInputInvalid):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.get("/")
def root():
    """API root endpoint with basic information."""
    return {
        "name": "Study Quiz Generator API",
        "version": "1.0.0",
        "endpoints": ["/api/generate-quiz", "/api/grade-quiz"],
    }


@app.post("/api/generate-quiz", response_model=GenerateResponse)
def generate_quiz_endpoint(body: GenerateBody):
    """
    Generate a quiz from study material.
    Returns the questions plus metadata describing how they were requested.
    """
    questions = llm_quiz_generator.generate_quiz(body.study_material, body.config)
    config = body.config
    return GenerateResponse(
        questions=questions,
        metadata=GenerationMetadata(
            total_questions=len(questions),
            difficulty=config.difficulty,
            question_types=config.question_types,
            generated_at=datetime.now(timezone.utc),
        ),
    )


@app.post("/api/grade-quiz", response_model=GradedSummary)
def grade_quiz_endpoint(session: QuizSession):
    """Grade submitted answers against the quiz's canonical answers."""
    summary = grade_session(session)
    logger.info(
        "graded quiz: %d/%d (%d%%, %s)",
        summary.score, summary.total_questions, summary.percentage, summary.grade,
    )
    return summary
