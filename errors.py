"""
Error types shared by the quiz generator, the grader and the API layer.
"""


class QuizError(Exception):
    """Base class for quiz generation and grading errors."""


class InvalidInput(QuizError):
    """Request is missing study material or configuration. Not retryable as-is."""


class GenerationFailed(QuizError):
    """The model call failed, timed out or returned an unusable quiz. Retryable."""


class GradingInputInvalid(QuizError):
    """Grading was asked to score an empty question list."""
