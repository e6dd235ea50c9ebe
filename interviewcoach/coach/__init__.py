"""Question, evaluation and session logic for Interview Coach."""

from .evaluator import Evaluator, UnparseableEvaluationError, extract_json
from .question_source import QuestionSource
from .session import CoachSession, NO_ANSWER_NOTICE, FEEDBACK_ERROR_NOTICE

__all__ = [
    "Evaluator",
    "UnparseableEvaluationError",
    "extract_json",
    "QuestionSource",
    "CoachSession",
    "NO_ANSWER_NOTICE",
    "FEEDBACK_ERROR_NOTICE",
]
