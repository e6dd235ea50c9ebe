"""UI-related data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .feedback import Feedback


class ViewState(Enum):
    """States of the coach view."""
    LOADING_QUESTION = "loading-question"
    IDLE = "idle"
    LISTENING = "listening"
    EVALUATING = "evaluating"
    SHOWING_FEEDBACK = "showing-feedback"


@dataclass
class CoachStatus:
    """Everything the screen needs to render the current view."""
    state: ViewState = ViewState.LOADING_QUESTION
    question: str = ""
    question_loading: bool = True
    transcript: str = ""
    feedback: Optional[Feedback] = None
    feedback_loading: bool = False
    notice: Optional[str] = None
    capture_available: bool = True
    stop_requested: bool = False
    duration_seconds: float = 0.0
    peak_level: float = 0.0

    @property
    def is_listening(self) -> bool:
        return self.state == ViewState.LISTENING
