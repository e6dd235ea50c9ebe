"""Data models for the Interview Coach application."""

from .audio import AudioStats
from .events import EndReason, SpeechEndEvent, SpeechResultEvent
from .feedback import Feedback
from .transcription import TranscriptionResult
from .ui import CoachStatus, ViewState

__all__ = [
    "AudioStats",
    "EndReason",
    "SpeechEndEvent",
    "SpeechResultEvent",
    "Feedback",
    "TranscriptionResult",
    "CoachStatus",
    "ViewState",
]
