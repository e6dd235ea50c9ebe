"""Speech capture and recognition for Interview Coach."""

from .base import AbstractSpeechBackend, SpeechUnavailableError
from .capture import UtteranceCapture, check_microphone_available
from .publisher import SpeechEventPublisher, SPEECH_RESULT_TOPIC, SPEECH_END_TOPIC
from .recognizer import SpeechRecognizer, build_speech_recognizer

__all__ = [
    "AbstractSpeechBackend",
    "SpeechUnavailableError",
    "UtteranceCapture",
    "check_microphone_available",
    "SpeechEventPublisher",
    "SPEECH_RESULT_TOPIC",
    "SPEECH_END_TOPIC",
    "SpeechRecognizer",
    "build_speech_recognizer",
]
