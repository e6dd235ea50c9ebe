"""Abstract base class for speech-to-text backends."""

from abc import ABC, abstractmethod
import logging

from ..models.transcription import TranscriptionResult

logger = logging.getLogger(__name__)


class SpeechUnavailableError(RuntimeError):
    """Raised when no speech recognition capability can be set up."""


class AbstractSpeechBackend(ABC):
    """Abstract base class for speech-to-text backends."""

    def __init__(self, language: str = "en-US"):
        """Initialize backend with language preference."""
        self.language = language

    @abstractmethod
    def transcribe_utterance(self, audio: bytes) -> TranscriptionResult:
        """Transcribe one complete utterance and return the final result.

        Args:
            audio: Raw 16-bit PCM audio of the whole utterance

        Returns:
            TranscriptionResult with the final transcript (empty text if no speech)

        Raises:
            RuntimeError: If the recognition service fails
        """
        pass

    @abstractmethod
    def initialize(self) -> bool:
        """Initialize backend resources and verify configuration.

        Returns:
            True if initialization successful, False otherwise
        """
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Clean up backend resources."""
        pass
