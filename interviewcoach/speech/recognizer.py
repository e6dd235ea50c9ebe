"""Single-utterance speech recognizer built on microphone capture and a speech backend."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Callable

from google.auth import exceptions as auth_exceptions

from .base import AbstractSpeechBackend, SpeechUnavailableError
from .capture import UtteranceCapture, check_microphone_available
from .google_backend import GoogleSpeechBackend
from .publisher import SpeechEventPublisher
from ..models.audio import AudioStats
from ..models.events import EndReason, SpeechEndEvent, SpeechResultEvent

logger = logging.getLogger(__name__)


class SpeechRecognizer:
    """Records one utterance per session and publishes its final transcript.

    Every call to start() opens a new generation. For each generation at most
    one result event and exactly one end event are published, the result
    always first. Transcription runs on a worker thread, so both events are
    published off the caller's thread.
    """

    def __init__(
        self,
        backend: AbstractSpeechBackend,
        publisher: SpeechEventPublisher,
        language: str = "en-US",
        capture_factory: Callable[..., UtteranceCapture] = UtteranceCapture,
        **capture_options,
    ):
        """Initialize speech recognizer.

        Args:
            backend: Initialized speech-to-text backend
            publisher: Publisher for result and end events
            language: Language tag the backend recognizes
            capture_factory: Builds the capture device, given callback and capture_options
            **capture_options: Passed to the capture device (sample_rate, chunk_size, ...)
        """
        self.backend = backend
        self.publisher = publisher
        self.continuous = False
        self.interim_results = False
        self.lang = language

        self.capture = capture_factory(callback=self._on_utterance_captured, **capture_options)
        self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="SpeechTranscription")

        self._lock = threading.Lock()
        self.generation = 0
        self._active_generation: Optional[int] = None
        self._captured_generation: Optional[int] = None
        self._stop_requested = False

        logger.info(f"SpeechRecognizer initialized (lang={language}, continuous={self.continuous}, "
                    f"interim_results={self.interim_results})")

    @property
    def is_active(self) -> bool:
        return self._active_generation is not None

    def start(self) -> Optional[int]:
        """Start a recognition session.

        Returns:
            The new session's generation, or None if a session is already active
        """
        with self._lock:
            if self._active_generation is not None:
                logger.warning(f"Recognition already in progress (generation {self._active_generation})")
                return None
            self.generation += 1
            self._active_generation = self.generation
            self._stop_requested = False
            generation = self.generation

        logger.info(f"Starting recognition, generation {generation}")
        self.capture.start_recording()
        return generation

    def stop(self) -> None:
        """Stop listening and transcribe what was captured."""
        with self._lock:
            if self._active_generation is None:
                logger.warning("No recognition in progress")
                return
            if self._stop_requested:
                logger.warning(f"Stop already requested for generation {self._active_generation}")
                return
            self._stop_requested = True

        self.capture.stop_recording()

    def abort(self) -> None:
        """Stop listening without producing a result."""
        with self._lock:
            if self._active_generation is None:
                return
            self._stop_requested = True

        self.capture.abort_recording()

    def get_capture_stats(self) -> AudioStats:
        return self.capture.get_recording_stats()

    def _on_utterance_captured(self, audio: bytes, reason: EndReason, error: Optional[str]) -> None:
        """Capture-thread callback: hand the utterance to the transcription worker."""
        with self._lock:
            generation = self._active_generation
            duplicate = generation is not None and generation == self._captured_generation
            if generation is not None:
                self._captured_generation = generation
        if generation is None:
            logger.warning("Utterance captured with no active recognition, dropping it")
            return
        if duplicate:
            logger.warning(f"Utterance for generation {generation} already captured, dropping it")
            return

        logger.debug(f"Utterance captured for generation {generation}: {len(audio)} bytes, {reason.value}")
        self.executor.submit(self._transcribe_and_publish, generation, audio, reason, error)

    def _transcribe_and_publish(self, generation: int, audio: bytes,
                                reason: EndReason, error: Optional[str]) -> None:
        if reason != EndReason.ABORTED and error is None and audio:
            try:
                result = self.backend.transcribe_utterance(audio)
            except RuntimeError as e:
                logger.error(f"Transcription failed for generation {generation}: {e}")
                error = str(e)
            else:
                if result.text.strip():
                    self.publisher.publish_result(SpeechResultEvent(
                        generation=generation,
                        transcript=result.text,
                        confidence=result.confidence,
                    ))
                else:
                    logger.info(f"No speech recognized for generation {generation}")

        self._finish(generation, reason, error)

    def _finish(self, generation: int, reason: EndReason, error: Optional[str]) -> None:
        with self._lock:
            if self._active_generation != generation:
                logger.debug(f"Generation {generation} already ended")
                return
            self._active_generation = None

        self.publisher.publish_end(SpeechEndEvent(generation=generation, reason=reason, error=error))

    def shutdown(self) -> None:
        """Abort any active session and release the transcription worker."""
        self.abort()
        self.executor.shutdown(wait=True)
        self.backend.cleanup()
        logger.info("SpeechRecognizer shut down")


def build_speech_recognizer(config, publisher: SpeechEventPublisher) -> SpeechRecognizer:
    """Create a recognizer from configuration.

    Raises:
        SpeechUnavailableError: If there is no microphone or the backend cannot start
    """
    if not check_microphone_available():
        raise SpeechUnavailableError("No microphone input device available")

    language = config.get('speech.language', 'en-US')
    sample_rate = config.get('speech.sample_rate', 16000)

    try:
        backend = GoogleSpeechBackend(
            credentials_path=config.get_google_credentials_path(),
            sample_rate=sample_rate,
            language=language,
            use_enhanced=config.get('google_cloud.use_enhanced_model', True),
            enable_automatic_punctuation=config.get('google_cloud.enable_automatic_punctuation', True),
            recognize_timeout=config.get('speech.recognize_timeout_seconds', 30.0),
        )
        if not backend.initialize():
            raise SpeechUnavailableError("Google Speech backend failed to initialize")
    except (OSError, ValueError, auth_exceptions.GoogleAuthError) as e:
        raise SpeechUnavailableError(f"Speech backend unavailable: {e}") from e

    return SpeechRecognizer(
        backend=backend,
        publisher=publisher,
        language=language,
        sample_rate=sample_rate,
        chunk_size=config.get('speech.chunk_size', 1024),
        channels=config.get('speech.channels', 1),
        silence_threshold=config.get('speech.silence_threshold', 0.02),
        end_silence_seconds=config.get('speech.end_silence_seconds', 1.5),
        no_speech_timeout_seconds=config.get('speech.no_speech_timeout_seconds', 8.0),
        max_utterance_seconds=config.get('speech.max_utterance_seconds', 55.0),
    )
