"""Google Speech-to-Text backend."""

import time
import logging
from datetime import datetime
from typing import Optional

from .base import AbstractSpeechBackend
from ..models.transcription import TranscriptionResult

from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

logger = logging.getLogger(__name__)


class GoogleSpeechBackend(AbstractSpeechBackend):
    """Google Speech-to-Text API backend for single-utterance recognition."""

    def __init__(self,
                 credentials_path: Optional[str] = None,
                 sample_rate: int = 16000,
                 language: str = "en-US",
                 use_enhanced: bool = True,
                 enable_automatic_punctuation: bool = True,
                 recognize_timeout: float = 30.0):
        """Initialize Google Speech backend.

        Args:
            credentials_path: Path to a service account JSON file, None for
                              application default credentials
            sample_rate: Sample rate of the captured audio in Hz
            language: Language code (e.g., 'en-US', 'es-ES')
            use_enhanced: Whether to use enhanced model (costs more but better quality)
            enable_automatic_punctuation: Enable automatic punctuation
            recognize_timeout: Per-request timeout in seconds
        """
        super().__init__(language)
        self.credentials_path = credentials_path
        self.use_enhanced = use_enhanced
        self.enable_automatic_punctuation = enable_automatic_punctuation
        self.recognize_timeout = recognize_timeout
        self.client = None
        self.service_name = "Google Speech-to-Text"
        self.config = speech.RecognitionConfig(
                encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
                sample_rate_hertz=sample_rate,
                language_code=self.language,
                use_enhanced=self.use_enhanced,
                enable_automatic_punctuation=self.enable_automatic_punctuation,
                max_alternatives=1,
                # Use model optimized for short audio
                model="latest_short",
            )

    def initialize(self) -> bool:
        """Initialize Google Speech client and verify credentials."""
        if self.credentials_path:
            logger.info(f"Loading Google credentials from: {self.credentials_path}")
            credentials = service_account.Credentials.from_service_account_file(self.credentials_path)
            self.client = speech.SpeechClient(credentials=credentials)
            logger.info(f"Using Google Cloud project: {credentials.project_id}")
        else:
            logger.info("Using application default credentials for Google Speech")
            self.client = speech.SpeechClient()

        logger.info("Google Speech-to-Text backend initialized successfully")
        return True

    def transcribe_utterance(self, audio: bytes) -> TranscriptionResult:
        """Transcribe one utterance using Google Speech-to-Text."""
        if self.client is None:
            raise RuntimeError("Google Speech backend used before initialize()")

        start_time = time.time()
        logger.debug(f"Utterance size: {len(audio)} bytes; Language: {self.language}")

        recognition_audio = speech.RecognitionAudio(content=audio)
        try:
            response = self.client.recognize(
                config=self.config, audio=recognition_audio, timeout=self.recognize_timeout
            )
        except gax_exceptions.DeadlineExceeded as e:
            logger.error("Google STT recognize deadline exceeded")
            raise RuntimeError(f"Google Speech recognize timeout: {e}") from e
        except gax_exceptions.ServiceUnavailable as e:
            logger.error("Google STT service unavailable")
            raise RuntimeError(f"Google Speech service unavailable: {e}") from e
        except gax_exceptions.GoogleAPICallError as e:
            logger.error("Google STT API call error: %s", e)
            raise RuntimeError(f"Google Speech API error: {e}") from e
        processing_time = time.time() - start_time

        if not response.results:
            logger.debug("--- NO SPEECH DETECTED ---")
            return TranscriptionResult(
                text="",
                confidence=0.0,
                processing_time=processing_time,
                timestamp=datetime.now(),
                service=self.service_name,
                language=self.language,
            )

        return self.__extract_transcription_result(response, processing_time)

    def __extract_transcription_result(self, response: speech.RecognizeResponse,
                                       processing_time: float) -> TranscriptionResult:
        # Sequential results cover consecutive stretches of the one utterance
        segments = [result.alternatives[0] for result in response.results if result.alternatives]
        text = " ".join(segment.transcript.strip() for segment in segments).strip()
        confidence = min((segment.confidence for segment in segments), default=0.0)

        logger.debug(f"✅ TRANSCRIPTION SUCCESS: '{text}' "
                     f"(confidence: {confidence:.2f}, segments: {len(segments)}, "
                     f"processing_time: {processing_time:.3f}s)")
        return TranscriptionResult(
            text=text,
            confidence=confidence,
            processing_time=processing_time,
            timestamp=datetime.now(),
            service=self.service_name,
            language=self.language,
        )

    def cleanup(self) -> None:
        """Clean up Google Speech client resources."""
        self.client = None
