"""Single-utterance microphone capture with end-of-speech detection."""

import pyaudio
import logging
from threading import Thread, Event
from typing import Optional, Callable, List
from datetime import datetime
import numpy as np

from ..models.audio import AudioStats
from ..models.events import EndReason


logger = logging.getLogger(__name__)

# callback(audio, reason, error)
UtteranceCallback = Callable[[bytes, EndReason, Optional[str]], None]


def check_microphone_available() -> bool:
    """Check whether a default input device exists."""
    pyaudio_instance = pyaudio.PyAudio()
    try:
        info = pyaudio_instance.get_default_input_device_info()
        logger.debug(f"Default input device: {info.get('name')}")
        return True
    except OSError as e:
        logger.debug(f"Microphone not available: {e}")
        return False
    finally:
        pyaudio_instance.terminate()


def chunk_level(audio_chunk: bytes) -> float:
    """RMS level of a 16-bit PCM chunk, normalised to 0.0 - 1.0."""
    samples = np.frombuffer(audio_chunk, dtype=np.int16)
    if samples.size == 0:
        return 0.0
    rms = np.sqrt(np.mean(samples.astype(np.float64) ** 2))
    return float(min(rms / 32768.0, 1.0))


class UtteranceCapture:
    """Records one utterance in a background thread.

    Recording ends when the user stops it, when it is aborted, or
    automatically after a stretch of silence following speech, after a
    no-speech timeout, or at the maximum utterance length. The callback is
    invoked once per recording, from the capture thread.
    """

    def __init__(
        self,
        callback: UtteranceCallback,
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        format: int = pyaudio.paInt16,
        silence_threshold: float = 0.02,
        end_silence_seconds: float = 1.5,
        no_speech_timeout_seconds: float = 8.0,
        max_utterance_seconds: float = 55.0,
    ):
        """Initialize utterance capture with specified parameters.

        Args:
            callback: Receives (audio, reason, error) when the utterance ends
            sample_rate: Audio sample rate
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
            format: Audio format (16-bit signed int)
            silence_threshold: RMS level (0.0 - 1.0) below which a chunk counts as silence
            end_silence_seconds: Silence after speech that ends the utterance
            no_speech_timeout_seconds: Give up if no speech starts within this time
            max_utterance_seconds: Hard cap on utterance length
        """
        self.utterance_callback = callback
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format
        self.silence_threshold = silence_threshold
        self.end_silence_seconds = end_silence_seconds
        self.no_speech_timeout_seconds = no_speech_timeout_seconds
        self.max_utterance_seconds = max_utterance_seconds
        self.chunk_seconds = chunk_size / sample_rate

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.abort_requested = False
        self.is_recording = False

        # Statistics and end-of-speech tracking
        self.start_time: Optional[datetime] = None
        self.total_chunks = 0
        self.peak_level = 0.0
        self.speech_detected = False
        self.elapsed_seconds = 0.0
        self.silent_seconds = 0.0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None

    def start_recording(self) -> None:
        """Start recording one utterance in a background thread."""
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        logger.info("Starting utterance recording")
        self.stop_event.clear()
        self.abort_requested = False
        self.start_time = datetime.now()
        self._reset_detection()

        self.is_recording = True
        self.recording_thread = Thread(target=self._record_utterance, daemon=True)
        self.recording_thread.name = "UtteranceCaptureThread"
        self.recording_thread.start()

    def stop_recording(self) -> None:
        """Signal the recording thread to stop; it delivers the utterance with reason MANUAL.

        Returns without waiting for the thread, so it is safe to call from the event loop.
        """
        if not self.is_recording:
            logger.warning("No recording in progress")
            return

        logger.info("Stopping utterance recording")
        self.stop_event.set()

    def abort_recording(self) -> None:
        """Stop recording and discard the audio."""
        if not self.is_recording:
            logger.debug("Abort requested with no recording in progress")
            return

        logger.info("Aborting utterance recording")
        self.abort_requested = True
        self.stop_event.set()
        self._join_recording_thread()

    def _join_recording_thread(self) -> None:
        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

    def _reset_detection(self) -> None:
        self.total_chunks = 0
        self.peak_level = 0.0
        self.speech_detected = False
        self.elapsed_seconds = 0.0
        self.silent_seconds = 0.0

    def detect_end_of_speech(self, level: float) -> bool:
        """Feed one chunk's level; True once the utterance should end."""
        self.elapsed_seconds += self.chunk_seconds
        self.peak_level = max(self.peak_level, level)

        if level >= self.silence_threshold:
            self.speech_detected = True
            self.silent_seconds = 0.0
        else:
            self.silent_seconds += self.chunk_seconds

        if self.elapsed_seconds >= self.max_utterance_seconds:
            logger.info("Maximum utterance length reached")
            return True
        if self.speech_detected and self.silent_seconds >= self.end_silence_seconds:
            logger.info("End of speech detected")
            return True
        if not self.speech_detected and self.elapsed_seconds >= self.no_speech_timeout_seconds:
            logger.info("No speech detected before timeout")
            return True
        return False

    def __open_audio_stream(self) -> pyaudio.Stream:
        self.pyaudio_instance = pyaudio.PyAudio()
        stream = self.pyaudio_instance.open(
            format=self.format,
            channels=self.channels,
            rate=self.sample_rate,
            input=True,
            frames_per_buffer=self.chunk_size,
            stream_callback=None
        )
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return stream

    def __read_audio_chunk(self, stream: pyaudio.Stream) -> bytes:
        audio_chunk = stream.read(self.chunk_size, exception_on_overflow=False)
        self.total_chunks += 1
        return audio_chunk

    def _record_utterance(self) -> None:
        """Internal method: recording loop in background thread."""
        frames: List[bytes] = []
        reason = EndReason.MANUAL
        error: Optional[str] = None
        stream = None
        try:
            stream = self.__open_audio_stream()
            while not self.stop_event.is_set():
                audio_chunk = self.__read_audio_chunk(stream)
                frames.append(audio_chunk)
                if self.detect_end_of_speech(chunk_level(audio_chunk)):
                    reason = EndReason.AUTO
                    break
        except OSError as e:
            logger.error(f"Audio capture failed: {e}")
            error = f"Audio capture failed: {e}"
        finally:
            if stream:
                stream.stop_stream()
                stream.close()
            if self.pyaudio_instance:
                self.pyaudio_instance.terminate()
                self.pyaudio_instance = None
            self.is_recording = False

        if self.abort_requested:
            reason = EndReason.ABORTED
            frames = []

        logger.info(f"Recording ended ({reason.value}). Total chunks: {self.total_chunks}")
        self.utterance_callback(b"".join(frames), reason, error)

    def get_recording_stats(self) -> AudioStats:
        """Get current recording statistics."""
        duration = 0.0
        if self.start_time:
            duration = (datetime.now() - self.start_time).total_seconds()

        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            total_chunks=self.total_chunks,
            peak_level=self.peak_level,
            speech_detected=self.speech_detected,
        )
