"""Pytest configuration and fixtures for Interview Coach tests."""

import json
import logging
import threading
from typing import List, Optional
from unittest.mock import Mock, AsyncMock, patch

import numpy as np
import pytest

from interviewcoach.models.audio import AudioStats
from interviewcoach.models.events import EndReason


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without audio hardware")
    config.addinivalue_line("markers", "integration: tests wiring several components together")
    config.addinivalue_line("markers", "hardware: tests that need a real microphone")


def make_evaluation_reply(correctness=4, completeness=3, feedback="Good answer", fenced=True) -> str:
    """Evaluator reply in the shape the model is asked to produce."""
    payload = json.dumps({
        "correctness": correctness,
        "completeness": completeness,
        "feedback": feedback,
    })
    if fenced:
        return f"Here is my evaluation.\n```json\n{payload}\n```\nGood luck!"
    return f"Here is the result: {payload}"


class FakeChatClient:
    """Stands in for ChatCompletionClient; replies are consumed in order."""

    def __init__(self, replies: Optional[List] = None):
        self.replies = list(replies or [])
        self.calls = []
        self.model = "fake-model"

    async def complete(self, messages):
        self.calls.append(messages)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeRecognizer:
    """Stands in for SpeechRecognizer inside session tests."""

    def __init__(self):
        self.generation = 0
        self.is_active = False
        self.stop = Mock()
        self.abort = Mock()
        self.start_calls = 0

    def start(self):
        self.start_calls += 1
        self.generation += 1
        self.is_active = True
        return self.generation

    def get_capture_stats(self):
        return AudioStats(
            is_recording=True,
            duration_seconds=2.5,
            sample_rate=16000,
            chunk_size=1024,
            total_chunks=40,
            peak_level=0.4,
            speech_detected=True,
        )


class FakeCapture:
    """Capture device whose utterance the test finishes by hand."""

    def __init__(self, callback, **options):
        self.callback = callback
        self.options = options
        self.is_recording = False
        self.start_recording = Mock(side_effect=self._start)
        self.stop_recording = Mock(side_effect=self._stop)
        self.abort_recording = Mock(side_effect=self._abort)
        self.next_audio = b"\x01\x00" * 1600

    def _start(self):
        self.is_recording = True

    def _stop(self):
        if self.is_recording:
            self.finish(self.next_audio, EndReason.MANUAL)

    def _abort(self):
        if self.is_recording:
            self.finish(b"", EndReason.ABORTED)

    def finish(self, audio: bytes, reason: EndReason, error: Optional[str] = None):
        self.is_recording = False
        self.callback(audio, reason, error)

    def finish_in_thread(self, audio: bytes, reason: EndReason = EndReason.AUTO):
        thread = threading.Thread(target=self.finish, args=(audio, reason, None), daemon=True)
        thread.start()
        return thread

    def get_recording_stats(self):
        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=0.0,
            sample_rate=16000,
            chunk_size=1024,
            total_chunks=0,
        )


@pytest.fixture
def fake_recognizer():
    return FakeRecognizer()


@pytest.fixture
def question_source():
    source = Mock()
    source.request_question = AsyncMock(return_value="What is a closure in JavaScript?")
    return source


@pytest.fixture
def evaluator():
    from interviewcoach.models.feedback import Feedback

    mock = Mock()
    mock.evaluate = AsyncMock(return_value=Feedback(
        feedback="Clear explanation of lexical scope.", correctness=4, completeness=3
    ))
    return mock


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # Generate 1024 samples of 16-bit audio (sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate  # ~0.064 seconds
    freq = 440  # A4 note

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    # Convert to 16-bit integers
    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def silent_audio_chunk():
    return np.zeros(1024, dtype=np.int16).tobytes()


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream
        mock_stream.read.return_value = b'\x00' * 2048  # Silent audio
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_default_input_device_info.return_value = {"name": "Test Mic"}

        # Configure mock PyAudio class
        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def config_file(tmp_path):
    """Write a YAML config and return its path."""
    def write(text: str) -> str:
        path = tmp_path / "interviewcoach.yaml"
        path.write_text(text, encoding="utf-8")
        return str(path)
    return write


@pytest.fixture
def evaluation_reply():
    return make_evaluation_reply


@pytest.fixture
def chat_client_factory():
    return FakeChatClient


@pytest.fixture
def capture_factory():
    """Records every FakeCapture it builds in .instances."""
    instances = []

    def build(callback, **options):
        capture = FakeCapture(callback, **options)
        instances.append(capture)
        return capture

    build.instances = instances
    return build
