"""Audio-related data models."""

from dataclasses import dataclass


@dataclass
class AudioStats:
    """Utterance capture statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_chunks: int
    peak_level: float = 0.0  # 0.0 - 1.0, RMS of the loudest chunk so far
    speech_detected: bool = False
