"""Transcription-related data models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class TranscriptionResult:
    """Result of transcribing one utterance."""
    text: str
    confidence: float
    processing_time: float
    timestamp: datetime
    service: str
    language: str = "en-US"
