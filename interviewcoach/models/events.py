"""Event models for speech recognition pub/sub."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class EndReason(Enum):
    """Why a recognition session ended."""
    AUTO = "auto"        # end-of-speech detected by the capture device
    MANUAL = "manual"    # user pressed submit
    ABORTED = "aborted"  # aborted, audio discarded


@dataclass
class SpeechResultEvent:
    """Final transcript for one recognition session."""
    generation: int
    transcript: str
    confidence: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class SpeechEndEvent:
    """Recognition session ended. Published exactly once per generation."""
    generation: int
    reason: EndReason
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
