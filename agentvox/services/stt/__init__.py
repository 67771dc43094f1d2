"""Speech-to-Text services (Deepgram)."""

from agentvox.services.stt.deepgram import DeepgramService
from agentvox.services.stt.exceptions import (
    STTConnectionError,
    STTProviderError,
    STTServiceError,
)
from agentvox.services.stt.protocol import STTService, TranscriptResult

__all__ = [
    "DeepgramService",
    "STTService",
    "TranscriptResult",
    "STTServiceError",
    "STTConnectionError",
    "STTProviderError",
]
