"""STT (Speech-to-Text) service protocol and data types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class TranscriptResult:
    """Transcription of a single audio chunk.

    Deepgram returns interim results that may change, followed by a
    final result for each utterance. text is None when the provider
    response carried no transcript at all.
    """

    text: str | None
    is_final: bool = False
    confidence: float = 0.0
    latency_ms: float | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def has_speech(self) -> bool:
        """True when there is non-blank text worth surfacing."""
        return bool(self.text and self.text.strip())

    @classmethod
    def from_response(cls, payload: Any, latency_ms: float | None = None) -> TranscriptResult:
        """Parse a Deepgram listen response.

        Reads results.channels[0].alternatives[0]; a missing path yields
        an empty, non-final result regardless of the top-level flag.
        """
        try:
            alternative = payload["results"]["channels"][0]["alternatives"][0]
            transcript = alternative["transcript"]
        except (KeyError, IndexError, TypeError):
            return cls(text=None, is_final=False, latency_ms=latency_ms)

        return cls(
            text=transcript,
            is_final=bool(payload.get("is_final", False)),
            confidence=float(alternative.get("confidence") or 0.0),
            latency_ms=latency_ms,
        )


class STTService(Protocol):
    """Protocol for STT (Speech-to-Text) service implementations."""

    async def transcribe_chunk(self, audio: bytes) -> TranscriptResult:
        """Transcribe one audio chunk as an independent request.

        Raises:
            STTProviderError: On a non-success status from the provider
            STTConnectionError: When the provider is unreachable
        """
        ...

    async def close(self) -> None:
        """Close any open connections and clean up resources."""
        ...

    async def health_check(self) -> bool:
        """Check if the service is operational."""
        ...
