"""TTS (Text-to-Speech) service protocol and data types."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

DEFAULT_STABILITY = 0.75
DEFAULT_SIMILARITY_BOOST = 0.75


@dataclass(frozen=True, slots=True)
class VoiceSettings:
    """Per-agent voice tuning (both values fractional 0-1)."""

    stability: float = DEFAULT_STABILITY
    similarity_boost: float = DEFAULT_SIMILARITY_BOOST

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> VoiceSettings:
        """Build from a stored/JSON dict; accepts snake_case or camelCase keys."""
        stability = data.get("stability", DEFAULT_STABILITY)
        similarity = data.get("similarity_boost", data.get("similarityBoost"))
        if similarity is None:
            similarity = DEFAULT_SIMILARITY_BOOST
        return cls(stability=float(stability), similarity_boost=float(similarity))

    def to_dict(self) -> dict[str, float]:
        return {"stability": self.stability, "similarity_boost": self.similarity_boost}


@dataclass(frozen=True, slots=True)
class SynthesisResult:
    """Synthesized speech for one reply.

    audio_bytes is the provider's MPEG payload, unmodified.
    """

    audio_bytes: bytes
    voice_id: str
    content_type: str = "audio/mpeg"
    input_chars: int = 0
    synthesis_ms: float | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_base64(self) -> str:
        """Encode audio for a JSON text frame."""
        return base64.b64encode(self.audio_bytes).decode("ascii")


@dataclass(frozen=True, slots=True)
class VoiceInfo:
    """An entry of the provider's voice catalog."""

    id: str
    name: str
    category: str = "Other"
    description: str = ""
    preview_url: str | None = None
    settings: VoiceSettings = field(
        default_factory=lambda: VoiceSettings(stability=0.5, similarity_boost=0.5)
    )


class TTSService(Protocol):
    """Protocol for TTS (Text-to-Speech) service implementations."""

    async def synthesize(
        self,
        text: str,
        *,
        voice_id: str | None,
        voice_settings: VoiceSettings | None = None,
    ) -> SynthesisResult:
        """Synthesize reply text with the agent's voice.

        Raises:
            TTSVoiceNotConfiguredError: When voice_id is missing
            TTSSynthesisError: When the provider rejects the request
            TTSConnectionError: When the provider is unreachable
        """
        ...

    async def close(self) -> None:
        """Close any open connections and clean up resources."""
        ...

    async def health_check(self) -> bool:
        """Check if the service is operational."""
        ...
