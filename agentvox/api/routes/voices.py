"""ElevenLabs voice catalog for the agent configuration screen."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from agentvox.api.routes.agents import VoiceSettingsSchema
from agentvox.api.schemas import CamelModel
from agentvox.config import Settings, get_settings
from agentvox.logging_config import get_logger
from agentvox.services.tts.elevenlabs import ElevenLabsTTSService
from agentvox.services.tts.exceptions import TTSServiceError
from agentvox.services.tts.protocol import VoiceInfo

logger: Any = get_logger(__name__)

router = APIRouter()

MISSING_KEY_WARNING = (
    "Voice selection is currently unavailable. Please configure ElevenLabs API key."
)


class VoiceSchema(CamelModel):
    id: str
    name: str
    category: str
    description: str
    preview_url: str | None
    settings: VoiceSettingsSchema

    @classmethod
    def from_info(cls, voice: VoiceInfo) -> VoiceSchema:
        return cls(
            id=voice.id,
            name=voice.name,
            category=voice.category,
            description=voice.description,
            preview_url=voice.preview_url,
            settings=VoiceSettingsSchema(
                stability=voice.settings.stability,
                similarity_boost=voice.settings.similarity_boost,
            ),
        )


class VoiceListResponse(CamelModel):
    """Voice catalog; never an HTTP error, problems are reported inline."""

    voices: list[VoiceSchema]
    warning: str | None = None
    error: str | None = None


def get_voice_service(settings: Settings = Depends(get_settings)) -> ElevenLabsTTSService:
    return ElevenLabsTTSService(settings)


@router.get(
    "/voices",
    response_model=VoiceListResponse,
    response_model_exclude_none=True,
)
async def list_voices(
    settings: Settings = Depends(get_settings),
    service: ElevenLabsTTSService = Depends(get_voice_service),
) -> VoiceListResponse:
    """List voices available to agents."""
    if not settings.elevenlabs_api_key:
        logger.warning("ELEVENLABS_API_KEY is not set; voice catalog unavailable")
        return VoiceListResponse(voices=[], warning=MISSING_KEY_WARNING)

    try:
        voices = await service.list_voices()
    except TTSServiceError as e:
        logger.error(f"Error fetching voices: {e}")
        return VoiceListResponse(voices=[], error=str(e))

    return VoiceListResponse(voices=[VoiceSchema.from_info(v) for v in voices])
