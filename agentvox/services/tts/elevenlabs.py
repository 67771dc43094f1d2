"""ElevenLabs TTS service implementation.

Synthesis goes through the ElevenLabs SDK (sync client, run in a worker
thread); the voice catalog is read from the REST API with httpx.
"""

from __future__ import annotations

import asyncio
import io
import time
from typing import Any

import httpx

from agentvox.config import Settings, get_settings
from agentvox.logging_config import get_logger
from agentvox.services.tts.exceptions import (
    TTSConnectionError,
    TTSSynthesisError,
    TTSVoiceNotConfiguredError,
)
from agentvox.services.tts.protocol import SynthesisResult, VoiceInfo, VoiceSettings

logger: Any = get_logger(__name__)

ELEVENLABS_OUTPUT_FORMAT = "mp3_44100_128"


class ElevenLabsTTSService:
    """ElevenLabs TTS service returning a complete MPEG payload per reply."""

    def __init__(
        self,
        settings: Settings | None = None,
        model_id: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._model_id = model_id or self._settings.elevenlabs_model_id
        self._transport = transport
        self._client = None

    def _get_client(self):
        if self._client is None:
            if not self._settings.elevenlabs_api_key:
                raise TTSConnectionError("ElevenLabs API key is not configured")
            from elevenlabs import ElevenLabs

            self._client = ElevenLabs(
                api_key=self._settings.elevenlabs_api_key.get_secret_value(),
                timeout=self._settings.provider_timeout_seconds,
            )
        return self._client

    def default_voice_settings(self) -> VoiceSettings:
        return VoiceSettings(
            stability=self._settings.default_voice_stability,
            similarity_boost=self._settings.default_voice_similarity_boost,
        )

    async def synthesize(
        self,
        text: str,
        *,
        voice_id: str | None,
        voice_settings: VoiceSettings | None = None,
    ) -> SynthesisResult:
        """Synthesize text to MPEG audio with the given voice.

        Raises:
            TTSVoiceNotConfiguredError: When voice_id is empty
            TTSSynthesisError: When ElevenLabs returns an error status or no audio
            TTSConnectionError: When ElevenLabs is unreachable or not configured
        """
        if not voice_id:
            raise TTSVoiceNotConfiguredError()

        from elevenlabs.core.api_error import ApiError

        voice_settings = voice_settings or self.default_voice_settings()
        logger.debug(f"Converting to speech with ElevenLabs voice {voice_id}")

        start_time = time.perf_counter()
        try:
            audio = await asyncio.to_thread(
                self._synthesize_to_mp3, text, voice_id, voice_settings
            )
        except TTSConnectionError:
            raise
        except ApiError as e:
            logger.error(f"ElevenLabs synthesis error: status={e.status_code} body={e.body}")
            raise TTSSynthesisError(
                "Failed to synthesize speech", status_code=e.status_code
            ) from e
        except Exception as e:
            logger.error(f"ElevenLabs connection error: {e}")
            raise TTSConnectionError(f"ElevenLabs connection failed: {e}") from e

        if not audio:
            raise TTSSynthesisError("No audio received from ElevenLabs")

        return SynthesisResult(
            audio_bytes=audio,
            voice_id=voice_id,
            input_chars=len(text),
            synthesis_ms=(time.perf_counter() - start_time) * 1000,
        )

    def _synthesize_to_mp3(
        self,
        text: str,
        voice_id: str,
        voice_settings: VoiceSettings,
    ) -> bytes:
        from elevenlabs import VoiceSettings as ElevenLabsVoiceSettings

        client = self._get_client()

        audio_chunks = client.text_to_speech.convert(
            voice_id=voice_id,
            text=text,
            model_id=self._model_id,
            output_format=ELEVENLABS_OUTPUT_FORMAT,
            voice_settings=ElevenLabsVoiceSettings(
                stability=voice_settings.stability,
                similarity_boost=voice_settings.similarity_boost,
            ),
        )

        buffer = io.BytesIO()
        for chunk in audio_chunks:
            buffer.write(chunk)
        return buffer.getvalue()

    async def list_voices(self) -> list[VoiceInfo]:
        """Fetch the voice catalog.

        Raises:
            TTSConnectionError: When no API key is set or the API is unreachable
            TTSSynthesisError: When the API answers with an error status
        """
        if not self._settings.elevenlabs_api_key:
            raise TTSConnectionError("ElevenLabs API key is not configured")

        url = f"{self._settings.elevenlabs_url.rstrip('/')}/voices"
        headers = {
            "Accept": "application/json",
            "xi-api-key": self._settings.elevenlabs_api_key.get_secret_value(),
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._settings.provider_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"ElevenLabs voices request failed: {e}")
            raise TTSConnectionError("Failed to reach ElevenLabs") from e

        if response.is_error:
            logger.error(
                f"ElevenLabs API error: status={response.status_code} body={response.text}"
            )
            raise TTSSynthesisError(
                f"Failed to fetch voices: {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise TTSSynthesisError("Invalid response from voice service") from e

        raw_voices = payload.get("voices") if isinstance(payload, dict) else None
        if not isinstance(raw_voices, list):
            raise TTSSynthesisError("Invalid response from voice service")

        voices: list[VoiceInfo] = []
        for raw in raw_voices:
            if not isinstance(raw, dict):
                continue
            voice_id = raw.get("voice_id")
            if not voice_id:
                continue
            raw_settings = raw.get("settings") or {}
            voices.append(
                VoiceInfo(
                    id=str(voice_id),
                    name=str(raw.get("name") or voice_id),
                    category=raw.get("category") or "Other",
                    description=raw.get("description") or "",
                    preview_url=raw.get("preview_url"),
                    settings=VoiceSettings(
                        stability=raw_settings.get("stability") or 0.5,
                        similarity_boost=raw_settings.get("similarity_boost") or 0.5,
                    ),
                )
            )
        return voices

    async def close(self) -> None:
        self._client = None

    async def health_check(self) -> bool:
        return bool(self._settings.elevenlabs_api_key)
