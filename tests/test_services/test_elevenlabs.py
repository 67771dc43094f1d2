"""Tests for the ElevenLabs synthesis service and voice catalog."""

from __future__ import annotations

import base64
from unittest.mock import MagicMock

import httpx
import pytest
from elevenlabs.core.api_error import ApiError

from agentvox.services.tts.elevenlabs import ElevenLabsTTSService
from agentvox.services.tts.exceptions import (
    TTSConnectionError,
    TTSServiceError,
    TTSSynthesisError,
    TTSVoiceNotConfiguredError,
)
from agentvox.services.tts.protocol import SynthesisResult, VoiceSettings


@pytest.fixture
def tts_service(settings):
    """ElevenLabsTTSService with a mocked SDK client."""
    service = ElevenLabsTTSService(settings=settings)
    service._client = MagicMock()
    service._client.text_to_speech.convert.return_value = iter([b"ID3", b"mpeg-frames"])
    return service


class TestVoiceSettings:
    """Tests for VoiceSettings."""

    def test_defaults(self):
        settings = VoiceSettings()
        assert settings.stability == 0.75
        assert settings.similarity_boost == 0.75

    def test_from_dict_accepts_camel_case(self):
        settings = VoiceSettings.from_dict({"stability": 0.2, "similarityBoost": 0.9})
        assert settings == VoiceSettings(stability=0.2, similarity_boost=0.9)

    def test_round_trip_dict(self):
        assert VoiceSettings.from_dict(VoiceSettings(0.1, 0.3).to_dict()) == VoiceSettings(0.1, 0.3)


class TestSynthesisResult:
    def test_to_base64(self):
        result = SynthesisResult(audio_bytes=b"\x00\x01mp3", voice_id="v1")
        assert base64.b64decode(result.to_base64()) == b"\x00\x01mp3"
        assert result.content_type == "audio/mpeg"


class TestSynthesize:
    """Tests for ElevenLabsTTSService.synthesize."""

    @pytest.mark.asyncio
    async def test_synthesize_concatenates_audio(self, tts_service):
        result = await tts_service.synthesize("Hello there", voice_id="v1")

        assert result.audio_bytes == b"ID3mpeg-frames"
        assert result.voice_id == "v1"
        assert result.input_chars == len("Hello there")
        assert result.synthesis_ms is not None

    @pytest.mark.asyncio
    async def test_default_voice_settings(self, tts_service):
        """Agents without settings get stability/similarity 0.75."""
        await tts_service.synthesize("Hi", voice_id="v1")

        kwargs = tts_service._client.text_to_speech.convert.call_args.kwargs
        assert kwargs["voice_id"] == "v1"
        assert kwargs["text"] == "Hi"
        assert kwargs["model_id"] == "eleven_monolingual_v1"
        assert kwargs["output_format"].startswith("mp3")
        assert kwargs["voice_settings"].stability == 0.75
        assert kwargs["voice_settings"].similarity_boost == 0.75

    @pytest.mark.asyncio
    async def test_agent_voice_settings_passed(self, tts_service):
        await tts_service.synthesize(
            "Hi", voice_id="v1", voice_settings=VoiceSettings(stability=0.3, similarity_boost=0.9)
        )

        voice_settings = tts_service._client.text_to_speech.convert.call_args.kwargs[
            "voice_settings"
        ]
        assert voice_settings.stability == 0.3
        assert voice_settings.similarity_boost == 0.9

    @pytest.mark.asyncio
    @pytest.mark.parametrize("voice_id", [None, ""])
    async def test_missing_voice_skips_provider(self, tts_service, voice_id):
        with pytest.raises(TTSVoiceNotConfiguredError, match="No voice selected for agent"):
            await tts_service.synthesize("Hi", voice_id=voice_id)

        tts_service._client.text_to_speech.convert.assert_not_called()

    @pytest.mark.asyncio
    async def test_api_error_maps_to_synthesis_error(self, tts_service):
        tts_service._client.text_to_speech.convert.side_effect = ApiError(
            status_code=401, body={"detail": "invalid key"}
        )

        with pytest.raises(TTSSynthesisError) as exc_info:
            await tts_service.synthesize("Hi", voice_id="v1")

        assert str(exc_info.value) == "Failed to synthesize speech"
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_other_failure_maps_to_connection_error(self, tts_service):
        tts_service._client.text_to_speech.convert.side_effect = OSError("network down")

        with pytest.raises(TTSConnectionError):
            await tts_service.synthesize("Hi", voice_id="v1")

    @pytest.mark.asyncio
    async def test_empty_audio_is_an_error(self, tts_service):
        tts_service._client.text_to_speech.convert.return_value = iter([])

        with pytest.raises(TTSSynthesisError):
            await tts_service.synthesize("Hi", voice_id="v1")

    @pytest.mark.asyncio
    async def test_missing_api_key(self, settings_factory):
        service = ElevenLabsTTSService(settings=settings_factory(elevenlabs_api_key=None))

        with pytest.raises(TTSConnectionError):
            await service.synthesize("Hi", voice_id="v1")


class TestListVoices:
    """Tests for the voice catalog (REST via httpx)."""

    @pytest.mark.asyncio
    async def test_list_voices(self, settings):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "voices": [
                        {
                            "voice_id": "v1",
                            "name": "Rachel",
                            "category": "premade",
                            "description": "calm",
                            "preview_url": "https://cdn.example/rachel.mp3",
                            "settings": {"stability": 0.4, "similarity_boost": 0.6},
                        },
                        {"voice_id": "v2", "name": "Adam"},
                        {"name": "no id, skipped"},
                    ]
                },
            )

        service = ElevenLabsTTSService(settings=settings, transport=httpx.MockTransport(handler))
        voices = await service.list_voices()

        assert seen[0].url.path == "/v1/voices"
        assert seen[0].headers["xi-api-key"] == "test-elevenlabs-key"
        assert [v.id for v in voices] == ["v1", "v2"]
        assert voices[0].settings == VoiceSettings(stability=0.4, similarity_boost=0.6)
        assert voices[1].category == "Other"
        assert voices[1].description == ""
        assert voices[1].settings == VoiceSettings(stability=0.5, similarity_boost=0.5)

    @pytest.mark.asyncio
    async def test_error_status(self, settings):
        service = ElevenLabsTTSService(
            settings=settings,
            transport=httpx.MockTransport(lambda r: httpx.Response(401, text="nope")),
        )

        with pytest.raises(TTSSynthesisError, match="Unauthorized"):
            await service.list_voices()

    @pytest.mark.asyncio
    async def test_malformed_body(self, settings):
        service = ElevenLabsTTSService(
            settings=settings,
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"items": []})),
        )

        with pytest.raises(TTSServiceError, match="Invalid response"):
            await service.list_voices()

    @pytest.mark.asyncio
    async def test_missing_key(self, settings_factory):
        service = ElevenLabsTTSService(settings=settings_factory(elevenlabs_api_key=None))

        with pytest.raises(TTSConnectionError):
            await service.list_voices()
