"""Deepgram STT service implementation (one request per audio chunk)."""

from __future__ import annotations

import time
from typing import Any

import httpx

from agentvox.config import Settings, get_settings
from agentvox.logging_config import get_logger
from agentvox.services.stt.exceptions import (
    STTConnectionError,
    STTProviderError,
    STTServiceError,
)
from agentvox.services.stt.protocol import TranscriptResult

logger: Any = get_logger(__name__)


class DeepgramService:
    """Deepgram STT service for browser audio chunks.

    Each chunk is posted to the pre-recorded listen endpoint as an
    independent request; there is no persistent upstream stream.
    Interim results are requested so partial text can be surfaced
    to the client as live captions.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy initialization of the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._settings.provider_timeout_seconds,
                transport=self._transport,
            )
        return self._client

    @property
    def query_params(self) -> dict[str, str]:
        return {
            "encoding": self._settings.deepgram_encoding,
            "language": self._settings.deepgram_language,
            "punctuate": "true",
            "interim_results": "true",
        }

    async def transcribe_chunk(self, audio: bytes) -> TranscriptResult:
        """Transcribe a single audio chunk.

        Args:
            audio: Raw opus/webm bytes exactly as received from the client

        Returns:
            TranscriptResult with text (None when absent) and finality

        Raises:
            STTProviderError: Deepgram returned a non-success status
            STTConnectionError: Deepgram could not be reached
            STTServiceError: Deepgram returned a body that is not JSON
        """
        headers = {
            "Authorization": f"Token {self._settings.deepgram_api_key.get_secret_value()}",
            "Content-Type": self._settings.deepgram_mimetype,
        }

        logger.debug(
            f"Deepgram request: encoding={self._settings.deepgram_encoding} "
            f"mimetype={self._settings.deepgram_mimetype} "
            f"sample_rate={self._settings.deepgram_sample_rate} size={len(audio)}"
        )

        start_time = time.perf_counter()
        try:
            response = await self.client.post(
                self._settings.deepgram_url,
                params=self.query_params,
                headers=headers,
                content=audio,
            )
        except httpx.HTTPError as e:
            logger.error(f"Deepgram request failed: {e}")
            raise STTConnectionError("Failed to connect to Deepgram") from e

        latency_ms = (time.perf_counter() - start_time) * 1000

        if response.is_error:
            logger.error(
                f"Deepgram API error: status={response.status_code} "
                f"reason={response.reason_phrase} body={response.text}"
            )
            raise STTProviderError(
                f"Deepgram API error: {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Deepgram returned invalid JSON: {e}")
            raise STTServiceError("Invalid response from Deepgram") from e

        result = TranscriptResult.from_response(payload, latency_ms=latency_ms)
        if result.text is None:
            logger.debug("No transcription in Deepgram response")
        return result

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def health_check(self) -> bool:
        """Check if Deepgram is configured."""
        return bool(self._settings.deepgram_api_key.get_secret_value())
