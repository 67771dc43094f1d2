"""Groq LLM service implementation."""

from __future__ import annotations

import time
from typing import Any

import groq
from groq import AsyncGroq

from agentvox.config import Settings, get_settings
from agentvox.logging_config import get_logger
from agentvox.services.llm.exceptions import (
    LLMAuthenticationError,
    LLMConnectionError,
    LLMEmptyResponseError,
    LLMRateLimitError,
    LLMServiceError,
)
from agentvox.services.llm.protocol import CompletionMetadata, Message

logger: Any = get_logger(__name__)


class GroqService:
    """Groq chat-completion service.

    Sends the whole conversation it is given; choosing which messages to
    send is the caller's job (see ContextWindowPolicy).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        model: str | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._model = model or self._settings.llm_model
        self._client: AsyncGroq | None = None
        self.last_metadata: CompletionMetadata | None = None

    @property
    def client(self) -> AsyncGroq:
        """Lazy initialization of AsyncGroq client."""
        if self._client is None:
            self._client = AsyncGroq(
                api_key=self._settings.groq_api_key.get_secret_value(),
                timeout=self._settings.provider_timeout_seconds,
                max_retries=0,
            )
        return self._client

    async def complete(
        self,
        messages: list[Message],
        *,
        max_tokens: int | None = None,
        temperature: float = 0.7,
    ) -> str:
        """Generate the assistant reply for a conversation.

        Args:
            messages: Ordered system/user/assistant turns
            max_tokens: Response token cap; unset lets the model finish its reply
            temperature: Response creativity (0.7 good for conversation)

        Returns:
            Reply text

        Raises:
            LLMEmptyResponseError: When Groq returns no content
            LLMRateLimitError: When rate limit exceeded
            LLMConnectionError: When API unreachable
            LLMAuthenticationError: When API key invalid
            LLMServiceError: For other API errors
        """
        api_messages = [m.to_api() for m in messages]
        metadata = CompletionMetadata(model=self._model)
        options: dict[str, Any] = {"temperature": temperature}
        if max_tokens is not None:
            options["max_tokens"] = max_tokens

        start_time = time.perf_counter()
        try:
            response = await self.client.chat.completions.create(
                messages=api_messages,  # type: ignore[arg-type]
                model=self._model,
                **options,
            )

        except groq.RateLimitError as e:
            logger.warning(f"Groq rate limit hit: {e}")
            raise LLMRateLimitError(
                "Rate limit exceeded",
                retry_after=self._extract_retry_after(e),
            ) from e

        except groq.APIConnectionError as e:
            logger.error(f"Groq connection error: {e.__cause__}")
            raise LLMConnectionError("Failed to connect to Groq API") from e

        except groq.AuthenticationError as e:
            logger.error("Groq authentication failed")
            raise LLMAuthenticationError("Invalid Groq API key") from e

        except groq.APIStatusError as e:
            logger.error(f"Groq API error: {e.status_code} - {e.message}")
            raise LLMServiceError(f"Groq API error: {e.status_code}") from e

        metadata.latency_ms = (time.perf_counter() - start_time) * 1000

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise LLMEmptyResponseError()

        metadata.finish_reason = choices[0].finish_reason
        if getattr(response, "usage", None):
            metadata.prompt_tokens = response.usage.prompt_tokens
            metadata.completion_tokens = response.usage.completion_tokens
            metadata.total_tokens = response.usage.total_tokens
        self.last_metadata = metadata

        logger.debug(f"Groq completion in {metadata.latency_ms:.1f}ms")
        return content

    def _extract_retry_after(self, error: groq.RateLimitError) -> float:
        """Extract retry-after from rate limit error."""
        if hasattr(error, "response") and error.response:
            retry_after = error.response.headers.get("retry-after")
            if retry_after:
                try:
                    return float(retry_after)
                except ValueError:
                    pass
        return 60.0  # Default to 60 seconds

    async def health_check(self) -> bool:
        """Check if Groq API is reachable."""
        try:
            response = await self.client.chat.completions.create(
                messages=[{"role": "user", "content": "hi"}],
                model=self._model,
                max_tokens=1,
            )
            return bool(response.choices)
        except Exception as e:
            logger.warning(f"Groq health check failed: {e}")
            return False

    async def close(self) -> None:
        """Close the client connection."""
        if self._client:
            await self._client.close()
            self._client = None
