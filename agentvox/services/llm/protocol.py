"""LLM service protocol and data types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class Role(str, Enum):
    """Message role in conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True, slots=True)
class Message:
    """A single message in conversation history."""

    role: Role
    content: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_api(self) -> dict[str, str]:
        """Role/content pair in chat-completions wire format."""
        return {"role": self.role.value, "content": self.content}


@dataclass
class CompletionMetadata:
    """Metadata collected for a single completion call."""

    model: str = ""
    latency_ms: float | None = None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None
    finish_reason: str | None = None


class LLMService(Protocol):
    """Protocol for LLM service implementations."""

    async def complete(self, messages: list[Message]) -> str:
        """Return the assistant's reply for the full message list.

        Raises:
            LLMEmptyResponseError: When the provider returns no content
            LLMServiceError: For any other provider failure
        """
        ...

    async def health_check(self) -> bool:
        """Check if the service is operational."""
        ...
