"""LLM services (Groq)."""

from agentvox.services.llm.exceptions import (
    LLMAuthenticationError,
    LLMConnectionError,
    LLMEmptyResponseError,
    LLMRateLimitError,
    LLMServiceError,
)
from agentvox.services.llm.groq import GroqService
from agentvox.services.llm.protocol import (
    CompletionMetadata,
    LLMService,
    Message,
    Role,
)

__all__ = [
    # Protocol and types
    "LLMService",
    "Message",
    "Role",
    "CompletionMetadata",
    # Implementation
    "GroqService",
    # Exceptions
    "LLMServiceError",
    "LLMRateLimitError",
    "LLMConnectionError",
    "LLMAuthenticationError",
    "LLMEmptyResponseError",
]
