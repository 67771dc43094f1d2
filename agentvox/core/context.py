"""Conversation context cache.

Holds the ordered message list for every live session. The first
message of a context is always the system message; messages are only
ever appended. Contexts live in process memory and are evicted when the
session's socket closes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from agentvox.services.llm.protocol import Message, Role


class ConversationStore(Protocol):
    """Capability the relay needs from a context cache."""

    def get(self, session_id: str) -> list[Message] | None:
        """Return a copy of the context, or None when absent."""
        ...

    def ensure(self, session_id: str, system_prompt: str) -> list[Message]:
        """Return the context, creating it with a system message if absent."""
        ...

    def append(self, session_id: str, message: Message) -> None:
        """Append a message to an existing context."""
        ...

    def evict(self, session_id: str) -> bool:
        """Drop the context; returns whether one existed."""
        ...

    def __contains__(self, session_id: object) -> bool: ...


class InMemoryConversationStore:
    """Process-local conversation store keyed by session id."""

    def __init__(self) -> None:
        self._contexts: dict[str, list[Message]] = {}

    def get(self, session_id: str) -> list[Message] | None:
        context = self._contexts.get(session_id)
        return list(context) if context is not None else None

    def ensure(self, session_id: str, system_prompt: str) -> list[Message]:
        context = self._contexts.get(session_id)
        if context is None:
            context = [Message(role=Role.SYSTEM, content=system_prompt)]
            self._contexts[session_id] = context
        return list(context)

    def append(self, session_id: str, message: Message) -> None:
        if message.role is Role.SYSTEM:
            raise ValueError("System message is only added when a context is created")
        try:
            self._contexts[session_id].append(message)
        except KeyError:
            raise KeyError(f"No conversation context for session {session_id}") from None

    def evict(self, session_id: str) -> bool:
        return self._contexts.pop(session_id, None) is not None

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._contexts

    def __len__(self) -> int:
        return len(self._contexts)

    def session_ids(self) -> list[str]:
        return list(self._contexts)


@dataclass(frozen=True, slots=True)
class ContextWindowPolicy:
    """Selects which part of a context is sent for completion.

    Keeps the system message plus the most recent ``max_messages - 1``
    turns. ``max_messages=None`` sends the whole context. Only the view
    is truncated; the stored context is untouched.
    """

    max_messages: int | None = None

    def __post_init__(self) -> None:
        if self.max_messages is not None and self.max_messages < 1:
            raise ValueError("max_messages must be at least 1")

    def apply(self, messages: list[Message]) -> list[Message]:
        if self.max_messages is None or len(messages) <= self.max_messages:
            return list(messages)
        if not messages:
            return []

        head, tail = messages[0], messages[1:]
        keep = self.max_messages - 1
        return [head, *tail[len(tail) - keep :]] if keep else [head]
