"""Core relay logic: conversation context and per-session turn sequencing."""

from agentvox.core.context import (
    ContextWindowPolicy,
    ConversationStore,
    InMemoryConversationStore,
)
from agentvox.core.relay import (
    RelayState,
    SessionRelay,
    TurnError,
    get_conversation_store,
    get_session_relay,
    system_prompt_for,
)

__all__ = [
    # Context
    "ConversationStore",
    "InMemoryConversationStore",
    "ContextWindowPolicy",
    # Relay
    "SessionRelay",
    "RelayState",
    "TurnError",
    "get_session_relay",
    "get_conversation_store",
    "system_prompt_for",
]
