"""Repository pattern implementations for data access."""

from agentvox.db.repositories.agents import AsyncAgentRepository, AsyncUserRepository
from agentvox.db.repositories.knowledge import (
    AsyncKnowledgeDocumentRepository,
    AsyncWebsiteCrawlRepository,
)
from agentvox.db.repositories.sessions import AsyncVoiceChatSessionRepository

__all__ = [
    # Users and agents
    "AsyncUserRepository",
    "AsyncAgentRepository",
    # Sessions
    "AsyncVoiceChatSessionRepository",
    # Knowledge base
    "AsyncKnowledgeDocumentRepository",
    "AsyncWebsiteCrawlRepository",
]
