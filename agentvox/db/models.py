"""SQLModel database models.

Tables for the records the voice platform keeps:
- Users and their configurable agents
- Voice chat sessions (one per conversation)
- Knowledge documents and the website crawls that produce them

JSON columns are stored as strings; repositories serialize them and the
models expose parsed views as properties.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from sqlmodel import Field, SQLModel

from agentvox.services.tts.protocol import VoiceSettings

# =============================================================================
# Enums (shared across models)
# =============================================================================


class SessionStatus(str, Enum):
    """Lifecycle of a voice chat session."""

    active = "active"
    completed = "completed"


class DocumentType(str, Enum):
    """How a knowledge document was ingested."""

    website = "website"
    file = "file"
    text = "text"


class CrawlStatus(str, Enum):
    """Status of a website crawl."""

    pending = "pending"
    completed = "completed"
    failed = "failed"


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo on round-trip; treat naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def load_json_object(value: str | None) -> dict[str, Any]:
    """Parse a JSON object column, tolerating empty or corrupt values."""
    if not value:
        return {}
    try:
        data = json.loads(value)
    except json.JSONDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def dump_json_object(value: dict[str, Any] | None) -> str | None:
    if value is None:
        return None
    return json.dumps(value, default=str)


# =============================================================================
# Database Models
# =============================================================================


class User(SQLModel, table=True):
    """Owner of agents and voice sessions (identity lives in the external IdP)."""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    username: str = Field(max_length=100, unique=True, index=True)
    created_at: datetime = Field(default_factory=utcnow)


class Agent(SQLModel, table=True):
    """A configurable conversational agent."""

    __tablename__ = "agents"

    id: int | None = Field(default=None, primary_key=True)
    user_id: int | None = Field(default=None, foreign_key="users.id", index=True)
    name: str = Field(max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    type: str = Field(default="ai", max_length=20)
    system_prompt: str | None = Field(default=None, description="Agent's own prompt")
    voice_id: str | None = Field(default=None, max_length=100, description="ElevenLabs voice")
    voice_settings_json: str | None = Field(
        default=None,
        description="JSON object with stability and similarity_boost",
    )
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def voice_settings(self) -> VoiceSettings | None:
        """Parsed voice settings, or None when the agent has none."""
        data = load_json_object(self.voice_settings_json)
        if not data:
            return None
        return VoiceSettings.from_dict(data)


class VoiceChatSession(SQLModel, table=True):
    """One voice conversation between a user and an agent.

    transcription/agent_response hold only the most recent turn.
    metadata_json is written once at creation.
    """

    __tablename__ = "voice_chat_sessions"

    session_id: str = Field(
        default_factory=lambda: str(uuid4()),
        primary_key=True,
        description="Opaque routing key for the WebSocket and the context cache",
    )
    user_id: int = Field(foreign_key="users.id", index=True)
    agent_id: int = Field(foreign_key="agents.id", index=True)
    status: SessionStatus = Field(default=SessionStatus.active, index=True)
    started_at: datetime = Field(default_factory=utcnow, index=True)
    ended_at: datetime | None = Field(default=None)
    duration_seconds: float | None = Field(default=None, ge=0)
    transcription: str | None = Field(default=None)
    agent_response: str | None = Field(default=None)
    metadata_json: str | None = Field(default=None)

    @property
    def session_metadata(self) -> dict[str, Any]:
        return load_json_object(self.metadata_json)


class KnowledgeDocument(SQLModel, table=True):
    """Knowledge base content attached to an agent."""

    __tablename__ = "knowledge_documents"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=300)
    type: DocumentType = Field(index=True)
    source: str | None = Field(default=None, max_length=2000)
    content: str
    metadata_json: str | None = Field(default=None)
    agent_id: int | None = Field(default=None, foreign_key="agents.id", index=True)
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def document_metadata(self) -> dict[str, Any]:
        return load_json_object(self.metadata_json)


class WebsiteCrawl(SQLModel, table=True):
    """A request to crawl a website into the knowledge base."""

    __tablename__ = "website_crawls"

    id: int | None = Field(default=None, primary_key=True)
    url: str = Field(max_length=2000)
    status: CrawlStatus = Field(default=CrawlStatus.pending, index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    agent_id: int | None = Field(default=None, foreign_key="agents.id", index=True)
    crawl_config_json: str | None = Field(default=None)
    scheduled_at: datetime | None = Field(default=None)
    schedule_recurrence: str | None = Field(default=None, max_length=20)
    last_run_at: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def crawl_config(self) -> dict[str, Any]:
        return load_json_object(self.crawl_config_json)
