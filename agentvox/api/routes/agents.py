"""Agent configuration endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from agentvox.api.schemas import CamelModel
from agentvox.db.models import Agent
from agentvox.db.repositories import AsyncAgentRepository, AsyncUserRepository
from agentvox.db.session import get_session
from agentvox.logging_config import get_logger
from agentvox.services.tts.protocol import (
    DEFAULT_SIMILARITY_BOOST,
    DEFAULT_STABILITY,
    VoiceSettings,
)

logger: Any = get_logger(__name__)

router = APIRouter(prefix="/agents")


# =============================================================================
# Request/Response Schemas
# =============================================================================


class VoiceSettingsSchema(CamelModel):
    """Voice tuning as exposed to the dashboard."""

    stability: float = Field(DEFAULT_STABILITY, ge=0, le=1)
    similarity_boost: float = Field(DEFAULT_SIMILARITY_BOOST, ge=0, le=1)

    def to_voice_settings(self) -> VoiceSettings:
        return VoiceSettings(stability=self.stability, similarity_boost=self.similarity_boost)


class AgentCreate(CamelModel):
    """Schema for creating an agent."""

    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    type: str = Field("ai", max_length=20)
    system_prompt: str | None = None
    voice_id: str | None = Field(None, max_length=100)
    voice_settings: VoiceSettingsSchema = Field(default_factory=VoiceSettingsSchema)
    is_active: bool = True
    user_id: int | None = None


class AgentUpdate(CamelModel):
    """Schema for updating an agent (all fields optional)."""

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=2000)
    type: str | None = Field(None, max_length=20)
    system_prompt: str | None = None
    voice_id: str | None = Field(None, max_length=100)
    voice_settings: VoiceSettingsSchema | None = None
    is_active: bool | None = None

    @field_validator("name", "type", "is_active")
    @classmethod
    def reject_null(cls, value):
        # Absent means unchanged; these columns cannot be cleared
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class AgentResponse(CamelModel):
    """Response schema for agents."""

    id: int
    user_id: int | None
    name: str
    description: str | None
    type: str
    system_prompt: str | None
    voice_id: str | None
    voice_settings: VoiceSettingsSchema | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_agent(cls, agent: Agent) -> AgentResponse:
        settings = agent.voice_settings
        return cls(
            id=agent.id,
            user_id=agent.user_id,
            name=agent.name,
            description=agent.description,
            type=agent.type,
            system_prompt=agent.system_prompt,
            voice_id=agent.voice_id,
            voice_settings=(
                VoiceSettingsSchema(
                    stability=settings.stability,
                    similarity_boost=settings.similarity_boost,
                )
                if settings
                else None
            ),
            is_active=agent.is_active,
            created_at=agent.created_at,
            updated_at=agent.updated_at,
        )


# =============================================================================
# Endpoints
# =============================================================================


@router.get("", response_model=list[AgentResponse])
async def list_agents(
    session: AsyncSession = Depends(get_session),
) -> list[AgentResponse]:
    """List all agents, newest first."""
    agents = await AsyncAgentRepository(session).list()
    return [AgentResponse.from_agent(agent) for agent in agents]


@router.post("", response_model=AgentResponse, status_code=201)
async def create_agent(
    data: AgentCreate,
    session: AsyncSession = Depends(get_session),
) -> AgentResponse:
    """Create an agent with default voice settings when none are given."""
    if data.user_id is not None and not await AsyncUserRepository(session).get(data.user_id):
        raise HTTPException(status_code=400, detail="User not found")

    fields = data.model_dump(exclude={"voice_settings"})
    agent = await AsyncAgentRepository(session).create(
        voice_settings=data.voice_settings.to_voice_settings(),
        **fields,
    )
    await session.commit()
    await session.refresh(agent)

    logger.info(f"Created agent {agent.id} ({agent.name})")
    return AgentResponse.from_agent(agent)


@router.get("/{agent_id}", response_model=AgentResponse)
async def get_agent(
    agent_id: int,
    session: AsyncSession = Depends(get_session),
) -> AgentResponse:
    """Get a single agent by ID."""
    agent = await AsyncAgentRepository(session).get(agent_id)
    if not agent:
        raise HTTPException(status_code=404, detail="Agent not found")
    return AgentResponse.from_agent(agent)


@router.patch("/{agent_id}", response_model=AgentResponse)
async def update_agent(
    agent_id: int,
    data: AgentUpdate,
    session: AsyncSession = Depends(get_session),
) -> AgentResponse:
    """Update the fields present in the request body."""
    fields = data.model_dump(exclude_unset=True, exclude={"voice_settings"})
    if "voice_settings" in data.model_fields_set:
        fields["voice_settings"] = (
            data.voice_settings.to_voice_settings() if data.voice_settings else None
        )

    agent = await AsyncAgentRepository(session).update(agent_id, **fields)
    if not agent:
        raise HTTPException(status_code=404, detail="Agent not found")

    await session.commit()
    await session.refresh(agent)
    return AgentResponse.from_agent(agent)
