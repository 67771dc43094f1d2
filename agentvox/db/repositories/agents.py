"""Agent and user repositories."""

from __future__ import annotations

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from agentvox.db.models import Agent, User, dump_json_object, utcnow
from agentvox.services.tts.protocol import VoiceSettings


class AsyncUserRepository:
    """Async repository for users."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: int) -> User | None:
        return await self.session.get(User, user_id)

    async def create(self, username: str) -> User:
        user = User(username=username)
        self.session.add(user)
        await self.session.flush()
        return user


class AsyncAgentRepository:
    """Async repository for agents."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, agent_id: int) -> Agent | None:
        return await self.session.get(Agent, agent_id)

    async def list(self, *, user_id: int | None = None) -> list[Agent]:
        query = select(Agent)
        if user_id is not None:
            query = query.where(Agent.user_id == user_id)  # type: ignore[arg-type]
        query = query.order_by(desc(Agent.created_at), desc(Agent.id))  # type: ignore[arg-type]
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create(self, *, voice_settings: VoiceSettings | None = None, **fields) -> Agent:
        """Create an agent; voice settings are stored as JSON."""
        agent = Agent(**fields)
        if voice_settings is not None:
            agent.voice_settings_json = dump_json_object(voice_settings.to_dict())
        self.session.add(agent)
        await self.session.flush()
        return agent

    async def update(self, agent_id: int, **fields) -> Agent | None:
        """Update an agent; returns None for unknown ids."""
        agent = await self.get(agent_id)
        if not agent:
            return None
        if "voice_settings" in fields:
            settings = fields.pop("voice_settings")
            agent.voice_settings_json = (
                dump_json_object(settings.to_dict()) if settings is not None else None
            )
        for key, value in fields.items():
            setattr(agent, key, value)
        agent.updated_at = utcnow()
        self.session.add(agent)
        return agent
