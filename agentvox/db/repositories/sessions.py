"""Voice chat session repository."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agentvox.db.models import (
    SessionStatus,
    VoiceChatSession,
    as_utc,
    dump_json_object,
    utcnow,
)


class AsyncVoiceChatSessionRepository:
    """Async repository for the relay and API."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, session_id: str) -> VoiceChatSession | None:
        return await self.session.get(VoiceChatSession, session_id)

    async def create(
        self,
        *,
        user_id: int,
        agent_id: int,
        metadata: dict[str, Any] | None = None,
        session_id: str | None = None,
    ) -> VoiceChatSession:
        record = VoiceChatSession(
            user_id=user_id,
            agent_id=agent_id,
            status=SessionStatus.active,
            metadata_json=dump_json_object(metadata),
        )
        if session_id:
            record.session_id = session_id
        self.session.add(record)
        await self.session.flush()
        return record

    async def update(self, session_id: str, **fields) -> VoiceChatSession | None:
        """Overwrite the given fields; returns None for unknown ids."""
        record = await self.get(session_id)
        if not record:
            return None
        if "metadata" in fields:
            fields["metadata_json"] = dump_json_object(fields.pop("metadata"))
        for key, value in fields.items():
            setattr(record, key, value)
        self.session.add(record)
        return record

    async def mark_completed(
        self, session_id: str, ended_at: datetime | None = None
    ) -> VoiceChatSession | None:
        """Close a session, computing its duration from started_at."""
        record = await self.get(session_id)
        if not record:
            return None

        ended_at = ended_at or utcnow()
        record.status = SessionStatus.completed
        record.ended_at = ended_at
        record.duration_seconds = max(
            0.0, (as_utc(ended_at) - as_utc(record.started_at)).total_seconds()
        )
        self.session.add(record)
        return record

    async def list_started_between(
        self, start: datetime, end: datetime
    ) -> list[VoiceChatSession]:
        query = (
            select(VoiceChatSession)
            .where(
                VoiceChatSession.started_at >= start,  # type: ignore[arg-type]
                VoiceChatSession.started_at <= end,  # type: ignore[arg-type]
            )
            .order_by(VoiceChatSession.started_at)  # type: ignore[arg-type]
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
