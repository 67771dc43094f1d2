"""Chat analytics for the dashboard."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from agentvox.api.schemas import CamelModel
from agentvox.db.models import VoiceChatSession, as_utc, utcnow
from agentvox.db.repositories import AsyncVoiceChatSessionRepository
from agentvox.db.session import get_session
from agentvox.logging_config import get_logger

logger: Any = get_logger(__name__)

router = APIRouter(prefix="/analytics")

RANGE_DAYS = {"day": 1, "week": 7, "month": 30}
DEFAULT_RANGE = "week"


class DailySessions(CamelModel):
    date: str
    sessions: int


class ChatAnalytics(CamelModel):
    total_sessions: int
    average_duration: float
    total_users: int
    response_rate: float
    sessions_by_date: list[DailySessions]


def range_start(time_range: str, now: datetime) -> datetime:
    """Start of the window; unknown ranges fall back to a week."""
    days = RANGE_DAYS.get(time_range, RANGE_DAYS[DEFAULT_RANGE])
    return now - timedelta(days=days)


def summarize_sessions(
    sessions: Sequence[VoiceChatSession],
    start: datetime,
    now: datetime,
) -> ChatAnalytics:
    """Aggregate sessions started in [start, now].

    Every calendar date of the window is present in sessions_by_date,
    zero-filled and sorted ascending.
    """
    in_range = [s for s in sessions if start <= as_utc(s.started_at) <= now]
    total = len(in_range)

    durations = sum(s.duration_seconds or 0 for s in in_range)
    answered = sum(1 for s in in_range if s.agent_response is not None)
    per_day = Counter(as_utc(s.started_at).date().isoformat() for s in in_range)

    day = start.date()
    while day <= now.date():
        per_day.setdefault(day.isoformat(), 0)
        day += timedelta(days=1)

    return ChatAnalytics(
        total_sessions=total,
        average_duration=durations / total if total else 0,
        total_users=len({s.user_id for s in in_range}),
        response_rate=answered / total if total else 0,
        sessions_by_date=[
            DailySessions(date=date, sessions=count) for date, count in sorted(per_day.items())
        ],
    )


@router.get("/chat", response_model=ChatAnalytics)
async def chat_analytics(
    time_range: str = Query(DEFAULT_RANGE, alias="timeRange"),
    session: AsyncSession = Depends(get_session),
) -> ChatAnalytics:
    """Session counts, durations and response rate for a time window."""
    now = utcnow()
    start = range_start(time_range, now)
    sessions = await AsyncVoiceChatSessionRepository(session).list_started_between(start, now)
    return summarize_sessions(sessions, start, now)
