"""Tests for dashboard chat analytics."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from agentvox.api.routes.analytics import range_start, summarize_sessions
from agentvox.db.models import SessionStatus, VoiceChatSession

NOW = datetime(2026, 5, 10, 15, 0, tzinfo=UTC)


def chat(user_id: int, started_at: datetime, **fields) -> VoiceChatSession:
    return VoiceChatSession(user_id=user_id, agent_id=7, started_at=started_at, **fields)


class TestRangeStart:
    def test_known_ranges(self) -> None:
        assert range_start("day", NOW) == NOW - timedelta(days=1)
        assert range_start("week", NOW) == NOW - timedelta(days=7)
        assert range_start("month", NOW) == NOW - timedelta(days=30)

    def test_unknown_range_defaults_to_week(self) -> None:
        assert range_start("decade", NOW) == NOW - timedelta(days=7)


class TestSummarizeSessions:
    """Tests for summarize_sessions."""

    def test_empty_window_is_zero_filled(self) -> None:
        start = range_start("week", NOW)

        summary = summarize_sessions([], start, NOW)

        assert summary.total_sessions == 0
        assert summary.average_duration == 0
        assert summary.response_rate == 0
        assert len(summary.sessions_by_date) == 8
        assert summary.sessions_by_date[0].date == "2026-05-03"
        assert summary.sessions_by_date[-1].date == "2026-05-10"
        assert all(day.sessions == 0 for day in summary.sessions_by_date)

    def test_aggregates(self) -> None:
        start = range_start("week", NOW)
        sessions = [
            chat(1, NOW - timedelta(hours=1), duration_seconds=60.0, agent_response="Hi"),
            chat(1, NOW - timedelta(hours=2), duration_seconds=30.0),
            chat(
                2,
                NOW - timedelta(days=2),
                duration_seconds=90.0,
                agent_response="Hello",
                status=SessionStatus.completed,
            ),
            chat(3, NOW - timedelta(days=20), duration_seconds=1000.0),
        ]

        summary = summarize_sessions(sessions, start, NOW)

        assert summary.total_sessions == 3
        assert summary.total_users == 2
        assert summary.average_duration == 60.0
        assert summary.response_rate == 2 / 3
        by_date = {d.date: d.sessions for d in summary.sessions_by_date}
        assert by_date["2026-05-10"] == 2
        assert by_date["2026-05-08"] == 1
        assert sum(by_date.values()) == 3

    def test_naive_timestamps_treated_as_utc(self) -> None:
        start = range_start("day", NOW)
        naive = (NOW - timedelta(hours=3)).replace(tzinfo=None)

        summary = summarize_sessions([chat(1, naive)], start, NOW)

        assert summary.total_sessions == 1


class TestChatAnalyticsEndpoint:
    """Tests for GET /api/analytics/chat."""

    def test_camel_case_response(self, test_client) -> None:
        test_client.post("/api/voice-chat", json={"userId": 1, "agentId": 7})

        response = test_client.get("/api/analytics/chat", params={"timeRange": "day"})

        assert response.status_code == 200
        data = response.json()
        assert data["totalSessions"] == 1
        assert data["totalUsers"] == 1
        assert data["responseRate"] == 0
        assert len(data["sessionsByDate"]) == 2
        assert sum(d["sessions"] for d in data["sessionsByDate"]) == 1
