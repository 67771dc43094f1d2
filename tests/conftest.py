"""Shared pytest fixtures for agentvox tests."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from contextlib import asynccontextmanager
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from agentvox.config import Settings
from agentvox.services.llm.protocol import Message
from agentvox.services.stt.protocol import TranscriptResult
from agentvox.services.tts.exceptions import TTSVoiceNotConfiguredError
from agentvox.services.tts.protocol import SynthesisResult, VoiceSettings


def build_settings(**overrides) -> Settings:
    """Create a Settings object with safe test defaults."""
    base = {
        "deepgram_api_key": "test-deepgram-key",
        "groq_api_key": "test-groq-key",
        "elevenlabs_api_key": "test-elevenlabs-key",
        "firecrawl_api_key": "test-firecrawl-key",
        "database_url": "sqlite+aiosqlite:///:memory:",
    }
    base.update(overrides)
    return Settings(**base)


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """Return a factory to build Settings with overrides."""
    return build_settings


@pytest.fixture
def settings(settings_factory: Callable[..., Settings]) -> Settings:
    """Default Settings fixture."""
    return settings_factory()


# =============================================================================
# Provider Fakes
# =============================================================================


class FakeSTT:
    """Scripted transcription results; an Exception item is raised instead."""

    def __init__(self) -> None:
        self.results: list[TranscriptResult | Exception] = []
        self.chunks: list[bytes] = []

    def queue(self, *items: TranscriptResult | Exception) -> None:
        self.results.extend(items)

    async def transcribe_chunk(self, audio: bytes) -> TranscriptResult:
        self.chunks.append(audio)
        item = self.results.pop(0) if self.results else TranscriptResult(text=None)
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self) -> None:
        pass

    async def health_check(self) -> bool:
        return True


class FakeLLM:
    """Returns queued replies (or raises queued errors) and records each call."""

    def __init__(self, default_reply: str = "Hi there! How can I help?") -> None:
        self.default_reply = default_reply
        self.replies: list[str | Exception] = []
        self.calls: list[list[Message]] = []

    def queue(self, *items: str | Exception) -> None:
        self.replies.extend(items)

    async def complete(self, messages: list[Message]) -> str:
        self.calls.append(list(messages))
        item = self.replies.pop(0) if self.replies else self.default_reply
        if isinstance(item, Exception):
            raise item
        return item

    async def close(self) -> None:
        pass

    async def health_check(self) -> bool:
        return True


class FakeTTS:
    """Returns fixed MPEG bytes; mirrors the missing-voice rule of the real service."""

    def __init__(self, audio: bytes = b"ID3-fake-mpeg") -> None:
        self.audio = audio
        self.error: Exception | None = None
        self.calls: list[dict[str, Any]] = []

    async def synthesize(
        self,
        text: str,
        *,
        voice_id: str | None,
        voice_settings: VoiceSettings | None = None,
    ) -> SynthesisResult:
        self.calls.append(
            {"text": text, "voice_id": voice_id, "voice_settings": voice_settings}
        )
        if not voice_id:
            raise TTSVoiceNotConfiguredError()
        if self.error is not None:
            raise self.error
        return SynthesisResult(audio_bytes=self.audio, voice_id=voice_id, input_chars=len(text))

    async def close(self) -> None:
        pass

    async def health_check(self) -> bool:
        return True


class RecordingClient:
    """Stands in for a WebSocket; keeps every JSON message sent."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    async def send_json(self, data: Any) -> None:
        self.sent.append(data)

    @property
    def types(self) -> list[str]:
        return [m["type"] for m in self.sent]


@pytest.fixture
def fake_stt() -> FakeSTT:
    return FakeSTT()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def fake_tts() -> FakeTTS:
    return FakeTTS()


@pytest.fixture
def recording_client() -> RecordingClient:
    return RecordingClient()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def async_engine():
    """Create an in-memory async SQLite engine for testing."""
    # Import models to register them with SQLModel metadata
    from agentvox.db import models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        future=True,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def async_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create an async database session for testing."""
    async_session_maker = sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def session_factory(async_engine):
    """get_session_context equivalent bound to the test engine."""
    maker = sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    @asynccontextmanager
    async def factory() -> AsyncGenerator[AsyncSession, None]:
        async with maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    return factory


async def seed_defaults(session: AsyncSession) -> None:
    """User 1 owning agent 7 (voice "v1") and agent 8 (no voice)."""
    from agentvox.db.models import Agent, User

    session.add(User(id=1, username="alice"))
    await session.flush()
    session.add(
        Agent(
            id=7,
            user_id=1,
            name="Concierge",
            system_prompt="You are Concierge.",
            voice_id="v1",
            voice_settings_json='{"stability": 0.6, "similarity_boost": 0.8}',
        )
    )
    session.add(Agent(id=8, user_id=1, name="Silent", voice_id=None))
    await session.commit()


@pytest_asyncio.fixture
async def seeded_db(async_session) -> AsyncSession:
    """In-memory database holding the default user and agents."""
    await seed_defaults(async_session)
    return async_session


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'agentvox-test.db'}"


@pytest.fixture
def run_db(database_url) -> Callable[[Callable[[AsyncSession], Awaitable[Any]]], Any]:
    """Run a coroutine function against the test database from sync code.

    Uses its own engine and event loop, so it works before, during and
    after a TestClient session.
    """

    def run(fn: Callable[[AsyncSession], Awaitable[Any]]) -> Any:
        async def _run() -> Any:
            from agentvox.db import models  # noqa: F401

            engine = create_async_engine(database_url)
            try:
                async with engine.begin() as conn:
                    await conn.run_sync(SQLModel.metadata.create_all)
                maker = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
                async with maker() as session:
                    result = await fn(session)
                    await session.commit()
                    return result
            finally:
                await engine.dispose()

        return asyncio.run(_run())

    return run


@pytest.fixture
def conversation_store():
    from agentvox.core.context import InMemoryConversationStore

    return InMemoryConversationStore()


@pytest.fixture
def app_env(monkeypatch, database_url) -> Generator[None, None, None]:
    """Point Settings at the per-test database and reset cached singletons."""
    import agentvox.core.relay as relay_module
    import agentvox.db.session as db_session
    from agentvox.config import get_settings

    monkeypatch.setenv("DEEPGRAM_API_KEY", "test-deepgram-key")
    monkeypatch.setenv("GROQ_API_KEY", "test-groq-key")
    monkeypatch.setenv("DATABASE_URL", database_url)
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.delenv("ELEVENLABS_API_KEY", raising=False)
    monkeypatch.delenv("FIRECRAWL_API_KEY", raising=False)
    monkeypatch.delenv("USE_AGENT_SYSTEM_PROMPT", raising=False)
    monkeypatch.delenv("CONTEXT_MAX_MESSAGES", raising=False)

    get_settings.cache_clear()
    monkeypatch.setattr(db_session, "_engine", None)
    monkeypatch.setattr(relay_module, "_relay", None)
    monkeypatch.setattr(relay_module, "_store", None)

    yield

    get_settings.cache_clear()


@pytest.fixture
def relay(app_env, monkeypatch, fake_stt, fake_llm, fake_tts, conversation_store):
    """Relay wired to fake providers and the app's database.

    Installed as the process-wide relay, so the app under test uses it too.
    """
    import agentvox.core.relay as relay_module
    from agentvox.config import get_settings
    from agentvox.core.relay import SessionRelay

    instance = SessionRelay(
        fake_stt,
        fake_llm,
        fake_tts,
        conversation_store,
        settings=get_settings(),
    )
    monkeypatch.setattr(relay_module, "_store", conversation_store)
    monkeypatch.setattr(relay_module, "_relay", instance)
    return instance


@pytest.fixture
def test_client(app_env, run_db, relay) -> Generator:
    """FastAPI TestClient with fake providers and a seeded file database.

    Seed data: user 1, agent 7 (voice "v1"), agent 8 (no voice).
    """
    from fastapi.testclient import TestClient

    from agentvox.main import create_app

    run_db(seed_defaults)

    app = create_app()

    with TestClient(app) as client:
        yield client
