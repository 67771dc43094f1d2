"""Session relay: audio chunk in, transcript/response/audio messages out.

One relay instance serves every transcription socket in the process.
For each inbound chunk it runs:

    Audio -> STT -> transcription message
                 -> (final) LLM -> response message
                                -> TTS -> audio message -> persist turn

Chunks for the same session are handled one at a time under a
per-session lock; different sessions interleave freely.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from agentvox.config import Settings, get_settings
from agentvox.core.context import (
    ContextWindowPolicy,
    ConversationStore,
    InMemoryConversationStore,
)
from agentvox.core.messages import (
    audio_message,
    error_message,
    response_message,
    transcription_message,
)
from agentvox.db.models import Agent
from agentvox.db.repositories.agents import AsyncAgentRepository
from agentvox.db.repositories.sessions import AsyncVoiceChatSessionRepository
from agentvox.db.session import get_session_context
from agentvox.logging_config import get_logger, preview, session_logger
from agentvox.observability.metrics import (
    ACTIVE_SESSIONS,
    record_chunk,
    record_relay_error,
    record_session_closed,
    record_turn,
)
from agentvox.services.llm.exceptions import LLMServiceError
from agentvox.services.llm.groq import GroqService
from agentvox.services.llm.protocol import LLMService, Message, Role
from agentvox.services.stt.deepgram import DeepgramService
from agentvox.services.stt.exceptions import STTServiceError
from agentvox.services.stt.protocol import STTService
from agentvox.services.tts.elevenlabs import ElevenLabsTTSService
from agentvox.services.tts.exceptions import TTSServiceError
from agentvox.services.tts.protocol import TTSService

logger: Any = get_logger(__name__)

PROCESSING_FAILED = "Processing failed"

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def system_prompt_for(agent: Agent, settings: Settings) -> str:
    """System message that opens a session's context.

    The fixed default unless use_agent_system_prompt is enabled and the
    agent has a prompt of its own.
    """
    if settings.use_agent_system_prompt and agent.system_prompt:
        return agent.system_prompt
    return settings.default_system_prompt


class RelayState(str, Enum):
    """Per-session relay state."""

    IDLE = "idle"
    AWAITING_COMPLETION = "awaiting_completion"
    AWAITING_SYNTHESIS = "awaiting_synthesis"
    CLOSED = "closed"


class TurnError(Exception):
    """A turn cannot proceed; the message is shown to the client."""

    def __init__(self, message: str, stage: str = "lookup") -> None:
        super().__init__(message)
        self.stage = stage


class RelayClient(Protocol):
    """Outbound side of a transcription socket."""

    async def send_json(self, data: Any) -> None: ...


@dataclass(eq=False)
class _RelaySession:
    """Lock and state of one open session.

    Handlers keep a reference to the entry they started with; once it is
    CLOSED they stop, even if a new entry exists for the same id.
    """

    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    state: RelayState = RelayState.IDLE

    @property
    def closed(self) -> bool:
        return self.state is RelayState.CLOSED


class _TurnAbandoned(Exception):
    """The session closed while a turn was in flight."""


class SessionRelay:
    """Sequences transcription, completion and synthesis per session."""

    def __init__(
        self,
        stt: STTService,
        llm: LLMService,
        tts: TTSService,
        store: ConversationStore,
        *,
        session_factory: SessionFactory = get_session_context,
        context_policy: ContextWindowPolicy | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._stt = stt
        self._llm = llm
        self._tts = tts
        self._store = store
        self._session_factory = session_factory
        self._policy = context_policy or ContextWindowPolicy()
        self._settings = settings or get_settings()

        self._sessions: dict[str, _RelaySession] = {}

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def connect(self, session_id: str) -> None:
        """Register an open socket for a session."""
        if session_id not in self._sessions:
            self._open(session_id)

    def _open(self, session_id: str) -> _RelaySession:
        entry = _RelaySession()
        self._sessions[session_id] = entry
        ACTIVE_SESSIONS.inc()
        session_logger(logger, session_id).info("Transcription socket opened")
        return entry

    async def disconnect(self, session_id: str) -> None:
        """Complete the session and drop its context.

        Runs at most once per connection. A turn still in flight is
        abandoned at its next step. Failures are logged only; the socket is
        already gone.
        """
        entry = self._sessions.pop(session_id, None)
        if entry is None:
            return
        entry.state = RelayState.CLOSED
        self._store.evict(session_id)
        ACTIVE_SESSIONS.dec()

        log = session_logger(logger, session_id)
        try:
            async with self._session_factory() as db:
                record = await AsyncVoiceChatSessionRepository(db).mark_completed(session_id)
            if record is None:
                log.warning("Disconnect for unknown session")
            else:
                record_session_closed(record.duration_seconds)
                log.info(f"Session completed after {record.duration_seconds or 0:.1f}s")
        except Exception as e:
            log.error(f"Failed to mark session completed: {e}")

    async def close_all(self) -> None:
        """Disconnect every open session and close provider clients (shutdown)."""
        for session_id in list(self._sessions):
            await self.disconnect(session_id)

        for service in (self._stt, self._llm, self._tts):
            close = getattr(service, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as e:
                logger.error(f"Error closing {type(service).__name__}: {e}")

    def state(self, session_id: str) -> RelayState | None:
        entry = self._sessions.get(session_id)
        return entry.state if entry else None

    @property
    def active_count(self) -> int:
        """Number of open sessions."""
        return len(self._sessions)

    # =========================================================================
    # Chunk handling
    # =========================================================================

    async def handle_chunk(self, session_id: str, audio: bytes, client: RelayClient) -> None:
        """Process one inbound audio chunk for a session.

        Every failure is reported to the client as a single error message;
        nothing raised here closes the socket. Chunks whose session closed
        while they waited for the lock are dropped.
        """
        entry = self._sessions.get(session_id) or self._open(session_id)
        async with entry.lock:
            if entry.closed:
                session_logger(logger, session_id).debug("Dropping chunk for closed session")
                return
            try:
                await self._process_chunk(session_id, entry, audio, client)
            except Exception:
                session_logger(logger, session_id).exception("Unexpected error processing audio")
                record_relay_error("internal")
                await self._send(client, error_message(PROCESSING_FAILED))

    async def _process_chunk(
        self, session_id: str, entry: _RelaySession, audio: bytes, client: RelayClient
    ) -> None:
        try:
            transcript = await self._stt.transcribe_chunk(audio)
        except STTServiceError as e:
            session_logger(logger, session_id).error(f"Transcription failed: {e}")
            record_chunk("error")
            record_relay_error("transcription")
            await self._send(client, error_message(str(e)))
            return

        if entry.closed:
            return
        if not transcript.has_speech:
            record_chunk("silent", transcript.latency_ms)
            return

        text = transcript.text or ""
        record_chunk("final" if transcript.is_final else "interim", transcript.latency_ms)
        await self._send(client, transcription_message(text, transcript.is_final))

        if transcript.is_final:
            await self._run_turn(session_id, entry, text, client)

    async def _run_turn(
        self, session_id: str, entry: _RelaySession, text: str, client: RelayClient
    ) -> None:
        """Complete, speak and persist one final transcript."""
        self._set_state(entry, RelayState.AWAITING_COMPLETION)
        llm_ms: float | None = None
        tts_ms: float | None = None

        try:
            agent = await self._load_agent(session_id)
            self._check_open(entry)

            self._store.ensure(session_id, system_prompt_for(agent, self._settings))
            self._store.append(session_id, Message(role=Role.USER, content=text))
            context = self._store.get(session_id) or []

            loop = asyncio.get_running_loop()
            started = loop.time()
            reply = await self._llm.complete(self._policy.apply(context))
            llm_ms = (loop.time() - started) * 1000
            self._check_open(entry)

            self._store.append(session_id, Message(role=Role.ASSISTANT, content=reply))
            session_logger(logger, session_id).info(f"Reply: {preview(reply)}")
            await self._send(client, response_message(reply))

            self._set_state(entry, RelayState.AWAITING_SYNTHESIS)
            synthesis = await self._tts.synthesize(
                reply,
                voice_id=agent.voice_id,
                voice_settings=agent.voice_settings,
            )
            tts_ms = synthesis.synthesis_ms
            self._check_open(entry)
            await self._send(client, audio_message(synthesis.to_base64()))

            await self._persist_turn(session_id, text, reply)

        except _TurnAbandoned:
            session_logger(logger, session_id).info("Turn abandoned: session closed")
            record_turn("abandoned")
        except TurnError as e:
            await self._fail_turn(session_id, client, e.stage, str(e))
        except LLMServiceError as e:
            await self._fail_turn(session_id, client, "completion", str(e))
        except TTSServiceError as e:
            await self._fail_turn(session_id, client, "synthesis", str(e))
        else:
            record_turn("completed", llm_latency_ms=llm_ms, tts_latency_ms=tts_ms)
        finally:
            self._set_state(entry, RelayState.IDLE)

    async def _load_agent(self, session_id: str) -> Agent:
        async with self._session_factory() as db:
            record = await AsyncVoiceChatSessionRepository(db).get(session_id)
            if record is None:
                raise TurnError("Session not found")
            agent = await AsyncAgentRepository(db).get(record.agent_id)
            if agent is None:
                raise TurnError("Agent not found")
        return agent

    async def _persist_turn(self, session_id: str, transcription: str, reply: str) -> None:
        try:
            async with self._session_factory() as db:
                await AsyncVoiceChatSessionRepository(db).update(
                    session_id,
                    transcription=transcription,
                    agent_response=reply,
                )
        except Exception as e:
            session_logger(logger, session_id).error(f"Failed to persist turn: {e}")
            raise TurnError("Failed to save conversation", stage="persistence") from e

    async def _fail_turn(
        self, session_id: str, client: RelayClient, stage: str, message: str
    ) -> None:
        session_logger(logger, session_id).error(f"Turn failed at {stage}: {message}")
        record_turn("failed")
        record_relay_error(stage)
        await self._send(client, error_message(message))

    @staticmethod
    def _check_open(entry: _RelaySession) -> None:
        if entry.closed:
            raise _TurnAbandoned()

    @staticmethod
    def _set_state(entry: _RelaySession, state: RelayState) -> None:
        if not entry.closed:
            entry.state = state

    async def _send(self, client: RelayClient, payload: dict[str, Any]) -> None:
        try:
            await client.send_json(payload)
        except Exception as e:
            logger.warning(f"Could not send {payload.get('type')} message: {e}")


# =============================================================================
# Process-wide instances
# =============================================================================

_store: InMemoryConversationStore | None = None
_relay: SessionRelay | None = None


def get_conversation_store() -> InMemoryConversationStore:
    """Shared conversation context cache."""
    global _store
    if _store is None:
        _store = InMemoryConversationStore()
    return _store


def get_session_relay() -> SessionRelay:
    """Relay wired to the configured providers, created on first use."""
    global _relay
    if _relay is None:
        settings = get_settings()
        _relay = SessionRelay(
            DeepgramService(settings),
            GroqService(settings),
            ElevenLabsTTSService(settings),
            get_conversation_store(),
            context_policy=ContextWindowPolicy(settings.context_max_messages),
            settings=settings,
        )
    return _relay
