"""Voice chat session creation.

The browser creates a session here, then opens
/ws/transcription/{sessionId} and starts streaming audio.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import Field, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agentvox.api.schemas import CamelModel, describe_validation_error
from agentvox.config import Settings, get_settings
from agentvox.core.context import ConversationStore
from agentvox.core.relay import get_conversation_store, system_prompt_for
from agentvox.db.models import utcnow
from agentvox.db.repositories import (
    AsyncAgentRepository,
    AsyncUserRepository,
    AsyncVoiceChatSessionRepository,
)
from agentvox.db.session import get_session
from agentvox.logging_config import get_logger

logger: Any = get_logger(__name__)

router = APIRouter()

CREATE_FAILED = "Failed to create session"


# =============================================================================
# Request/Response Schemas
# =============================================================================


class VoiceChatCreate(CamelModel):
    """Body of POST /api/voice-chat."""

    user_id: int = Field(ge=1)
    agent_id: int = Field(ge=1)
    voice_id: str | None = None


class VoiceChatCreated(CamelModel):
    """Identifier the client uses to open the transcription socket."""

    session_id: str


def _failed(details: str) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": CREATE_FAILED, "details": details},
    )


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/voice-chat", status_code=201, response_model=VoiceChatCreated)
async def create_voice_chat_session(
    request: Request,
    session: AsyncSession = Depends(get_session),
    store: ConversationStore = Depends(get_conversation_store),
    settings: Settings = Depends(get_settings),
) -> VoiceChatCreated | JSONResponse:
    """Create an active session and seed its conversation context."""
    try:
        body = await request.json()
        payload = VoiceChatCreate.model_validate(body)
    except ValueError as e:
        details = (
            describe_validation_error(e)
            if isinstance(e, ValidationError)
            else "Request body must be JSON"
        )
        logger.warning(f"Rejected voice chat request: {details}")
        return _failed(details)

    try:
        user = await AsyncUserRepository(session).get(payload.user_id)
        if user is None:
            return _failed("User not found")

        agent = await AsyncAgentRepository(session).get(payload.agent_id)
        if agent is None:
            return _failed("Agent not found")

        record = await AsyncVoiceChatSessionRepository(session).create(
            user_id=payload.user_id,
            agent_id=payload.agent_id,
            metadata={
                "userAgent": request.headers.get("user-agent"),
                "createdAt": utcnow().isoformat(),
                "voiceId": payload.voice_id,
            },
        )
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Failed to persist voice chat session: {e}")
        return _failed("Could not save session")

    store.ensure(record.session_id, system_prompt_for(agent, settings))
    logger.info(
        f"Created voice chat session {record.session_id} "
        f"(user={payload.user_id}, agent={payload.agent_id})"
    )
    return VoiceChatCreated(session_id=record.session_id)
