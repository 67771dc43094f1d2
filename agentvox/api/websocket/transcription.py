"""WebSocket handler for browser voice chat.

Protocol:
- Client sends binary frames, each an opus/webm audio chunk
- Server sends JSON text frames: transcription, response, audio, error
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status

from agentvox.core.relay import SessionRelay, get_session_relay
from agentvox.logging_config import get_logger, session_logger

logger: Any = get_logger(__name__)

router = APIRouter()

SESSION_ID_REQUIRED = "Session ID required"


@router.websocket("/ws/transcription")
@router.websocket("/ws/transcription/")
async def transcription_without_session(websocket: WebSocket) -> None:
    """Refuse sockets that carry no session id."""
    logger.warning("Rejected transcription socket without session id")
    await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=SESSION_ID_REQUIRED)


@router.websocket("/ws/transcription/{session_id}")
async def transcription_endpoint(
    websocket: WebSocket,
    session_id: str,
    relay: SessionRelay = Depends(get_session_relay),
) -> None:
    """Relay audio chunks for one voice chat session."""
    session_id = session_id.strip()
    if not session_id:
        await transcription_without_session(websocket)
        return

    await websocket.accept()
    relay.connect(session_id)
    log = session_logger(logger, session_id)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break

            audio = message.get("bytes")
            if audio:
                await relay.handle_chunk(session_id, audio, websocket)
            elif message.get("text") is not None:
                log.debug("Ignoring text frame")

    except WebSocketDisconnect:
        pass

    except Exception as e:
        log.error(f"WebSocket error: {e}")

    finally:
        log.info("Transcription socket closed")
        await relay.disconnect(session_id)
