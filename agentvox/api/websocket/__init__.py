"""WebSocket handlers for real-time voice chat.

- transcription_endpoint: audio in, transcript/reply/audio out
"""

from agentvox.api.websocket.transcription import (
    SESSION_ID_REQUIRED,
    router,
    transcription_endpoint,
)

__all__ = [
    "router",
    "transcription_endpoint",
    "SESSION_ID_REQUIRED",
]
