"""Observability module for metrics."""

from agentvox.observability.metrics import (
    ACTIVE_SESSIONS,
    CHUNKS_TOTAL,
    LLM_LATENCY,
    RELAY_ERRORS,
    SESSION_DURATION,
    STT_LATENCY,
    TTS_LATENCY,
    TURN_TOTAL,
    get_content_type,
    get_metrics,
    record_chunk,
    record_relay_error,
    record_session_closed,
    record_turn,
)

__all__ = [
    "TURN_TOTAL",
    "RELAY_ERRORS",
    "CHUNKS_TOTAL",
    "ACTIVE_SESSIONS",
    "SESSION_DURATION",
    "STT_LATENCY",
    "LLM_LATENCY",
    "TTS_LATENCY",
    "record_chunk",
    "record_turn",
    "record_relay_error",
    "record_session_closed",
    "get_metrics",
    "get_content_type",
]
