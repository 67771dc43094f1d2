"""Prometheus metrics for the agentvox voice relay.

Provides metrics for monitoring turn outcomes, provider latency, and
live session counts.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram, generate_latest
from prometheus_client.exposition import CONTENT_TYPE_LATEST

# =============================================================================
# Counters
# =============================================================================

TURN_TOTAL = Counter(
    "agentvox_turn_total",
    "Final-transcript turns handled by the relay",
    ["outcome"],
)

RELAY_ERRORS = Counter(
    "agentvox_relay_errors_total",
    "Errors reported to clients, by pipeline stage",
    ["stage"],
)

CHUNKS_TOTAL = Counter(
    "agentvox_chunks_total",
    "Audio chunks received, by transcription result",
    ["result"],
)

# =============================================================================
# Gauges
# =============================================================================

ACTIVE_SESSIONS = Gauge(
    "agentvox_active_sessions",
    "Transcription sockets currently open",
)

# =============================================================================
# Histograms
# =============================================================================

SESSION_DURATION = Histogram(
    "agentvox_session_duration_seconds",
    "Voice chat session duration in seconds",
    buckets=[10, 30, 60, 120, 300, 600, 900, 1800],
)

STT_LATENCY = Histogram(
    "agentvox_stt_latency_seconds",
    "Per-chunk transcription round trip",
    buckets=[0.1, 0.25, 0.5, 0.75, 1.0, 1.5, 2.0, 3.0, 5.0],
)

LLM_LATENCY = Histogram(
    "agentvox_llm_latency_seconds",
    "Completion round trip",
    buckets=[0.1, 0.25, 0.5, 0.75, 1.0, 1.5, 2.0, 3.0, 5.0, 10.0],
)

TTS_LATENCY = Histogram(
    "agentvox_tts_latency_seconds",
    "Speech synthesis round trip",
    buckets=[0.1, 0.25, 0.5, 0.75, 1.0, 1.5, 2.0, 3.0, 5.0],
)

# =============================================================================
# Helper Functions
# =============================================================================


def record_chunk(result: str, stt_latency_ms: float | None = None) -> None:
    """Record one received audio chunk.

    Args:
        result: silent, interim, final, or error
        stt_latency_ms: Transcription latency in milliseconds
    """
    CHUNKS_TOTAL.labels(result=result).inc()
    if stt_latency_ms is not None and stt_latency_ms > 0:
        STT_LATENCY.observe(stt_latency_ms / 1000)


def record_turn(
    outcome: str,
    *,
    llm_latency_ms: float | None = None,
    tts_latency_ms: float | None = None,
) -> None:
    """Record a finished (or abandoned) turn.

    Args:
        outcome: completed, failed, or abandoned (session closed mid-turn)
        llm_latency_ms: Completion latency in milliseconds
        tts_latency_ms: Synthesis latency in milliseconds
    """
    TURN_TOTAL.labels(outcome=outcome).inc()

    if llm_latency_ms is not None and llm_latency_ms > 0:
        LLM_LATENCY.observe(llm_latency_ms / 1000)

    if tts_latency_ms is not None and tts_latency_ms > 0:
        TTS_LATENCY.observe(tts_latency_ms / 1000)


def record_relay_error(stage: str) -> None:
    """Count an error message sent to a client."""
    RELAY_ERRORS.labels(stage=stage).inc()


def record_session_closed(duration_seconds: float | None) -> None:
    """Record a session leaving the relay."""
    if duration_seconds is not None and duration_seconds >= 0:
        SESSION_DURATION.observe(duration_seconds)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output.

    Returns:
        Metrics in Prometheus text exposition format.
    """
    return generate_latest()


def get_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST
