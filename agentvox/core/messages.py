"""JSON messages sent to the browser over the transcription socket."""

from __future__ import annotations

from typing import Any


def transcription_message(text: str, is_final: bool) -> dict[str, Any]:
    return {"type": "transcription", "text": text, "isFinal": is_final}


def response_message(text: str) -> dict[str, Any]:
    return {"type": "response", "text": text}


def audio_message(audio_base64: str) -> dict[str, Any]:
    """Synthesized reply; ``audio`` is base64-encoded MPEG."""
    return {"type": "audio", "audio": audio_base64}


def error_message(error: str) -> dict[str, Any]:
    return {"type": "error", "error": error}
