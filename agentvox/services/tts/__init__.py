"""Text-to-Speech services (ElevenLabs).

Turns agent replies into MPEG audio and lists the available voices.
"""

from agentvox.services.tts.elevenlabs import ElevenLabsTTSService
from agentvox.services.tts.exceptions import (
    TTSConnectionError,
    TTSServiceError,
    TTSSynthesisError,
    TTSVoiceNotConfiguredError,
)
from agentvox.services.tts.protocol import (
    SynthesisResult,
    TTSService,
    VoiceInfo,
    VoiceSettings,
)

__all__ = [
    # Services
    "ElevenLabsTTSService",
    # Protocol
    "TTSService",
    # Data types
    "SynthesisResult",
    "VoiceInfo",
    "VoiceSettings",
    # Exceptions
    "TTSServiceError",
    "TTSSynthesisError",
    "TTSConnectionError",
    "TTSVoiceNotConfiguredError",
]
