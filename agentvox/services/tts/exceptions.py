"""Custom exceptions for TTS services."""


class TTSServiceError(Exception):
    """Base exception for TTS service errors."""

    pass


class TTSVoiceNotConfiguredError(TTSServiceError):
    """Raised when the agent has no voice selected."""

    def __init__(self, message: str = "No voice selected for agent") -> None:
        super().__init__(message)


class TTSSynthesisError(TTSServiceError):
    """Raised when the provider rejects a synthesis request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TTSConnectionError(TTSServiceError):
    """Raised when unable to reach the TTS provider."""

    pass
