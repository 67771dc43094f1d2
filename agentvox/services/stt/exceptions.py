"""Custom exceptions for STT services."""


class STTServiceError(Exception):
    """Base exception for STT service errors."""

    pass


class STTConnectionError(STTServiceError):
    """Raised when unable to connect to the STT provider."""

    pass


class STTProviderError(STTServiceError):
    """Raised when the provider answers with a non-success status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code
