"""Custom exceptions for the prescription worker."""


class TranscriptionServiceError(Exception):
    """Raised when the speech-to-text call fails."""

    def __init__(self, recording_id: str, cause: Exception | None = None):
        self.recording_id = recording_id
        self.cause = cause
        super().__init__(f"Failed to transcribe recording '{recording_id}'")


class SummaryServiceError(Exception):
    """Raised when the LLM call fails or returns a draft that does not match the schema."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


class CacheServiceError(Exception):
    """Raised when cache operations fail."""

    def __init__(self, key: str, operation: str, cause: Exception | None = None):
        self.key = key
        self.operation = operation
        self.cause = cause
        super().__init__(f"Cache {operation} failed for key '{key}'")
