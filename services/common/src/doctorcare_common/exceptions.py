"""Exceptions shared by the upload and processing paths."""

from uuid import UUID


class ConsentRequiredError(Exception):
    """Raised when an upload arrives without explicit recording consent."""

    def __init__(self, appointment_id: str | None = None):
        self.appointment_id = appointment_id
        super().__init__("Consent required before recording")


class KeyServiceError(Exception):
    """Raised when the key-management service is unreachable or denies a request."""

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Key service operation '{operation}' failed")


class AuthenticationError(Exception):
    """Raised when an encrypted blob fails its integrity check."""

    def __init__(self, reason: str, cause: Exception | None = None):
        self.reason = reason
        self.cause = cause
        super().__init__(f"Encrypted blob failed authentication: {reason}")


class StorageError(Exception):
    """Base class for blob storage failures."""

    def __init__(self, object_name: str, message: str, cause: Exception | None = None):
        self.object_name = object_name
        self.cause = cause
        super().__init__(message)


class StorageUploadError(StorageError):
    """Raised when file upload to storage fails."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        super().__init__(
            object_name, f"Failed to upload '{object_name}' to storage", cause
        )


class StorageDownloadError(StorageError):
    """Raised when downloading a file from storage fails."""

    def __init__(self, object_name: str, cause: Exception | None = None):
        super().__init__(
            object_name, f"Failed to download '{object_name}' from storage", cause
        )


class QueueError(Exception):
    """Raised when publishing a job or event to the message broker fails."""

    def __init__(self, routing_key: str, cause: Exception | None = None):
        self.routing_key = routing_key
        self.cause = cause
        super().__init__(f"Failed to publish message with routing key '{routing_key}'")


class PersistenceError(Exception):
    """Raised when reading or writing recording data in the database fails."""

    def __init__(self, recording_id: UUID | str, cause: Exception | None = None):
        self.recording_id = str(recording_id)
        self.cause = cause
        super().__init__(f"Failed to persist recording '{recording_id}' to database")


class RecordingNotFoundError(Exception):
    """Raised when a job references a recording that does not exist."""

    def __init__(self, recording_id: UUID | str):
        self.recording_id = str(recording_id)
        super().__init__(f"Recording {recording_id} not found")
