"""Domain models for the recording upload service."""

from uuid import UUID

from pydantic import BaseModel, Field


class UploadRequest(BaseModel, frozen=True):
    """An authenticated upload of consultation audio."""

    audio: bytes = Field(repr=False)
    consent: str | bool | None = None
    appointment_id: str
    created_by: str
    length_seconds: float = 0.0
    file_name: str = ""

    @property
    def has_consent(self) -> bool:
        return self.consent is True or self.consent == "true"


class UploadResult(BaseModel, frozen=True):
    """Acknowledgement for a stored and queued recording."""

    recording_id: UUID
    message: str = "Uploaded and queued for transcription"
