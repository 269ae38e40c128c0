"""Response models for the recording upload API."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    """Response returned after a recording is stored and queued."""

    model_config = ConfigDict(populate_by_name=True)

    recording_id: UUID = Field(alias="recordingId")
    message: str
