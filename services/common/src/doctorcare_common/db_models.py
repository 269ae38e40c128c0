from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column, LargeBinary, Text
from sqlmodel import Field, Relationship, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecordingStatus(str, Enum):
    UPLOADED = "uploaded"
    TRANSCRIBED = "transcribed"
    FAILED = "failed"


class Recording(SQLModel, table=True):
    __tablename__ = "recordings"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    appointment_id: str = Field(max_length=255, index=True)
    storage_key: str = Field(max_length=1024)
    encrypted_data_key: bytes = Field(sa_column=Column(LargeBinary, nullable=False))
    length_seconds: float = 0.0
    created_by: str = Field(max_length=255)
    status: RecordingStatus = Field(default=RecordingStatus.UPLOADED, index=True)
    transcript: Optional[str] = Field(default=None, sa_column=Column(Text))
    failure_reason: Optional[str] = Field(default=None, max_length=1024)
    reconcile_attempts: int = 0
    # set when the ciphertext failed authentication; excluded from the stale sweep
    quarantined_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    prescription: Optional["AIPrescription"] = Relationship(
        back_populates="recording", sa_relationship_kwargs={"uselist": False}
    )


class AIPrescription(SQLModel, table=True):
    __tablename__ = "ai_prescriptions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    # one draft per recording; a redelivered job cannot insert a second row
    recording_id: UUID = Field(foreign_key="recordings.id", unique=True)
    appointment_id: Optional[str] = Field(default=None, max_length=255)
    generated_by: str = Field(default="ai", max_length=32)
    draft_text: str = Field(sa_column=Column(Text, nullable=False))
    structured: dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utcnow)

    recording: Recording = Relationship(back_populates="prescription")
