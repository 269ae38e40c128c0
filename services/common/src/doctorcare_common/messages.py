"""Queue payloads exchanged between the upload service and the worker."""

import base64
import binascii
from uuid import UUID

from pydantic import BaseModel, field_validator

from doctorcare_common.db_models import Recording


class TranscriptionJob(BaseModel, frozen=True):
    """
    A transcription request carried over the durable queue.

    Holds identifiers and the KMS-wrapped data key only; the plaintext key and
    the audio never travel through the broker.
    """

    recording_id: UUID
    storage_key: str
    encrypted_data_key: str

    @field_validator("encrypted_data_key")
    @classmethod
    def _must_be_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise ValueError("encrypted_data_key must be base64") from e
        if not value:
            raise ValueError("encrypted_data_key must not be empty")
        return value

    @property
    def wrapped_key(self) -> bytes:
        return base64.b64decode(self.encrypted_data_key)

    @classmethod
    def for_recording(cls, recording: Recording) -> "TranscriptionJob":
        """Derives the job payload from a persisted recording row."""
        return cls(
            recording_id=recording.id,
            storage_key=recording.storage_key,
            encrypted_data_key=base64.b64encode(recording.encrypted_data_key).decode(
                "ascii"
            ),
        )

    def to_payload(self) -> dict:
        return self.model_dump(mode="json")
