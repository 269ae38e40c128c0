"""Domain models for the prescription worker."""

from uuid import UUID

from pydantic import BaseModel, field_validator


class Utterance(BaseModel, frozen=True):
    """A single speaker utterance from transcription."""

    speaker: str
    text: str


class Transcript(BaseModel, frozen=True):
    """Speech-to-text output for one recording."""

    text: str
    utterances: list[Utterance] = []


class Medicine(BaseModel):
    """A single medication recommendation."""

    name: str
    dose: str
    frequency: str
    duration: str

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("medicine name must not be empty")
        return value


class PrescriptionDraft(BaseModel):
    """
    Structured prescription draft the doctor reviews before signing.

    Also passed to Gemini as the response schema, so field constraints are
    expressed as validators rather than JSON-schema keywords.
    """

    diagnosis: str
    symptoms: list[str]
    medicines: list[Medicine]
    advice: str
    follow_up_days: int | None = None

    @field_validator("follow_up_days")
    @classmethod
    def _non_negative(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            raise ValueError("follow_up_days must not be negative")
        return value


class GeneratedDraft(BaseModel, frozen=True):
    """Validated draft together with the raw model output it came from."""

    raw_text: str
    draft: PrescriptionDraft


class ProcessingResult(BaseModel, frozen=True):
    """Outcome of processing one transcription job."""

    recording_id: UUID
    appointment_id: str | None = None
    skipped: bool = False
