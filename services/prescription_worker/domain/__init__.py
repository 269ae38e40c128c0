"""Domain layer exports."""

from prescription_worker.domain.models import (
    GeneratedDraft,
    Medicine,
    PrescriptionDraft,
    ProcessingResult,
    Transcript,
    Utterance,
)
from prescription_worker.domain.prescription_drafter import PrescriptionDrafter
from prescription_worker.domain.transcript_builder import TranscriptBuilder

__all__ = [
    "GeneratedDraft",
    "Medicine",
    "PrescriptionDraft",
    "ProcessingResult",
    "Transcript",
    "Utterance",
    "PrescriptionDrafter",
    "TranscriptBuilder",
]
