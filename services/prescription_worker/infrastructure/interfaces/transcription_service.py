"""Abstract interface for transcription service operations."""

from abc import ABC, abstractmethod
from typing import BinaryIO

from prescription_worker.domain.models import Transcript


class TranscriptionService(ABC):
    """Abstract base class for audio transcription backends."""

    @abstractmethod
    def transcribe(self, audio: BinaryIO, recording_id: str) -> Transcript:
        """
        Transcribes audio held in memory.

        Args:
            audio: Decrypted audio as an in-memory binary stream.
            recording_id: Recording identifier, used for logging and errors.

        Returns:
            Transcript with text and speaker-labeled utterances.

        Raises:
            TranscriptionServiceError: If transcription fails.
        """
