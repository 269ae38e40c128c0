"""AssemblyAI implementation of the TranscriptionService interface."""

import logging
from typing import BinaryIO

import assemblyai as aai

from prescription_worker.domain.models import Transcript, Utterance
from prescription_worker.exceptions import TranscriptionServiceError

from .interfaces import TranscriptionService

logger = logging.getLogger(__name__)


class AssemblyAITranscriber(TranscriptionService):
    """Handles audio transcription using AssemblyAI."""

    def __init__(self, transcriber: aai.Transcriber):
        self._transcriber = transcriber

    def transcribe(self, audio: BinaryIO, recording_id: str) -> Transcript:
        """
        Transcribes an in-memory audio stream with AssemblyAI.

        The SDK uploads the stream directly, so decrypted audio never touches
        the local filesystem.
        """
        try:
            transcription = self._transcriber.transcribe(audio)
        except Exception as e:
            logger.exception(
                "AssemblyAI transcription failed", extra={"recording_id": recording_id}
            )
            raise TranscriptionServiceError(recording_id, e) from e

        if transcription.status == aai.TranscriptStatus.error:
            logger.error(
                "AssemblyAI returned an error status",
                extra={"recording_id": recording_id, "error": transcription.error},
            )
            raise TranscriptionServiceError(
                recording_id, Exception(transcription.error)
            )

        if transcription.text is None:
            raise TranscriptionServiceError(
                recording_id, Exception("Transcription returned no text")
            )

        utterances = [
            Utterance(speaker=u.speaker, text=u.text)
            for u in (transcription.utterances or [])
        ]

        logger.info(
            "Audio transcription successful",
            extra={"recording_id": recording_id, "utterance_count": len(utterances)},
        )
        return Transcript(text=transcription.text, utterances=utterances)
