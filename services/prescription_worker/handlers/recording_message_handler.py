"""Handler for processing transcription jobs."""

import io
import logging

from doctorcare_common import RecordingNotFoundError, RecordingStatus
from doctorcare_common.envelope import EnvelopeCipher
from doctorcare_common.infrastructure.interfaces import StorageClient
from doctorcare_common.messages import TranscriptionJob
from doctorcare_common.repositories import RecordingRepository

from prescription_worker.domain import (
    PrescriptionDrafter,
    ProcessingResult,
    TranscriptBuilder,
)
from prescription_worker.infrastructure.interfaces import TranscriptionService

logger = logging.getLogger(__name__)


class RecordingMessageHandler:
    """Orchestrates decrypt, transcribe, draft and persist for one recording."""

    def __init__(
        self,
        cipher: EnvelopeCipher,
        storage: StorageClient,
        transcription_service: TranscriptionService,
        drafter: PrescriptionDrafter,
        repository: RecordingRepository,
        bucket_name: str,
        transcript_builder: TranscriptBuilder | None = None,
    ):
        self._cipher = cipher
        self._storage = storage
        self._transcription_service = transcription_service
        self._drafter = drafter
        self._repository = repository
        self._bucket_name = bucket_name
        self._transcript_builder = transcript_builder or TranscriptBuilder()

    def process(self, job: TranscriptionJob) -> ProcessingResult:
        """
        Processes a transcription job end to end.

        Safe to run more than once for the same job: a recording that is no
        longer ``uploaded`` is skipped, and the final write is conditional on
        the status inside its own transaction.

        Args:
            job: The dequeued job with recording id, storage key and wrapped key.

        Returns:
            ProcessingResult, with ``skipped`` set when nothing was written.

        Raises:
            RecordingNotFoundError: If the recording row does not exist.
            KeyServiceError: If the data key cannot be unwrapped.
            StorageDownloadError: If the ciphertext download fails.
            AuthenticationError: If the ciphertext fails its integrity check.
            TranscriptionServiceError: If transcription fails.
            SummaryServiceError: If drafting fails or the draft is malformed.
            PersistenceError: If the atomic write fails.
        """
        recording_id = str(job.recording_id)
        logger.info(
            "Processing recording",
            extra={"recording_id": recording_id, "object_name": job.storage_key},
        )

        recording = self._repository.get_recording(job.recording_id)
        if recording is None:
            raise RecordingNotFoundError(job.recording_id)

        if recording.status != RecordingStatus.UPLOADED:
            logger.info(
                "Recording already processed, skipping",
                extra={"recording_id": recording_id, "status": recording.status.value},
            )
            return ProcessingResult(
                recording_id=job.recording_id,
                appointment_id=recording.appointment_id,
                skipped=True,
            )

        key = self._cipher.unwrap_key(job.wrapped_key)
        blob = self._storage.download(self._bucket_name, job.storage_key)
        audio = self._cipher.decrypt(key, blob)

        transcript = self._transcription_service.transcribe(
            io.BytesIO(audio), recording_id
        )
        transcript_text = self._transcript_builder.build(transcript)

        generated = self._drafter.draft(transcript_text, job.recording_id)

        written = self._repository.save_transcription(
            recording_id=job.recording_id,
            transcript=transcript_text,
            draft_text=generated.raw_text,
            structured=generated.draft.model_dump(mode="json"),
        )

        logger.info(
            "Recording processed",
            extra={"recording_id": recording_id, "draft_written": written},
        )

        return ProcessingResult(
            recording_id=job.recording_id,
            appointment_id=recording.appointment_id,
            skipped=not written,
        )
