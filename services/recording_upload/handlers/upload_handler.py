"""Handler for storing uploaded recordings and queueing their transcription."""

import io
import logging
import os
import re
from datetime import datetime, timezone
from uuid import UUID, uuid4

from doctorcare_common import ConsentRequiredError, PersistenceError, Recording, StorageError
from doctorcare_common.envelope import EnvelopeCipher
from doctorcare_common.infrastructure.interfaces import MessagePublisher, StorageClient
from doctorcare_common.messages import TranscriptionJob
from doctorcare_common.repositories import RecordingRepository

from recording_upload.domain import UploadRequest, UploadResult

logger = logging.getLogger(__name__)

_EXTENSION_PATTERN = re.compile(r"^\.[a-z0-9]{1,8}$")


class RecordingUploadHandler:
    """Orchestrates encrypt, store, persist and enqueue for one upload."""

    def __init__(
        self,
        cipher: EnvelopeCipher,
        storage: StorageClient,
        repository: RecordingRepository,
        publisher: MessagePublisher,
        bucket_name: str,
        routing_key: str,
    ):
        self._cipher = cipher
        self._storage = storage
        self._repository = repository
        self._publisher = publisher
        self._bucket_name = bucket_name
        self._routing_key = routing_key

    def upload(self, request: UploadRequest) -> UploadResult:
        """
        Encrypts and stores a recording, then queues it for transcription.

        The metadata row is committed before the job is published, so a
        failed publish leaves an ``uploaded`` row that the reconciliation
        sweep can re-enqueue.

        Args:
            request: The upload with audio bytes, consent and appointment.

        Returns:
            UploadResult with the new recording id.

        Raises:
            ConsentRequiredError: If consent was not explicitly given.
            KeyServiceError: If a data key cannot be generated.
            StorageUploadError: If the ciphertext upload fails.
            PersistenceError: If the recording row cannot be written.
            QueueError: If the transcription job cannot be published.
        """
        if not request.has_consent:
            logger.info(
                "Upload rejected without consent",
                extra={"appointment_id": request.appointment_id},
            )
            raise ConsentRequiredError(request.appointment_id)

        recording_id = uuid4()
        object_name = self._object_name(recording_id, request.file_name)

        logger.info(
            "Received upload request",
            extra={
                "recording_id": str(recording_id),
                "appointment_id": request.appointment_id,
                "object_name": object_name,
                "size": len(request.audio),
            },
        )

        data_key = self._cipher.wrap_new_key()
        payload = self._cipher.encrypt(data_key.plaintext, request.audio).to_bytes()

        self._storage.upload(
            bucket_name=self._bucket_name,
            object_name=object_name,
            data=io.BytesIO(payload),
            size=len(payload),
            content_type="application/octet-stream",
        )

        recording = Recording(
            id=recording_id,
            appointment_id=request.appointment_id,
            storage_key=object_name,
            encrypted_data_key=data_key.wrapped,
            length_seconds=request.length_seconds,
            created_by=request.created_by,
        )
        try:
            self._repository.create_recording(recording)
        except PersistenceError:
            self._discard_orphan(object_name)
            raise

        job = TranscriptionJob.for_recording(recording)
        self._publisher.publish(routing_key=self._routing_key, payload=job.to_payload())

        logger.info(
            "Recording uploaded and queued",
            extra={"recording_id": str(recording_id), "object_name": object_name},
        )
        return UploadResult(recording_id=recording_id)

    def _object_name(self, recording_id: UUID, file_name: str) -> str:
        """Builds ``recordings/YYYY/MM/DD/<id>/audio<ext>.enc``."""
        extension = os.path.splitext(file_name or "")[1].lower()
        if not _EXTENSION_PATTERN.match(extension):
            extension = ""
        today = datetime.now(timezone.utc)
        return f"recordings/{today:%Y/%m/%d}/{recording_id}/audio{extension}.enc"

    def _discard_orphan(self, object_name: str) -> None:
        try:
            self._storage.remove(self._bucket_name, object_name)
        except StorageError:
            logger.exception(
                "Failed to remove orphaned blob", extra={"object_name": object_name}
            )
