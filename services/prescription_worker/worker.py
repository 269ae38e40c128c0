"""Worker that handles queue message consumption and orchestration."""

import logging
from typing import Any

from doctorcare_common import (
    AuthenticationError,
    PersistenceError,
    QueueError,
    RabbitMQConfig,
    RecordingNotFoundError,
)
from doctorcare_common.infrastructure.interfaces import MessageBroker
from doctorcare_common.messages import TranscriptionJob
from doctorcare_common.rabbitmq import RETRY_COUNT_HEADER
from doctorcare_common.repositories import RecordingRepository
from pydantic import ValidationError

from prescription_worker.domain import ProcessingResult
from prescription_worker.exceptions import SummaryServiceError, TranscriptionServiceError
from prescription_worker.handlers import RecordingMessageHandler

logger = logging.getLogger(__name__)

# never retried: tampered or mismatched ciphertext, or a job for a missing row
FATAL_ERRORS = (AuthenticationError, RecordingNotFoundError)
# retried with a growing delay up to max_delivery_count, then the recording is marked failed
EXTERNAL_SERVICE_ERRORS = (TranscriptionServiceError, SummaryServiceError)


class Worker:
    """Consumes transcription jobs and maps their outcome to ack, requeue or dead-letter."""

    def __init__(
        self,
        broker: MessageBroker,
        handler: RecordingMessageHandler,
        repository: RecordingRepository,
        config: RabbitMQConfig,
    ):
        self._broker = broker
        self._handler = handler
        self._repository = repository
        self._config = config

    def start(self) -> None:
        """Starts consuming messages from the queue."""
        logger.info("Worker initialized, starting message consumption")
        self._broker.consume(self._on_message)

    def _on_message(
        self, body: bytes, delivery_tag: int, headers: dict[str, Any] | None
    ) -> None:
        """Callback for each received message."""
        attempt = self._attempt(headers)
        max_attempts = self._config.queue_config.max_delivery_count

        logger.info(
            "Message received",
            extra={"attempt": attempt, "max_attempts": max_attempts},
        )

        try:
            job = TranscriptionJob.model_validate_json(body)
        except ValidationError as e:
            logger.exception("Invalid message format", extra={"error": str(e)})
            self._broker.dead_letter(delivery_tag)
            return

        recording_id = str(job.recording_id)

        try:
            result = self._handler.process(job)
        except FATAL_ERRORS as e:
            logger.critical(
                "Recording needs manual investigation, dead-lettering job",
                exc_info=True,
                extra={"recording_id": recording_id},
            )
            if isinstance(e, AuthenticationError):
                self._quarantine(job, e)
            self._broker.dead_letter(delivery_tag)
            return
        except EXTERNAL_SERVICE_ERRORS as e:
            if attempt < max_attempts:
                logger.warning(
                    "External service failed, scheduling retry",
                    exc_info=True,
                    extra={"recording_id": recording_id, "attempt": attempt},
                )
                self._retry_later(body, attempt, delivery_tag)
                return
            self._give_up(job, e, delivery_tag)
            return
        except Exception:
            logger.exception(
                "Message processing failed",
                extra={"recording_id": recording_id, "attempt": attempt},
            )
            self._broker.reject(delivery_tag)
            return

        self._broker.acknowledge(delivery_tag)
        logger.info(
            "Message processed successfully",
            extra={"recording_id": recording_id, "skipped": result.skipped},
        )

        if not result.skipped:
            self._notify(result)

    def _give_up(self, job: TranscriptionJob, error: Exception, delivery_tag: int) -> None:
        """Marks the recording failed after the last attempt and dead-letters the job."""
        try:
            self._repository.mark_failed(job.recording_id, str(error))
        except PersistenceError:
            # status still uploaded; let the queue's delivery limit handle it
            self._broker.reject(delivery_tag)
            return

        logger.error(
            "Attempts exhausted, recording marked failed",
            extra={"recording_id": str(job.recording_id), "error": str(error)},
        )
        self._broker.dead_letter(delivery_tag)

    def _retry_later(self, body: bytes, attempt: int, delivery_tag: int) -> None:
        """Republishes the job to the delay queue for this attempt, then acks the original."""
        delays = self._config.queue_config.retry_delays_seconds
        delay_seconds = delays[min(attempt, len(delays)) - 1]
        try:
            self._broker.retry_later(body, retry_count=attempt, delay_seconds=delay_seconds)
        except QueueError:
            # immediate redelivery still counts against the delivery limit
            self._broker.reject(delivery_tag)
            return
        self._broker.acknowledge(delivery_tag)

    def _quarantine(self, job: TranscriptionJob, error: Exception) -> None:
        """Takes the recording out of the reconciliation sweep."""
        try:
            self._repository.quarantine(job.recording_id, str(error))
        except PersistenceError:
            logger.error(
                "Recording could not be quarantined",
                extra={"recording_id": str(job.recording_id)},
            )

    def _notify(self, result: ProcessingResult) -> None:
        """Publishes a draft-created event for downstream notification consumers."""
        try:
            self._broker.publish(
                routing_key=self._config.queue_config.success_routing_key,
                payload={
                    "recording_id": str(result.recording_id),
                    "appointment_id": result.appointment_id,
                },
            )
        except QueueError:
            logger.warning(
                "Draft notification not published",
                extra={"recording_id": str(result.recording_id)},
            )

    @staticmethod
    def _attempt(headers: dict[str, Any] | None) -> int:
        """
        Returns the 1-based attempt number.

        Counts the delayed retries already scheduled plus the quorum queue's
        redeliveries of the current copy.
        """
        if not headers:
            return 1
        retries = int(headers.get(RETRY_COUNT_HEADER, 0))
        delivery_count = int(headers.get("x-delivery-count", 0))
        return retries + delivery_count + 1
