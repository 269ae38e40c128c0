"""Re-enqueues recordings whose transcription job never reached the worker."""

import logging
import time
from datetime import timedelta

from doctorcare_common import PersistenceError, QueueError
from doctorcare_common.db_models import utcnow
from doctorcare_common.infrastructure.interfaces import MessagePublisher
from doctorcare_common.messages import TranscriptionJob
from doctorcare_common.repositories import RecordingRepository

from prescription_worker.config import ReconcileConfig

logger = logging.getLogger(__name__)


class RecordingReconciler:
    """
    Sweeps for recordings stuck in ``uploaded`` and publishes their job again.

    The upload path commits the row before publishing, so a lost publish
    leaves a row with no job. Jobs are rebuilt from the row, and the consumer
    is idempotent, so re-enqueueing a recording that is merely slow is harmless.
    """

    def __init__(
        self,
        repository: RecordingRepository,
        publisher: MessagePublisher,
        routing_key: str,
        config: ReconcileConfig,
    ):
        self._repository = repository
        self._publisher = publisher
        self._routing_key = routing_key
        self._config = config

    def sweep(self) -> int:
        """
        Re-enqueues one batch of stale recordings.

        Returns:
            Number of jobs published.
        """
        cutoff = utcnow() - timedelta(seconds=self._config.stale_after_seconds)
        stale = self._repository.find_stale_uploaded(
            older_than=cutoff,
            max_attempts=self._config.max_attempts,
            limit=self._config.batch_size,
        )

        published = 0
        for recording in stale:
            job = TranscriptionJob.for_recording(recording)
            try:
                self._publisher.publish(
                    routing_key=self._routing_key, payload=job.to_payload()
                )
                self._repository.record_reconcile_attempt(recording.id)
            except (QueueError, PersistenceError):
                logger.exception(
                    "Failed to re-enqueue recording",
                    extra={"recording_id": str(recording.id)},
                )
                continue

            published += 1
            logger.info(
                "Recording re-enqueued",
                extra={
                    "recording_id": str(recording.id),
                    "attempt": recording.reconcile_attempts + 1,
                },
            )

        logger.info(
            "Reconciliation sweep complete",
            extra={"stale": len(stale), "published": published},
        )
        return published

    def run_forever(self) -> None:
        """Runs a sweep every ``interval_seconds`` until the process stops."""
        logger.info(
            "Reconciler started",
            extra={"interval_seconds": self._config.interval_seconds},
        )
        while True:
            try:
                self.sweep()
            except PersistenceError:
                logger.exception("Reconciliation sweep failed")
            time.sleep(self._config.interval_seconds)
