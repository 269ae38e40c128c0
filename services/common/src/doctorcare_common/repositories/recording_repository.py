"""Repository for recording and prescription draft persistence."""

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from doctorcare_common.db_models import (
    AIPrescription,
    Recording,
    RecordingStatus,
    utcnow,
)
from doctorcare_common.exceptions import PersistenceError, RecordingNotFoundError

logger = logging.getLogger(__name__)


class RecordingRepository:
    """
    Handles database operations for recordings and their AI drafts.

    Encapsulates SQL queries and transaction management,
    keeping the orchestration layer free of database concerns.
    """

    def __init__(self, session_factory):
        """
        Initializes the repository.

        Args:
            session_factory: Callable that returns a SQLModel Session context manager.
        """
        self._session_factory = session_factory

    def create_recording(self, recording: Recording) -> Recording:
        """
        Inserts a new recording row and commits it.

        Nothing runs after the commit, so a PersistenceError always means the
        row was not written.

        Raises:
            PersistenceError: If the insert fails.
        """
        try:
            with self._session_factory() as db_session:
                # keep the loaded attributes usable after the session closes
                db_session.expire_on_commit = False
                db_session.add(recording)
                db_session.commit()
        except Exception as e:
            logger.exception(
                "Failed to create recording", extra={"recording_id": str(recording.id)}
            )
            raise PersistenceError(recording.id, cause=e) from e

        logger.info(
            "Recording created",
            extra={
                "recording_id": str(recording.id),
                "appointment_id": recording.appointment_id,
            },
        )
        return recording

    def get_recording(self, recording_id: UUID) -> Recording | None:
        """
        Loads a recording by id.

        Raises:
            PersistenceError: If the query fails.
        """
        try:
            with self._session_factory() as db_session:
                return db_session.get(Recording, recording_id)
        except Exception as e:
            logger.exception(
                "Failed to load recording", extra={"recording_id": str(recording_id)}
            )
            raise PersistenceError(recording_id, cause=e) from e

    def save_transcription(
        self,
        recording_id: UUID,
        transcript: str,
        draft_text: str,
        structured: dict[str, Any],
    ) -> bool:
        """
        Stores the transcript, the AI draft and the status transition atomically.

        The recording row is locked and its status re-checked inside the
        transaction, and the unique constraint on ``ai_prescriptions.recording_id``
        rejects a concurrent duplicate, so a redelivered job never produces a
        second draft.

        Args:
            recording_id: The recording being completed.
            transcript: Transcript text from the speech-to-text service.
            draft_text: Raw model output.
            structured: The validated draft as a JSON-compatible dict.

        Returns:
            True if the draft was written, False if the recording was already
            processed.

        Raises:
            RecordingNotFoundError: If the recording does not exist.
            PersistenceError: If the transaction fails.
        """
        try:
            with self._session_factory() as db_session:
                recording = self._lock_recording(db_session, recording_id)
                if recording is None:
                    raise RecordingNotFoundError(recording_id)

                if recording.status != RecordingStatus.UPLOADED:
                    logger.info(
                        "Recording already processed, skipping draft insert",
                        extra={
                            "recording_id": str(recording_id),
                            "status": recording.status.value,
                        },
                    )
                    return False

                recording.status = RecordingStatus.TRANSCRIBED
                recording.transcript = transcript
                recording.updated_at = utcnow()
                db_session.add(recording)
                db_session.add(
                    AIPrescription(
                        recording_id=recording_id,
                        appointment_id=recording.appointment_id,
                        draft_text=draft_text,
                        structured=structured,
                    )
                )
                db_session.commit()
        except RecordingNotFoundError:
            raise
        except IntegrityError:
            logger.info(
                "Draft already exists for recording",
                extra={"recording_id": str(recording_id)},
            )
            return False
        except Exception as e:
            logger.exception(
                "Failed to persist transcription",
                extra={"recording_id": str(recording_id)},
            )
            raise PersistenceError(recording_id, cause=e) from e

        logger.info(
            "Transcription and draft persisted",
            extra={"recording_id": str(recording_id)},
        )
        return True

    def mark_failed(self, recording_id: UUID, reason: str) -> bool:
        """
        Moves an ``uploaded`` recording to ``failed``.

        Returns:
            True if the status changed.

        Raises:
            PersistenceError: If the update fails.
        """
        try:
            with self._session_factory() as db_session:
                recording = self._lock_recording(db_session, recording_id)
                if recording is None or recording.status != RecordingStatus.UPLOADED:
                    return False

                recording.status = RecordingStatus.FAILED
                recording.failure_reason = reason[:1024]
                recording.updated_at = utcnow()
                db_session.add(recording)
                db_session.commit()
        except Exception as e:
            logger.exception(
                "Failed to mark recording as failed",
                extra={"recording_id": str(recording_id)},
            )
            raise PersistenceError(recording_id, cause=e) from e

        logger.warning(
            "Recording marked as failed",
            extra={"recording_id": str(recording_id), "reason": reason},
        )
        return True

    def quarantine(self, recording_id: UUID, reason: str) -> bool:
        """
        Withdraws an ``uploaded`` recording from reconciliation.

        The status stays ``uploaded`` so the row remains visible for manual
        investigation, but the stale sweep no longer re-enqueues it.

        Returns:
            True if the recording was quarantined by this call.

        Raises:
            PersistenceError: If the update fails.
        """
        try:
            with self._session_factory() as db_session:
                recording = self._lock_recording(db_session, recording_id)
                if (
                    recording is None
                    or recording.status != RecordingStatus.UPLOADED
                    or recording.quarantined_at is not None
                ):
                    return False

                recording.quarantined_at = utcnow()
                recording.failure_reason = reason[:1024]
                db_session.add(recording)
                db_session.commit()
        except Exception as e:
            logger.exception(
                "Failed to quarantine recording",
                extra={"recording_id": str(recording_id)},
            )
            raise PersistenceError(recording_id, cause=e) from e

        logger.warning(
            "Recording quarantined",
            extra={"recording_id": str(recording_id), "reason": reason},
        )
        return True

    def find_stale_uploaded(
        self, older_than: datetime, max_attempts: int, limit: int = 100
    ) -> list[Recording]:
        """Returns unquarantined ``uploaded`` recordings untouched since ``older_than``."""
        statement = (
            select(Recording)
            .where(
                Recording.status == RecordingStatus.UPLOADED,
                Recording.updated_at < older_than,
                Recording.reconcile_attempts < max_attempts,
                col(Recording.quarantined_at).is_(None),
            )
            .order_by(Recording.created_at)
            .limit(limit)
        )
        try:
            with self._session_factory() as db_session:
                return list(db_session.exec(statement).all())
        except Exception as e:
            logger.exception("Failed to query stale recordings")
            raise PersistenceError("stale-sweep", cause=e) from e

    def record_reconcile_attempt(self, recording_id: UUID) -> None:
        """Increments the reconciliation counter and touches ``updated_at``."""
        try:
            with self._session_factory() as db_session:
                recording = db_session.get(Recording, recording_id)
                if recording is None:
                    return
                recording.reconcile_attempts += 1
                recording.updated_at = utcnow()
                db_session.add(recording)
                db_session.commit()
        except Exception as e:
            logger.exception(
                "Failed to record reconciliation attempt",
                extra={"recording_id": str(recording_id)},
            )
            raise PersistenceError(recording_id, cause=e) from e

    def _lock_recording(self, db_session: Session, recording_id: UUID) -> Recording | None:
        statement = (
            select(Recording).where(Recording.id == recording_id).with_for_update()
        )
        return db_session.exec(statement).first()
