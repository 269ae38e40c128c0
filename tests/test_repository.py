"""Tests for RecordingRepository against an in-memory SQLite database."""

from datetime import timedelta
from uuid import uuid4

import pytest
from doctorcare_common import (
    AIPrescription,
    PersistenceError,
    Recording,
    RecordingNotFoundError,
    RecordingStatus,
)
from doctorcare_common.db_models import utcnow
from sqlmodel import Session


def _recording(**overrides) -> Recording:
    fields = {
        "appointment_id": "apt-1",
        "storage_key": f"recordings/2026/10/19/{uuid4()}/audio.enc",
        "encrypted_data_key": b"wrapped",
        "created_by": "doctor-1",
    }
    fields.update(overrides)
    return Recording(**fields)


def _save(repository, recording_id):
    return repository.save_transcription(
        recording_id=recording_id,
        transcript="Speaker A: hello",
        draft_text='{"diagnosis": "flu"}',
        structured={"diagnosis": "flu"},
    )


class TestCreateAndGet:
    def test_create_then_get(self, repository):
        created = repository.create_recording(_recording())

        loaded = repository.get_recording(created.id)

        assert loaded.id == created.id
        assert loaded.status == RecordingStatus.UPLOADED
        assert loaded.encrypted_data_key == b"wrapped"
        assert loaded.reconcile_attempts == 0

    def test_get_unknown_returns_none(self, repository):
        assert repository.get_recording(uuid4()) is None

    def test_duplicate_id_raises_persistence_error(self, repository):
        first = repository.create_recording(_recording())

        with pytest.raises(PersistenceError):
            repository.create_recording(_recording(id=first.id))

    def test_create_does_not_reload_after_commit(self, repository, db, monkeypatch):
        """Once the commit succeeds the insert is reported as written."""

        def fail_refresh(self, *args, **kwargs):
            raise RuntimeError("connection reset")

        monkeypatch.setattr(Session, "refresh", fail_refresh)

        created = repository.create_recording(_recording())

        assert created.status == RecordingStatus.UPLOADED
        assert db.recording(created.id) is not None


class TestSaveTranscription:
    def test_writes_draft_and_transitions_status(self, repository, db):
        recording = repository.create_recording(_recording())

        assert _save(repository, recording.id) is True

        stored = db.recording(recording.id)
        assert stored.status == RecordingStatus.TRANSCRIBED
        assert stored.transcript == "Speaker A: hello"
        assert [d.structured for d in db.drafts()] == [{"diagnosis": "flu"}]

    def test_second_save_is_skipped(self, repository, db):
        recording = repository.create_recording(_recording())

        assert _save(repository, recording.id) is True
        assert _save(repository, recording.id) is False
        assert len(db.drafts()) == 1

    def test_existing_draft_violates_unique_constraint(self, repository, engine, db):
        """A concurrent writer's draft wins; the late write is reported as skipped."""
        recording = repository.create_recording(_recording())
        with Session(engine) as session:
            session.add(
                AIPrescription(
                    recording_id=recording.id,
                    appointment_id="apt-1",
                    draft_text="{}",
                    structured={},
                )
            )
            session.commit()

        assert _save(repository, recording.id) is False

        assert len(db.drafts()) == 1
        assert db.recording(recording.id).status == RecordingStatus.UPLOADED

    def test_unknown_recording_raises(self, repository):
        with pytest.raises(RecordingNotFoundError):
            _save(repository, uuid4())

    def test_failed_recording_is_not_overwritten(self, repository, db):
        recording = repository.create_recording(_recording())
        repository.mark_failed(recording.id, "transcription failed")

        assert _save(repository, recording.id) is False
        assert db.drafts() == []


class TestMarkFailed:
    def test_marks_uploaded_recording(self, repository, db):
        recording = repository.create_recording(_recording())

        assert repository.mark_failed(recording.id, "AssemblyAI 503") is True

        stored = db.recording(recording.id)
        assert stored.status == RecordingStatus.FAILED
        assert stored.failure_reason == "AssemblyAI 503"

    def test_transcribed_recording_is_left_alone(self, repository, db):
        recording = repository.create_recording(_recording())
        _save(repository, recording.id)

        assert repository.mark_failed(recording.id, "late failure") is False
        assert db.recording(recording.id).status == RecordingStatus.TRANSCRIBED

    def test_unknown_recording_is_ignored(self, repository):
        assert repository.mark_failed(uuid4(), "missing") is False


class TestStaleRecordings:
    def test_finds_only_old_uploaded_rows_under_attempt_limit(self, repository):
        old = utcnow() - timedelta(hours=1)
        stale = repository.create_recording(_recording(created_at=old, updated_at=old))
        repository.create_recording(_recording())
        exhausted = repository.create_recording(
            _recording(created_at=old, updated_at=old, reconcile_attempts=5)
        )
        done = repository.create_recording(_recording(created_at=old, updated_at=old))
        _save(repository, done.id)

        found = repository.find_stale_uploaded(
            older_than=utcnow() - timedelta(minutes=15), max_attempts=5
        )

        assert [r.id for r in found] == [stale.id]
        assert exhausted.id not in {r.id for r in found}

    def test_limit_is_respected(self, repository):
        old = utcnow() - timedelta(hours=1)
        for _ in range(3):
            repository.create_recording(_recording(created_at=old, updated_at=old))

        found = repository.find_stale_uploaded(
            older_than=utcnow(), max_attempts=5, limit=2
        )

        assert len(found) == 2

    def test_record_attempt_increments_and_touches(self, repository, db):
        old = utcnow() - timedelta(hours=1)
        recording = repository.create_recording(_recording(updated_at=old))

        repository.record_reconcile_attempt(recording.id)

        assert db.recording(recording.id).reconcile_attempts == 1
        assert repository.find_stale_uploaded(
            older_than=utcnow() - timedelta(minutes=15), max_attempts=5
        ) == []

    def test_quarantined_rows_are_not_swept(self, repository):
        old = utcnow() - timedelta(hours=1)
        tampered = repository.create_recording(_recording(created_at=old, updated_at=old))
        stale = repository.create_recording(_recording(created_at=old, updated_at=old))

        repository.quarantine(tampered.id, "authentication tag mismatch")

        found = repository.find_stale_uploaded(older_than=utcnow(), max_attempts=5)
        assert [r.id for r in found] == [stale.id]


class TestQuarantine:
    def test_sets_marker_and_keeps_status(self, repository, db):
        recording = repository.create_recording(_recording())

        assert repository.quarantine(recording.id, "authentication tag mismatch") is True

        stored = db.recording(recording.id)
        assert stored.status == RecordingStatus.UPLOADED
        assert stored.quarantined_at is not None
        assert stored.failure_reason == "authentication tag mismatch"

    def test_second_quarantine_is_a_no_op(self, repository):
        recording = repository.create_recording(_recording())

        assert repository.quarantine(recording.id, "first") is True
        assert repository.quarantine(recording.id, "second") is False

    def test_transcribed_recording_is_left_alone(self, repository, db):
        recording = repository.create_recording(_recording())
        _save(repository, recording.id)

        assert repository.quarantine(recording.id, "late") is False
        assert db.recording(recording.id).quarantined_at is None

    def test_unknown_recording_is_ignored(self, repository):
        assert repository.quarantine(uuid4(), "missing") is False
