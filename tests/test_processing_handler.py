"""Tests for the processing path: unwrap, decrypt, transcribe, draft, persist."""

import base64
from uuid import uuid4

import pytest
from doctorcare_common import (
    AuthenticationError,
    KeyServiceError,
    RecordingNotFoundError,
    RecordingStatus,
    StorageDownloadError,
)
from doctorcare_common.messages import TranscriptionJob

from conftest import SAMPLE_DRAFT
from prescription_worker.domain import GeneratedDraft, PrescriptionDraft
from prescription_worker.exceptions import SummaryServiceError, TranscriptionServiceError


@pytest.fixture
def job(upload_handler, make_upload, publisher):
    """A job for a freshly uploaded 10-byte recording."""
    upload_handler.upload(make_upload(audio=b"0123456789"))
    return publisher.jobs[0]


class TestProcess:
    def test_happy_path_writes_draft_and_transcript(
        self, message_handler, job, transcriber, db
    ):
        result = message_handler.process(job)

        assert result.skipped is False
        assert result.recording_id == job.recording_id
        assert result.appointment_id == "apt-42"

        assert transcriber.received == [b"0123456789"]

        recording = db.recording(job.recording_id)
        assert recording.status == RecordingStatus.TRANSCRIBED
        assert recording.transcript == (
            "Speaker A: I have had a headache for three days.\n"
            "Speaker B: Take paracetamol 500mg twice a day."
        )

        drafts = db.drafts()
        assert len(drafts) == 1
        assert drafts[0].recording_id == job.recording_id
        assert drafts[0].appointment_id == "apt-42"
        assert drafts[0].generated_by == "ai"
        assert drafts[0].structured == SAMPLE_DRAFT
        assert PrescriptionDraft.model_validate_json(drafts[0].draft_text).diagnosis == (
            "Tension headache"
        )

    def test_redelivery_is_a_no_op(self, message_handler, job, llm, transcriber, db):
        """Processing the same job twice leaves exactly one draft."""
        message_handler.process(job)
        second = message_handler.process(job)

        assert second.skipped is True
        assert len(db.drafts()) == 1
        assert llm.calls == 1
        assert len(transcriber.received) == 1

    def test_corrupted_blob_is_detected(
        self, message_handler, job, storage, transcriber, llm, db
    ):
        """A tampered ciphertext never reaches transcription and leaves the row uploaded."""
        object_key = ("recordings", job.storage_key)
        tampered = bytearray(storage.objects[object_key])
        tampered[-1] ^= 0x01
        storage.objects[object_key] = bytes(tampered)

        with pytest.raises(AuthenticationError):
            message_handler.process(job)

        assert transcriber.received == []
        assert llm.calls == 0
        assert db.drafts() == []
        assert db.recording(job.recording_id).status == RecordingStatus.UPLOADED

    def test_missing_recording_raises(self, message_handler, job):
        orphan = TranscriptionJob(
            recording_id=uuid4(),
            storage_key=job.storage_key,
            encrypted_data_key=job.encrypted_data_key,
        )

        with pytest.raises(RecordingNotFoundError):
            message_handler.process(orphan)

    def test_key_service_failure_propagates(self, message_handler, job, key_service, db):
        key_service.fail = True

        with pytest.raises(KeyServiceError):
            message_handler.process(job)

        assert db.recording(job.recording_id).status == RecordingStatus.UPLOADED

    def test_foreign_wrapped_key_is_refused(self, message_handler, job):
        forged = job.model_copy(
            update={"encrypted_data_key": base64.b64encode(b"x" * 60).decode("ascii")}
        )

        with pytest.raises(KeyServiceError):
            message_handler.process(forged)

    def test_download_failure_propagates(self, message_handler, job, storage):
        storage.fail_download = True

        with pytest.raises(StorageDownloadError):
            message_handler.process(job)

    def test_transcription_failure_leaves_status_unchanged(
        self, message_handler, job, transcriber, db
    ):
        transcriber.fail = True

        with pytest.raises(TranscriptionServiceError):
            message_handler.process(job)

        assert db.recording(job.recording_id).status == RecordingStatus.UPLOADED
        assert db.drafts() == []

    def test_llm_failure_leaves_status_unchanged(self, message_handler, job, llm, db):
        llm.fail = True

        with pytest.raises(SummaryServiceError):
            message_handler.process(job)

        assert db.recording(job.recording_id).status == RecordingStatus.UPLOADED
        assert db.drafts() == []


class TestDraftCache:
    def test_cached_draft_skips_llm(self, message_handler, job, cache, llm, db):
        draft = PrescriptionDraft.model_validate({**SAMPLE_DRAFT, "advice": "cached"})
        cache.values[f"draft:{job.recording_id}"] = GeneratedDraft(
            raw_text=draft.model_dump_json(), draft=draft
        ).model_dump_json()

        message_handler.process(job)

        assert llm.calls == 0
        assert db.drafts()[0].structured["advice"] == "cached"

    def test_draft_is_cached_after_generation(self, message_handler, job, cache):
        message_handler.process(job)

        assert f"draft:{job.recording_id}" in cache.values

    def test_cache_outage_falls_back_to_llm(self, message_handler, job, cache, llm, db):
        cache.fail = True

        result = message_handler.process(job)

        assert result.skipped is False
        assert llm.calls == 1
        assert len(db.drafts()) == 1
