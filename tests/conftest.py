"""Shared pytest fixtures for the DoctorCare pipeline tests.

Cloud collaborators (KMS, MinIO, RabbitMQ, AssemblyAI, Gemini, Redis) are
replaced by in-memory fakes; the relational store is a real SQLite database
so transactions and the unique draft constraint behave as in production.
"""

import os
from typing import BinaryIO
from uuid import UUID

import pytest
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from doctorcare_common import KeyServiceError, QueueError, StorageDownloadError
from doctorcare_common.database import make_session_factory
from doctorcare_common.db_models import AIPrescription, Recording
from doctorcare_common.envelope import EnvelopeCipher
from doctorcare_common.exceptions import StorageError, StorageUploadError
from doctorcare_common.infrastructure.interfaces import (
    DataKey,
    KeyService,
    MessagePublisher,
    StorageClient,
)
from doctorcare_common.messages import TranscriptionJob
from doctorcare_common.repositories import RecordingRepository
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from prescription_worker.domain import (
    GeneratedDraft,
    PrescriptionDraft,
    PrescriptionDrafter,
    Transcript,
    Utterance,
)
from prescription_worker.exceptions import (
    CacheServiceError,
    SummaryServiceError,
    TranscriptionServiceError,
)
from prescription_worker.handlers import RecordingMessageHandler
from prescription_worker.infrastructure.interfaces import (
    CacheService,
    LLMService,
    TranscriptionService,
)
from recording_upload.domain import UploadRequest
from recording_upload.handlers import RecordingUploadHandler

BUCKET = "recordings"
ROUTING_KEY = "recording.upload.completed"


class FakeKeyService(KeyService):
    """Wraps data keys under a local master key, like KMS does server-side."""

    def __init__(self):
        self._master = AESGCM(os.urandom(32))
        self.generate_calls = 0
        self.decrypt_calls = 0
        self.fail = False

    def generate_data_key(self) -> DataKey:
        self.generate_calls += 1
        if self.fail:
            raise KeyServiceError("GenerateDataKey", Exception("AccessDenied"))
        plaintext = os.urandom(32)
        nonce = os.urandom(12)
        return DataKey(
            plaintext=plaintext, wrapped=nonce + self._master.encrypt(nonce, plaintext, None)
        )

    def decrypt_data_key(self, wrapped: bytes) -> bytes:
        self.decrypt_calls += 1
        if self.fail:
            raise KeyServiceError("Decrypt", Exception("AccessDenied"))
        try:
            return self._master.decrypt(wrapped[:12], wrapped[12:], None)
        except (InvalidTag, ValueError) as e:
            raise KeyServiceError("Decrypt", e) from e


class InMemoryStorage(StorageClient):
    def __init__(self):
        self.objects: dict[tuple[str, str], bytes] = {}
        self.fail_upload = False
        self.fail_download = False

    def download(self, bucket_name: str, object_name: str) -> bytes:
        if self.fail_download or (bucket_name, object_name) not in self.objects:
            raise StorageDownloadError(object_name)
        return self.objects[(bucket_name, object_name)]

    def upload(
        self,
        bucket_name: str,
        object_name: str,
        data: BinaryIO,
        size: int,
        content_type: str,
    ) -> None:
        if self.fail_upload:
            raise StorageUploadError(object_name)
        body = data.read()
        assert len(body) == size
        self.objects[(bucket_name, object_name)] = body

    def remove(self, bucket_name: str, object_name: str) -> None:
        if (bucket_name, object_name) not in self.objects:
            raise StorageError(object_name, "missing")
        del self.objects[(bucket_name, object_name)]

    def ensure_bucket_exists(self, bucket_name: str) -> None:
        pass


class RecordingPublisher(MessagePublisher):
    def __init__(self):
        self.messages: list[tuple[str, dict]] = []
        self.fail = False

    def publish(self, routing_key: str, payload: dict) -> None:
        if self.fail:
            raise QueueError(routing_key, Exception("connection refused"))
        self.messages.append((routing_key, payload))

    @property
    def jobs(self) -> list[TranscriptionJob]:
        return [TranscriptionJob.model_validate(p) for _, p in self.messages]


class FakeTranscriber(TranscriptionService):
    def __init__(self):
        self.received: list[bytes] = []
        self.fail = False

    def transcribe(self, audio: BinaryIO, recording_id: str) -> Transcript:
        self.received.append(audio.read())
        if self.fail:
            raise TranscriptionServiceError(recording_id, Exception("503"))
        return Transcript(
            text="I have a headache. Take paracetamol.",
            utterances=[
                Utterance(speaker="A", text="I have had a headache for three days."),
                Utterance(speaker="B", text="Take paracetamol 500mg twice a day."),
            ],
        )


SAMPLE_DRAFT = {
    "diagnosis": "Tension headache",
    "symptoms": ["headache"],
    "medicines": [
        {
            "name": "Paracetamol",
            "dose": "500mg",
            "frequency": "twice a day",
            "duration": "5 days",
        }
    ],
    "advice": "Rest and hydrate",
    "follow_up_days": 7,
}


class FakeLLM(LLMService):
    def __init__(self):
        self.calls = 0
        self.fail = False

    def generate_draft(self, transcript: str) -> GeneratedDraft:
        self.calls += 1
        if self.fail:
            raise SummaryServiceError("Gemini draft failed: 429")
        draft = PrescriptionDraft.model_validate(SAMPLE_DRAFT)
        return GeneratedDraft(raw_text=draft.model_dump_json(), draft=draft)


class InMemoryCache(CacheService):
    def __init__(self):
        self.values: dict[str, str] = {}
        self.fail = False

    def get(self, key: str) -> str | None:
        if self.fail:
            raise CacheServiceError(key, "get")
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail:
            raise CacheServiceError(key, "set")
        self.values[key] = value


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across sessions of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine):
    return RecordingRepository(make_session_factory(engine))


@pytest.fixture
def key_service():
    return FakeKeyService()


@pytest.fixture
def cipher(key_service):
    return EnvelopeCipher(key_service)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def publisher():
    return RecordingPublisher()


@pytest.fixture
def transcriber():
    return FakeTranscriber()


@pytest.fixture
def llm():
    return FakeLLM()


@pytest.fixture
def cache():
    return InMemoryCache()


@pytest.fixture
def upload_handler(cipher, storage, repository, publisher):
    return RecordingUploadHandler(
        cipher=cipher,
        storage=storage,
        repository=repository,
        publisher=publisher,
        bucket_name=BUCKET,
        routing_key=ROUTING_KEY,
    )


@pytest.fixture
def message_handler(cipher, storage, transcriber, llm, cache, repository):
    return RecordingMessageHandler(
        cipher=cipher,
        storage=storage,
        transcription_service=transcriber,
        drafter=PrescriptionDrafter(llm, cache),
        repository=repository,
        bucket_name=BUCKET,
    )


@pytest.fixture
def make_upload():
    """Factory for upload requests with sensible defaults."""

    def _make(audio: bytes = b"0123456789", consent="true", **overrides) -> UploadRequest:
        fields = {
            "audio": audio,
            "consent": consent,
            "appointment_id": "apt-42",
            "created_by": "doctor-1",
            "length_seconds": 12.5,
            "file_name": "visit.webm",
        }
        fields.update(overrides)
        return UploadRequest(**fields)

    return _make


@pytest.fixture
def db(engine):
    """Helpers for inspecting database state."""

    class _DB:
        def recordings(self) -> list[Recording]:
            with Session(engine) as session:
                return list(session.exec(select(Recording)).all())

        def recording(self, recording_id: UUID) -> Recording:
            with Session(engine) as session:
                return session.get(Recording, recording_id)

        def drafts(self) -> list[AIPrescription]:
            with Session(engine) as session:
                return list(session.exec(select(AIPrescription)).all())

    return _DB()
