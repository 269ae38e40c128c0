"""Dependency injection configuration for the prescription worker."""

import logging
from pathlib import Path

import assemblyai as aai
import pika
import redis
from doctorcare_common.database import get_engine, init_db, make_session_factory
from doctorcare_common.envelope import EnvelopeCipher
from doctorcare_common.infrastructure import (
    KMSKeyService,
    MinioStorageClient,
    RabbitMQPublisher,
)
from doctorcare_common.kms import get_kms_client
from doctorcare_common.minio import get_minio_client
from doctorcare_common.rabbitmq import get_connection_parameters, get_rabbit_channel
from doctorcare_common.repositories import RecordingRepository
from google import genai
from google.genai import types

from prescription_worker.config import AppConfig, load_config
from prescription_worker.domain import PrescriptionDrafter
from prescription_worker.handlers import RecordingMessageHandler
from prescription_worker.infrastructure import (
    AssemblyAITranscriber,
    GeminiLLMService,
    RabbitMQBroker,
    RedisCacheService,
)
from prescription_worker.reconciler import RecordingReconciler
from prescription_worker.worker import Worker

logger = logging.getLogger(__name__)


def _build_repository(config: AppConfig) -> RecordingRepository:
    engine = get_engine(config.postgres)
    init_db(engine)
    logger.info("Database initialized", extra={"host": config.postgres.host})
    return RecordingRepository(make_session_factory(engine))


def _build_drafter(config: AppConfig) -> PrescriptionDrafter:
    redis_client = redis.Redis(
        host=config.redis.host,
        decode_responses=True,
        socket_timeout=config.redis.socket_timeout_seconds,
        socket_connect_timeout=config.redis.socket_timeout_seconds,
    )
    if not redis_client.ping():
        logger.error("Redis connection failed", extra={"host": config.redis.host})
        raise ConnectionError("Redis connection failed")
    cache = RedisCacheService(redis_client, config.redis.cache_ttl_seconds)

    gemini_client = genai.Client(
        api_key=config.gemini.api_key,
        http_options=types.HttpOptions(
            timeout=int(config.gemini.timeout_seconds * 1000)
        ),
    )
    system_prompt_path = Path(__file__).parent / config.gemini.system_prompt_path
    system_prompt = system_prompt_path.read_text(encoding="utf-8")
    llm = GeminiLLMService(gemini_client, config.gemini.model_name, system_prompt)

    return PrescriptionDrafter(llm, cache)


def get_worker() -> Worker:
    """Builds the worker with all client handles injected."""
    config = load_config()

    storage = MinioStorageClient(get_minio_client(config.minio))
    storage.ensure_bucket_exists(config.minio.bucket_name)

    repository = _build_repository(config)

    cipher = EnvelopeCipher(
        KMSKeyService(get_kms_client(config.kms), config.kms.key_id)
    )

    aai.settings.api_key = config.assemblyai.api_key
    aai.settings.http_timeout = config.assemblyai.http_timeout_seconds
    transcriber = AssemblyAITranscriber(
        aai.Transcriber(
            config=aai.TranscriptionConfig(
                speaker_labels=config.assemblyai.speaker_labels
            )
        )
    )

    handler = RecordingMessageHandler(
        cipher=cipher,
        storage=storage,
        transcription_service=transcriber,
        drafter=_build_drafter(config),
        repository=repository,
        bucket_name=config.minio.bucket_name,
    )

    _connection, channel = get_rabbit_channel(config.rabbitmq)
    broker = RabbitMQBroker(channel, config.rabbitmq)
    broker.setup()

    return Worker(broker, handler, repository, config.rabbitmq)


def get_reconciler() -> RecordingReconciler:
    """Builds the reconciliation sweep."""
    config = load_config()
    parameters = get_connection_parameters(config.rabbitmq)
    publisher = RabbitMQPublisher(
        lambda: pika.BlockingConnection(parameters),
        config.rabbitmq.exchange_name,
    )
    return RecordingReconciler(
        repository=_build_repository(config),
        publisher=publisher,
        routing_key=config.rabbitmq.queue_config.expected_routing_key,
        config=config.reconcile,
    )
