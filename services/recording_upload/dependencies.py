"""FastAPI dependency injection configuration."""

import logging
from functools import lru_cache

import pika
from doctorcare_common.database import get_engine, init_db, make_session_factory
from doctorcare_common.envelope import EnvelopeCipher
from doctorcare_common.infrastructure import (
    KMSKeyService,
    MinioStorageClient,
    RabbitMQPublisher,
)
from doctorcare_common.kms import get_kms_client
from doctorcare_common.minio import get_minio_client
from doctorcare_common.rabbitmq import (
    declare_queue_infrastructure,
    get_connection_parameters,
    get_rabbit_channel,
)
from doctorcare_common.repositories import RecordingRepository
from fastapi import Request

from recording_upload.config import AppConfig, AuthConfig, load_config
from recording_upload.handlers import RecordingUploadHandler

logger = logging.getLogger(__name__)


@lru_cache
def get_config() -> AppConfig:
    """Returns the process configuration."""
    return load_config()


def get_auth_config() -> AuthConfig:
    """Returns the bearer token settings."""
    return get_config().auth


def build_upload_handler() -> RecordingUploadHandler:
    """
    Builds the upload handler and its long-lived client handles.

    Called once from the application lifespan, so a missing setting or an
    unreachable dependency fails startup instead of the first request.
    """
    config = get_config()

    storage = MinioStorageClient(get_minio_client(config.minio))
    storage.ensure_bucket_exists(config.minio.bucket_name)

    engine = get_engine(config.postgres)
    init_db(engine)
    repository = RecordingRepository(make_session_factory(engine))
    logger.info("Database initialized", extra={"host": config.postgres.host})

    connection, channel = get_rabbit_channel(config.rabbitmq)
    try:
        declare_queue_infrastructure(channel, config.rabbitmq)
    finally:
        connection.close()

    parameters = get_connection_parameters(config.rabbitmq)
    publisher = RabbitMQPublisher(
        lambda: pika.BlockingConnection(parameters),
        config.rabbitmq.exchange_name,
    )

    cipher = EnvelopeCipher(
        KMSKeyService(get_kms_client(config.kms), config.kms.key_id)
    )

    return RecordingUploadHandler(
        cipher=cipher,
        storage=storage,
        repository=repository,
        publisher=publisher,
        bucket_name=config.minio.bucket_name,
        routing_key=config.rabbitmq.queue_config.expected_routing_key,
    )


def get_upload_handler(request: Request) -> RecordingUploadHandler:
    """Returns the handler built at startup."""
    return request.app.state.upload_handler
