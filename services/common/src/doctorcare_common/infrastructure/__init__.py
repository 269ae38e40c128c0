"""Concrete implementations of infrastructure interfaces."""

from .kms_key_service import KMSKeyService
from .minio_storage import MinioStorageClient
from .rabbitmq_publisher import RabbitMQPublisher

__all__ = ["KMSKeyService", "MinioStorageClient", "RabbitMQPublisher"]
