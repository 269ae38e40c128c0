from doctorcare_common.config import (
    KMSConfig,
    MinioConfig,
    PostgresConfig,
    QueueConfig,
    RabbitMQConfig,
)
from doctorcare_common.db_models import AIPrescription, Recording, RecordingStatus
from doctorcare_common.exceptions import (
    AuthenticationError,
    ConsentRequiredError,
    KeyServiceError,
    PersistenceError,
    QueueError,
    RecordingNotFoundError,
    StorageDownloadError,
    StorageError,
    StorageUploadError,
)
from doctorcare_common.logging import setup_logging

__all__ = [
    "setup_logging",
    "AuthenticationError",
    "ConsentRequiredError",
    "KeyServiceError",
    "PersistenceError",
    "QueueError",
    "RecordingNotFoundError",
    "StorageDownloadError",
    "StorageError",
    "StorageUploadError",
    "KMSConfig",
    "MinioConfig",
    "PostgresConfig",
    "QueueConfig",
    "RabbitMQConfig",
    "AIPrescription",
    "Recording",
    "RecordingStatus",
]
