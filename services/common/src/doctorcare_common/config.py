"""Shared configuration models for infrastructure components."""

from pydantic import BaseModel, computed_field


class MinioConfig(BaseModel, frozen=True):
    """MinIO connection configuration."""

    endpoint: str
    user: str
    password: str
    bucket_name: str = "recordings"
    secure: bool = False
    timeout_seconds: float = 30.0


class QueueConfig(BaseModel, frozen=True):
    """RabbitMQ queue configuration."""

    name: str = "transcriptionQueue"
    queue_type: str = "quorum"
    max_delivery_count: int = 3
    expected_routing_key: str = "recording.upload.completed"
    success_routing_key: str = "prescription.draft.created"
    dlq_name: str = "dlq_transcription"
    dlq_exchange_name: str = "dead_letter_exchange"
    dlq_routing_key: str = "recording.transcription.failed"
    # wait before attempt n+1 is retry_delays_seconds[n-1]; the last entry repeats
    retry_delays_seconds: tuple[int, ...] = (60, 300, 900)


class RabbitMQConfig(BaseModel, frozen=True):
    """RabbitMQ connection configuration."""

    host: str
    user: str
    password: str
    exchange_name: str = "events"
    socket_timeout_seconds: float = 10.0
    blocked_connection_timeout_seconds: float = 30.0
    queue_config: QueueConfig = QueueConfig()


class KMSConfig(BaseModel, frozen=True):
    """AWS KMS configuration for envelope encryption."""

    region: str
    key_id: str
    endpoint_url: str | None = None
    connect_timeout_seconds: float = 5.0
    read_timeout_seconds: float = 10.0


class PostgresConfig(BaseModel, frozen=True):
    """PostgreSQL connection configuration."""

    host: str
    user: str
    password: str
    port: int = 5432
    database: str = "doctorcare"
    connect_timeout_seconds: int = 10

    @computed_field
    @property
    def url(self) -> str:
        """Returns the full PostgreSQL connection URL."""
        return (
            f"postgresql+psycopg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )
