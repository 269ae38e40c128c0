"""Application configuration loaded from environment variables."""

import os
from pathlib import Path

from doctorcare_common import KMSConfig, MinioConfig, PostgresConfig, RabbitMQConfig
from pydantic import BaseModel


class AssemblyAIConfig(BaseModel, frozen=True):
    """AssemblyAI API configuration."""

    api_key: str
    speaker_labels: bool = True
    http_timeout_seconds: float = 300.0


class GeminiConfig(BaseModel, frozen=True):
    """Gemini LLM configuration."""

    api_key: str
    model_name: str = "gemini-2.5-flash-lite"
    system_prompt_path: Path = Path("system.txt")
    timeout_seconds: float = 120.0


class RedisConfig(BaseModel, frozen=True):
    """Redis connection configuration."""

    host: str
    cache_ttl_seconds: int = 86400  # 24 hours default
    socket_timeout_seconds: float = 5.0


class ReconcileConfig(BaseModel, frozen=True):
    """Settings for re-enqueueing recordings whose job was lost."""

    stale_after_seconds: int = 900
    interval_seconds: int = 300
    max_attempts: int = 5
    batch_size: int = 100


class AppConfig(BaseModel, frozen=True):
    """Root application configuration."""

    minio: MinioConfig
    rabbitmq: RabbitMQConfig
    kms: KMSConfig
    postgres: PostgresConfig
    assemblyai: AssemblyAIConfig
    gemini: GeminiConfig
    redis: RedisConfig
    reconcile: ReconcileConfig


def load_config() -> AppConfig:
    """Loads configuration from environment variables."""
    return AppConfig(
        minio=MinioConfig(
            endpoint=os.getenv("MINIO_ENDPOINT", "minio:9000"),
            user=os.getenv("MINIO_USER", ""),
            password=os.getenv("MINIO_PASSWORD", ""),
            bucket_name=os.getenv("MINIO_BUCKET", "recordings"),
        ),
        rabbitmq=RabbitMQConfig(
            host=os.getenv("RABBITMQ_HOST", "rabbitmq"),
            user=os.getenv("RABBITMQ_USER", ""),
            password=os.getenv("RABBITMQ_PASSWORD", ""),
        ),
        kms=KMSConfig(
            region=os.getenv("AWS_REGION", "us-east-1"),
            key_id=os.getenv("KMS_KEY_ID", ""),
            endpoint_url=os.getenv("KMS_ENDPOINT_URL") or None,
        ),
        postgres=PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "postgres"),
            user=os.getenv("POSTGRES_USER", ""),
            password=os.getenv("POSTGRES_PASSWORD", ""),
            port=int(os.getenv("POSTGRES_PORT", "5432")),
            database=os.getenv("POSTGRES_DB", "doctorcare"),
        ),
        assemblyai=AssemblyAIConfig(
            api_key=os.getenv("ASSEMBLYAI_API_KEY", ""),
        ),
        gemini=GeminiConfig(
            api_key=os.getenv("GEMINI_API_KEY", ""),
        ),
        redis=RedisConfig(
            host=os.getenv("REDIS_HOST", "redis"),
            cache_ttl_seconds=int(os.getenv("REDIS_CACHE_TTL_SECONDS", "86400")),
        ),
        reconcile=ReconcileConfig(
            stale_after_seconds=int(os.getenv("RECONCILE_STALE_AFTER_SECONDS", "900")),
            interval_seconds=int(os.getenv("RECONCILE_INTERVAL_SECONDS", "300")),
            max_attempts=int(os.getenv("RECONCILE_MAX_ATTEMPTS", "5")),
        ),
    )
