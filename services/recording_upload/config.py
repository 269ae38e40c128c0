"""Application configuration loaded from environment variables."""

import os

from doctorcare_common import KMSConfig, MinioConfig, PostgresConfig, RabbitMQConfig
from pydantic import BaseModel, Field


class AuthConfig(BaseModel, frozen=True):
    """Bearer token verification settings."""

    # no default; JWT_SECRET must be set
    jwt_secret: str = Field(min_length=16)
    algorithm: str = "HS256"


class AppConfig(BaseModel, frozen=True):
    """Root application configuration."""

    minio: MinioConfig
    rabbitmq: RabbitMQConfig
    kms: KMSConfig
    postgres: PostgresConfig
    auth: AuthConfig


def load_config() -> AppConfig:
    """
    Loads configuration from environment variables.

    Raises:
        ValidationError: If ``JWT_SECRET`` is unset or shorter than 16 characters.
    """
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
        auth=AuthConfig(
            jwt_secret=os.getenv("JWT_SECRET", ""),
        ),
    )
