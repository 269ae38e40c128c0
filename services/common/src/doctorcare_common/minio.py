import logging

import urllib3
from minio import Minio

from doctorcare_common.config import MinioConfig

logger = logging.getLogger(__name__)


def get_minio_client(config: MinioConfig) -> Minio:
    """
    Initialize and return a MinIO client with bounded request timeouts.

    Retries are left to the caller: the HTTP pool is created with
    ``retries=False`` so a stalled endpoint surfaces as an error.

    Returns:
        Minio: Configured MinIO client
    """
    http_client = urllib3.PoolManager(
        timeout=urllib3.Timeout(
            connect=config.timeout_seconds, read=config.timeout_seconds
        ),
        retries=False,
    )
    try:
        return Minio(
            endpoint=config.endpoint,
            access_key=config.user,
            secret_key=config.password,
            secure=config.secure,
            http_client=http_client,
        )
    except Exception:
        logger.exception(
            "MinIO Client Initialization Failed",
            extra={"endpoint": config.endpoint, "user": config.user},
        )
        raise
