import boto3
from botocore.config import Config

from doctorcare_common.config import KMSConfig


def get_kms_client(config: KMSConfig):
    """
    Creates a KMS client with bounded timeouts and no automatic retries.

    Retrying is a caller decision; a throttled or denied call surfaces
    immediately as a KeyServiceError.
    """
    return boto3.client(
        "kms",
        region_name=config.region,
        endpoint_url=config.endpoint_url,
        config=Config(
            connect_timeout=config.connect_timeout_seconds,
            read_timeout=config.read_timeout_seconds,
            retries={"total_max_attempts": 1, "mode": "standard"},
        ),
    )
