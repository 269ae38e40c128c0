"""AWS KMS implementation of the KeyService interface."""

import logging

from botocore.exceptions import BotoCoreError, ClientError

from doctorcare_common.exceptions import KeyServiceError
from doctorcare_common.infrastructure.interfaces import DataKey, KeyService

logger = logging.getLogger(__name__)


class KMSKeyService(KeyService):
    """Generates and unwraps data keys with AWS KMS."""

    def __init__(self, client, key_id: str):
        self._client = client
        self._key_id = key_id

    def generate_data_key(self) -> DataKey:
        try:
            response = self._client.generate_data_key(
                KeyId=self._key_id, KeySpec="AES_256"
            )
            return DataKey(
                plaintext=response["Plaintext"], wrapped=response["CiphertextBlob"]
            )
        except (ClientError, BotoCoreError, KeyError) as e:
            logger.exception(
                "KMS GenerateDataKey failed",
                extra={"key_id": self._key_id, "error_code": _error_code(e)},
            )
            raise KeyServiceError("GenerateDataKey", e) from e

    def decrypt_data_key(self, wrapped: bytes) -> bytes:
        try:
            response = self._client.decrypt(
                CiphertextBlob=wrapped, KeyId=self._key_id
            )
            return response["Plaintext"]
        except (ClientError, BotoCoreError, KeyError) as e:
            logger.exception(
                "KMS Decrypt failed",
                extra={"key_id": self._key_id, "error_code": _error_code(e)},
            )
            raise KeyServiceError("Decrypt", e) from e


def _error_code(error: Exception) -> str | None:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None
