"""
Envelope encryption for recordings.

Audio is encrypted locally with AES-256-GCM under a per-recording data key.
The data key itself is generated and wrapped by the key-management service,
so only the wrapped form is ever stored or sent across the queue.

At rest a recording is ``nonce (12) || tag (16) || ciphertext``.
"""

import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from pydantic import BaseModel

from doctorcare_common.exceptions import AuthenticationError, KeyServiceError
from doctorcare_common.infrastructure.interfaces import DataKey, KeyService

logger = logging.getLogger(__name__)

NONCE_SIZE = 12
TAG_SIZE = 16
HEADER_SIZE = NONCE_SIZE + TAG_SIZE
KEY_SIZE = 32


class EncryptedBlob(BaseModel, frozen=True):
    """AES-GCM output split into its stored components."""

    nonce: bytes
    tag: bytes
    ciphertext: bytes

    def to_bytes(self) -> bytes:
        return self.nonce + self.tag + self.ciphertext

    @classmethod
    def from_bytes(cls, data: bytes) -> "EncryptedBlob":
        """
        Splits a stored blob at its fixed offsets.

        Raises:
            AuthenticationError: If the blob is too short to hold a nonce and tag.
        """
        if len(data) < HEADER_SIZE:
            raise AuthenticationError(
                f"blob is {len(data)} bytes, expected at least {HEADER_SIZE}"
            )
        return cls(
            nonce=data[:NONCE_SIZE],
            tag=data[NONCE_SIZE:HEADER_SIZE],
            ciphertext=data[HEADER_SIZE:],
        )


class EnvelopeCipher:
    """Produces and opens envelope-encrypted payloads."""

    def __init__(self, key_service: KeyService):
        self._key_service = key_service

    def wrap_new_key(self) -> DataKey:
        """
        Requests a fresh data key from the key service.

        Raises:
            KeyServiceError: If the service fails or returns a key of the wrong size.
        """
        data_key = self._key_service.generate_data_key()
        if len(data_key.plaintext) != KEY_SIZE:
            raise KeyServiceError(
                "GenerateDataKey",
                ValueError(f"expected a {KEY_SIZE}-byte key"),
            )
        logger.info("Data key generated", extra={"wrapped_size": len(data_key.wrapped)})
        return data_key

    def unwrap_key(self, wrapped: bytes) -> bytes:
        """
        Recovers the plaintext data key for a stored wrapped key.

        Raises:
            KeyServiceError: If the service denies the request or the result is malformed.
        """
        if not wrapped:
            raise KeyServiceError("Decrypt", ValueError("wrapped key is empty"))
        plaintext = self._key_service.decrypt_data_key(wrapped)
        if len(plaintext) != KEY_SIZE:
            raise KeyServiceError(
                "Decrypt", ValueError(f"expected a {KEY_SIZE}-byte key")
            )
        return plaintext

    def encrypt(self, key: bytes, plaintext: bytes) -> EncryptedBlob:
        """Encrypts ``plaintext`` under ``key`` with a fresh random nonce."""
        nonce = os.urandom(NONCE_SIZE)
        sealed = AESGCM(key).encrypt(nonce, plaintext, None)
        # cryptography appends the tag to the ciphertext
        return EncryptedBlob(
            nonce=nonce,
            tag=sealed[-TAG_SIZE:],
            ciphertext=sealed[:-TAG_SIZE],
        )

    def decrypt(self, key: bytes, blob: EncryptedBlob | bytes) -> bytes:
        """
        Verifies and decrypts a blob.

        Raises:
            AuthenticationError: If the tag does not verify (tampered data or wrong key).
        """
        if not isinstance(blob, EncryptedBlob):
            blob = EncryptedBlob.from_bytes(blob)
        try:
            return AESGCM(key).decrypt(blob.nonce, blob.ciphertext + blob.tag, None)
        except InvalidTag as e:
            raise AuthenticationError("authentication tag mismatch", cause=e) from e
