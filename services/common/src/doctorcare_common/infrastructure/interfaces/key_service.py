"""Abstract interface for key-management service operations."""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field


class DataKey(BaseModel, frozen=True):
    """A data-encryption key in plaintext and wrapped form."""

    plaintext: bytes = Field(repr=False)
    wrapped: bytes


class KeyService(ABC):
    """Abstract base class for key-management backends."""

    @abstractmethod
    def generate_data_key(self) -> DataKey:
        """
        Requests a fresh 256-bit data key.

        Returns:
            DataKey holding the plaintext key for local use and the wrapped
            form for persistence.

        Raises:
            KeyServiceError: If the service is unreachable or denies the request.
        """

    @abstractmethod
    def decrypt_data_key(self, wrapped: bytes) -> bytes:
        """
        Unwraps a previously generated data key.

        Args:
            wrapped: The ciphertext blob returned by generate_data_key.

        Returns:
            The plaintext key bytes.

        Raises:
            KeyServiceError: If the service denies the request or the input is malformed.
        """
