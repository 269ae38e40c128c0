"""Abstract interface for the encrypted blob store."""

from abc import ABC, abstractmethod
from typing import BinaryIO


class StorageClient(ABC):
    """
    Object storage for encrypted recordings.

    Implementations only ever see ciphertext; encryption happens before
    ``upload`` and decryption after ``download``.
    """

    @abstractmethod
    def download(self, bucket_name: str, object_name: str) -> bytes:
        """
        Fetches a stored blob in full.

        Raises:
            StorageDownloadError: If the object is missing or the request fails.
        """

    @abstractmethod
    def upload(
        self,
        bucket_name: str,
        object_name: str,
        data: BinaryIO,
        size: int,
        content_type: str,
    ) -> None:
        """
        Writes a blob under ``object_name``.

        Args:
            bucket_name: Target bucket.
            object_name: Storage key, e.g. ``recordings/2026/10/19/<id>/audio.webm.enc``.
            data: Stream positioned at the start of the blob.
            size: Exact blob length in bytes.
            content_type: MIME type recorded with the object.

        Raises:
            StorageUploadError: If the write fails.
        """

    @abstractmethod
    def remove(self, bucket_name: str, object_name: str) -> None:
        """
        Deletes a blob, used to clean up after a failed metadata write.

        Raises:
            StorageError: If the delete fails.
        """

    @abstractmethod
    def ensure_bucket_exists(self, bucket_name: str) -> None:
        """Creates the bucket on first start."""
