from abc import ABC, abstractmethod
from collections.abc import Iterator


class BaseBlobStore(ABC):
    """Contract for durable blob storage addressed by relative path."""

    @abstractmethod
    def put(self, path: str, data: bytes) -> None:
        """Store bytes at path, replacing any previous blob.

        Raises:
            BlobStoreError: if the write fails.
        """

    @abstractmethod
    def read(self, path: str) -> bytes:
        """Return the full blob.

        Raises:
            BlobNotFoundError: if nothing is stored at path.
        """

    @abstractmethod
    def stream(self, path: str, chunk_size: int = 64 * 1024) -> Iterator[bytes]:
        """Yield the blob in bounded chunks.

        Raises:
            BlobNotFoundError: if nothing is stored at path.
        """

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove the blob at path if present."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return True when the store can accept writes."""
