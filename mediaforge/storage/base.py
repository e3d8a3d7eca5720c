from abc import ABC, abstractmethod


class BaseBlobStore(ABC):
    """Contract for byte storage addressed by key.

    Keys are write-once: ``put`` never replaces an existing blob, so readers
    streaming a key never observe a partial rewrite.
    """

    @abstractmethod
    def put(self, key: str, data: bytes) -> None:
        """Store ``data`` under ``key``.

        Raises:
            BlobAlreadyExistsError: if the key is already taken.
            BlobStoreError: on any backend failure.
        """

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Return the bytes stored under ``key``.

        Raises:
            BlobNotFoundError: if the key does not exist.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``.

        Raises:
            BlobNotFoundError: if the key does not exist.
        """

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return True when ``key`` holds a blob."""

    @abstractmethod
    def stat_size(self, key: str) -> int:
        """Return the size in bytes of the blob under ``key``.

        Raises:
            BlobNotFoundError: if the key does not exist.
        """
