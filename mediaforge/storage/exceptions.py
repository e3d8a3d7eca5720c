class BlobStoreError(Exception):
    """Base exception for blob storage failures."""


class BlobNotFoundError(BlobStoreError):
    """Raised when a key does not exist in the store."""


class BlobAlreadyExistsError(BlobStoreError):
    """Raised when writing to a key that already holds a blob."""
