from mediaforge.logging.logger import Log
from mediaforge.processing.models import DerivedArtifact
from mediaforge.storage.base import BaseBlobStore
from mediaforge.storage.exceptions import BlobStoreError


class ArtifactPublisher:
    """Writes derived bytes to the blob store and records the outcome."""

    def __init__(self, store: BaseBlobStore) -> None:
        self._store = store

    def publish(self, source_name: str, operation: str, key: str, data: bytes) -> DerivedArtifact:
        """Store ``data`` under ``key``; existing keys are never overwritten."""
        try:
            self._store.put(key, data)
        except BlobStoreError as exc:
            Log.error(f"Failed to publish {operation} artifact {key}: {exc}")
            return DerivedArtifact(
                key=key, source_name=source_name, operation=operation, success=False, error=str(exc)
            )
        Log.info(f"Published {operation} artifact {key} ({len(data)} bytes)")
        return DerivedArtifact(key=key, source_name=source_name, operation=operation)
