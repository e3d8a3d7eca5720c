from mediaforge.config.settings import Settings
from mediaforge.storage.base import BaseBlobStore
from mediaforge.storage.fsspec_blob_store import FsspecBlobStore


class BlobStoreFactory:
    """Creates the blob store configured by ``blob_store_url``."""

    @classmethod
    def create(cls, settings: Settings) -> BaseBlobStore:
        url = settings.blob_store_url.strip()
        if not url:
            raise ValueError("blob_store_url must not be empty")
        return FsspecBlobStore(url)
