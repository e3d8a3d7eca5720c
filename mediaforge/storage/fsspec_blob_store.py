import fsspec

from mediaforge.storage.base import BaseBlobStore
from mediaforge.storage.exceptions import (
    BlobAlreadyExistsError,
    BlobNotFoundError,
    BlobStoreError,
)


class FsspecBlobStore(BaseBlobStore):
    """Blob store on top of any fsspec filesystem (local, memory, s3, ...)."""

    def __init__(self, base_url: str, *, storage_options: dict[str, object] | None = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._fs, self._root = fsspec.core.url_to_fs(self._base_url, **(storage_options or {}))

    def _path(self, key: str) -> str:
        key = key.lstrip("/")
        if not key or ".." in key.split("/"):
            raise BlobStoreError(f"Invalid blob key: {key!r}")
        return f"{self._root.rstrip('/')}/{key}"

    def put(self, key: str, data: bytes) -> None:
        path = self._path(key)
        if self._fs.exists(path):
            raise BlobAlreadyExistsError(f"Blob already exists: {key}")
        parent = path.rsplit("/", 1)[0]
        try:
            self._fs.makedirs(parent, exist_ok=True)
            with self._fs.open(path, "wb") as out:
                out.write(data)
        except OSError as exc:
            raise BlobStoreError(f"Failed to write blob {key}: {exc}") from exc

    def get(self, key: str) -> bytes:
        path = self._path(key)
        try:
            with self._fs.open(path, "rb") as f:
                return f.read()
        except FileNotFoundError as exc:
            raise BlobNotFoundError(f"Blob not found: {key}") from exc

    def delete(self, key: str) -> None:
        path = self._path(key)
        if not self._fs.exists(path):
            raise BlobNotFoundError(f"Blob not found: {key}")
        self._fs.rm(path)

    def exists(self, key: str) -> bool:
        return bool(self._fs.exists(self._path(key)))

    def stat_size(self, key: str) -> int:
        path = self._path(key)
        try:
            return int(self._fs.size(path))
        except FileNotFoundError as exc:
            raise BlobNotFoundError(f"Blob not found: {key}") from exc
