"""Byte-range delivery of stored media files.

Each call to ``serve`` is independent: the file is stat-ed, the range is
resolved, and the body is a generator that opens the file read-only when
iteration starts and closes it when iteration ends, fails, or the consumer
closes the generator. No cursor or handle outlives a request.
"""

import mimetypes
from collections.abc import Generator
from dataclasses import dataclass, field
from pathlib import Path

from mediaforge.config.settings import Settings
from mediaforge.logging.logger import Log
from mediaforge.streaming.exceptions import (
    RangeNotSatisfiableError,
    StreamingError,
    StreamNotFoundError,
)
from mediaforge.streaming.range_parser import parse_range_header

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _empty_body() -> Generator[bytes, None, None]:
    yield from ()


@dataclass
class StreamResponse:
    """Status, headers and lazily-read body handed to the web framework."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Generator[bytes, None, None] = field(default_factory=_empty_body)

    def read(self) -> bytes:
        """Drain the body into memory."""
        return b"".join(self.body)

    def close(self) -> None:
        """Release the file handle of a partially consumed body."""
        self.body.close()


class StreamServer:
    """Serves whole files (200) or single byte ranges (206)."""

    def __init__(self, chunk_size: int = 64 * 1024) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self._chunk_size = chunk_size

    def serve(
        self,
        path: Path,
        range_header: str | None = None,
        content_type: str | None = None,
    ) -> StreamResponse:
        try:
            return self._serve(path, range_header, content_type)
        except StreamingError as exc:
            Log.warning(f"Stream request for {path.name} rejected: {exc}")
            return self._error_response(exc)

    def _serve(
        self, path: Path, range_header: str | None, content_type: str | None
    ) -> StreamResponse:
        file_size = self._stat(path)
        media_type = content_type or mimetypes.guess_type(path.name)[0] or DEFAULT_CONTENT_TYPE
        byte_range = parse_range_header(range_header, file_size)

        if byte_range is None:
            return StreamResponse(
                status=200,
                headers={
                    "Content-Length": str(file_size),
                    "Content-Type": media_type,
                    "Accept-Ranges": "bytes",
                },
                body=self._read(path, 0, file_size),
            )

        Log.debug(
            f"Serving {path.name} bytes {byte_range.start}-{byte_range.end}/{file_size}"
        )
        return StreamResponse(
            status=206,
            headers={
                "Content-Range": f"bytes {byte_range.start}-{byte_range.end}/{file_size}",
                "Accept-Ranges": "bytes",
                "Content-Length": str(byte_range.length),
                "Content-Type": media_type,
            },
            body=self._read(path, byte_range.start, byte_range.length),
        )

    @staticmethod
    def _stat(path: Path) -> int:
        try:
            stat = path.stat()
        except FileNotFoundError as exc:
            raise StreamNotFoundError(f"Media file not found: {path.name}") from exc
        if not path.is_file():
            raise StreamNotFoundError(f"Media file not found: {path.name}")
        return stat.st_size

    def _read(self, path: Path, offset: int, length: int) -> Generator[bytes, None, None]:
        with path.open("rb") as f:
            f.seek(offset)
            remaining = length
            while remaining > 0:
                chunk = f.read(min(self._chunk_size, remaining))
                if not chunk:
                    break
                remaining -= len(chunk)
                yield chunk

    @staticmethod
    def _error_response(exc: StreamingError) -> StreamResponse:
        headers = {"Content-Length": "0"}
        if isinstance(exc, RangeNotSatisfiableError):
            headers["Content-Range"] = f"bytes */{exc.file_size}"
        return StreamResponse(status=exc.status_code, headers=headers)


def build_stream_server(settings: Settings) -> StreamServer:
    return StreamServer(chunk_size=settings.stream_chunk_size)
