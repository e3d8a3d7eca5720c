from typing import ClassVar


class StreamingError(Exception):
    """Base exception for delivery failures; carries the HTTP status to answer with."""

    status_code: ClassVar[int] = 500


class RangeNotSatisfiableError(StreamingError):
    """Raised when a byte range lies outside the resource."""

    status_code = 416

    def __init__(self, message: str, file_size: int) -> None:
        super().__init__(message)
        self.file_size = file_size


class StreamNotFoundError(StreamingError):
    """Raised when the requested media file does not exist."""

    status_code = 404
