from typing import ClassVar


class ValidationError(Exception):
    """Base exception for rejected uploads.

    Validation failures are deterministic for a given input and are never
    retried.
    """

    code: ClassVar[str] = "validation_error"

    def to_dict(self) -> dict[str, str]:
        """Structured payload for the upload endpoint."""
        return {"code": self.code, "message": str(self)}


class UnsupportedTypeError(ValidationError):
    """Raised when the declared MIME type is not on any allow-list."""

    code = "unsupported_type"


class SizeExceededError(ValidationError):
    """Raised when the upload is larger than its category limit."""

    code = "size_exceeded"


class ImageTooSmallError(ValidationError):
    """Raised when an image side is below the minimum dimension."""

    code = "too_small"


class ImageTooLargeError(ValidationError):
    """Raised when an image side is above the maximum dimension."""

    code = "too_large"


class CorruptedFileError(ValidationError):
    """Raised when an image cannot be decoded or measured."""

    code = "corrupted"


class MaliciousContentError(ValidationError):
    """Raised when a content scanner flags the upload."""

    code = "malicious_content_suspected"
