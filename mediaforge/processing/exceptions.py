class ProcessingError(Exception):
    """Base exception for media transformation failures."""


class UnsupportedFormatError(ProcessingError):
    """Raised when an output format is not supported."""


class UnsupportedOperationError(ProcessingError):
    """Raised when an operation does not apply to the media kind or position."""


class CodecFailureError(ProcessingError):
    """Raised when the decoder/encoder cannot process the input."""


class NoVideoStreamError(ProcessingError):
    """Raised when a video container holds no video track."""


class OutputCollisionError(ProcessingError):
    """Raised when two batch inputs would write the same output file."""


class ImageDimensionLimitError(CodecFailureError):
    """Raised when Pillow refuses to open an image because of its pixel count."""
