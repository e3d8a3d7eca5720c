"""Processing operations as a closed union of parameter records.

Each operation is a frozen dataclass; processors dispatch on the concrete
type with ``match`` and close the match with ``assert_never`` so a new
variant is flagged by the type checker everywhere it is not handled.
"""

from dataclasses import dataclass
from typing import ClassVar, Literal

FitMode = Literal["cover", "contain", "stretch", "inside"]

DEFAULT_SIZES: tuple[int, ...] = (150, 400, 800, 1200)
SIZE_SUFFIXES: tuple[str, ...] = ("thumb", "small", "medium", "large")


@dataclass(frozen=True)
class Resize:
    width: int | None = None
    height: int | None = None
    fit: FitMode = "cover"
    quality: int | None = None

    name: ClassVar[str] = "resize"


@dataclass(frozen=True)
class Thumbnail:
    """Square image thumbnail, or a single video frame at ``timestamp``."""

    size: int = 150
    quality: int | None = None
    timestamp: str = "00:00:01"

    name: ClassVar[str] = "thumbnail"


@dataclass(frozen=True)
class Optimize:
    max_width: int | None = None
    max_height: int | None = None

    name: ClassVar[str] = "optimize"


@dataclass(frozen=True)
class Watermark:
    mark_path: str

    name: ClassVar[str] = "watermark"


@dataclass(frozen=True)
class ConvertFormat:
    format: str

    name: ClassVar[str] = "converted"


@dataclass(frozen=True)
class Compress:
    video_bitrate: str = "1000k"
    audio_bitrate: str = "128k"
    resolution: str = "1280x720"
    preset: str = "medium"

    name: ClassVar[str] = "compressed"


@dataclass(frozen=True)
class ExtractAudio:
    audio_bitrate: str = "192k"
    format: str = "mp3"

    name: ClassVar[str] = "audio"


@dataclass(frozen=True)
class GeneratePreview:
    duration: int = 30

    name: ClassVar[str] = "preview"


@dataclass(frozen=True)
class GenerateSizes:
    sizes: tuple[int, ...] = DEFAULT_SIZES

    name: ClassVar[str] = "sizes"


ProcessingOperation = (
    Resize
    | Thumbnail
    | Optimize
    | Watermark
    | ConvertFormat
    | Compress
    | ExtractAudio
    | GeneratePreview
    | GenerateSizes
)
