from dataclasses import dataclass


@dataclass(frozen=True)
class VideoMetadata:
    """Container and primary video stream properties reported by the codec."""

    duration: float
    size: int
    bitrate: int
    width: int
    height: int
    codec: str
    frame_rate: float
    aspect_ratio: float


@dataclass(frozen=True)
class VideoQuality:
    """Derived quality indicators for a video."""

    resolution_label: str
    bits_per_pixel: float
    is_hd: bool


@dataclass(frozen=True)
class TranscodeParams:
    """Codec-neutral description of one transcode invocation.

    Unset fields leave the choice to the codec (usually inferred from the
    output file extension).
    """

    video_codec: str | None = None
    audio_codec: str | None = None
    video_bitrate: str | None = None
    audio_bitrate: str | None = None
    size: str | None = None
    preset: str | None = None
    start: str | None = None
    duration: float | None = None
    frames: int | None = None
    no_video: bool = False
    no_audio: bool = False
    stream_copy: bool = False
