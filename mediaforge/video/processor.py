"""Video transformations orchestrated through an injected codec."""

from collections.abc import Sequence
from fractions import Fraction
from pathlib import Path
from typing import Any, ClassVar, assert_never

from mediaforge.config.settings import Settings
from mediaforge.logging.logger import Log
from mediaforge.processing.batch import (
    BatchCoordinator,
    ensure_unique_stem,
    list_media_files,
    stem_collisions,
)
from mediaforge.processing.exceptions import (
    CodecFailureError,
    NoVideoStreamError,
    UnsupportedFormatError,
    UnsupportedOperationError,
)
from mediaforge.processing.models import BatchResult, DerivedArtifact
from mediaforge.processing.operations import (
    Compress,
    ConvertFormat,
    ExtractAudio,
    GeneratePreview,
    GenerateSizes,
    Optimize,
    ProcessingOperation,
    Resize,
    Thumbnail,
    Watermark,
)
from mediaforge.video.base import BaseCodec
from mediaforge.video.factory import CodecFactory
from mediaforge.video.models import TranscodeParams, VideoMetadata, VideoQuality

VIDEO_EXTENSIONS = frozenset({".mp4", ".mov", ".avi", ".mkv", ".webm", ".flv", ".wmv", ".m4v"})


class VideoProcessor:
    """Derives renditions, frames and audio tracks from video files.

    Unlike the image batch, every operation of a video batch produces its
    own output file named ``<base>_<operation>.<ext>``; operations do not
    feed into each other.
    """

    THUMBNAIL_SIZE = "320x240"

    # container -> (video codec, audio codec)
    CONTAINER_CODECS: ClassVar[dict[str, tuple[str, str]]] = {
        "mp4": ("libx264", "aac"),
        "mov": ("libx264", "aac"),
        "mkv": ("libx264", "aac"),
        "avi": ("libx264", "libmp3lame"),
        "webm": ("libvpx-vp9", "libopus"),
    }
    AUDIO_CODECS: ClassVar[dict[str, str]] = {
        "mp3": "libmp3lame",
        "aac": "aac",
        "m4a": "aac",
        "ogg": "libvorbis",
    }
    RESOLUTION_LABELS: ClassVar[list[tuple[int, str]]] = [
        (2160, "4K"),
        (1440, "1440p"),
        (1080, "1080p"),
        (720, "720p"),
        (480, "480p"),
    ]

    def __init__(self, codec: BaseCodec, batch: BatchCoordinator | None = None) -> None:
        self._codec = codec
        self._batch = batch if batch is not None else BatchCoordinator()

    def get_metadata(self, source: Path) -> VideoMetadata:
        """Probe ``source`` and describe its primary video stream.

        Raises:
            NoVideoStreamError: if the container has no video track.
            CodecFailureError: if probing fails.
        """
        info = self._codec.probe(source)
        streams = info.get("streams") or []
        video = next((s for s in streams if s.get("codec_type") == "video"), None)
        if video is None:
            raise NoVideoStreamError(f"No video stream found in {source.name}")

        container = info.get("format") or {}
        width = _to_int(video.get("width"))
        height = _to_int(video.get("height"))
        return VideoMetadata(
            duration=_to_float(container.get("duration")),
            size=_to_int(container.get("size")),
            bitrate=_to_int(container.get("bit_rate")),
            width=width,
            height=height,
            codec=str(video.get("codec_name") or ""),
            frame_rate=_parse_frame_rate(video.get("r_frame_rate")),
            aspect_ratio=width / height if height else 0.0,
        )

    def assess_quality(self, metadata: VideoMetadata) -> VideoQuality:
        """Classify resolution and compute bits per pixel per frame."""
        pixels_per_second = metadata.width * metadata.height * metadata.frame_rate
        bits_per_pixel = metadata.bitrate / pixels_per_second if pixels_per_second else 0.0
        short_side = min(metadata.width, metadata.height)
        label = next(
            (name for lines, name in self.RESOLUTION_LABELS if short_side >= lines), "SD"
        )
        return VideoQuality(
            resolution_label=label,
            bits_per_pixel=round(bits_per_pixel, 4),
            is_hd=short_side >= 720,
        )

    def compress(
        self,
        source: Path,
        target: Path,
        *,
        video_bitrate: str = "1000k",
        audio_bitrate: str = "128k",
        resolution: str = "1280x720",
        preset: str = "medium",
    ) -> Path:
        video_codec, audio_codec = self.CONTAINER_CODECS.get(
            _container_of(target), self.CONTAINER_CODECS["mp4"]
        )
        params = TranscodeParams(
            video_codec=video_codec,
            audio_codec=audio_codec,
            video_bitrate=video_bitrate,
            audio_bitrate=audio_bitrate,
            size=resolution,
            preset=preset,
        )
        return self._transcode(source, target, params)

    def generate_thumbnail(self, source: Path, target: Path, timestamp: str = "00:00:01") -> Path:
        """Extract one frame at ``timestamp`` scaled to 320x240."""
        params = TranscodeParams(
            start=timestamp, frames=1, size=self.THUMBNAIL_SIZE, no_audio=True
        )
        return self._transcode(source, target, params)

    def convert_format(self, source: Path, target: Path, fmt: str = "mp4") -> Path:
        """Re-encode into another container.

        Raises:
            UnsupportedFormatError: if ``fmt`` is not a known container.
        """
        codecs = self.CONTAINER_CODECS.get(fmt.lower().lstrip("."))
        if codecs is None:
            raise UnsupportedFormatError(
                f"Unsupported video format '{fmt}'. Choose from: {sorted(self.CONTAINER_CODECS)}"
            )
        params = TranscodeParams(video_codec=codecs[0], audio_codec=codecs[1])
        return self._transcode(source, target, params)

    def extract_audio(self, source: Path, target: Path, audio_bitrate: str = "192k") -> Path:
        audio_codec = self.AUDIO_CODECS.get(_container_of(target))
        if audio_codec is None:
            raise UnsupportedFormatError(
                f"Unsupported audio format '{target.suffix}'. "
                f"Choose from: {sorted(self.AUDIO_CODECS)}"
            )
        params = TranscodeParams(
            no_video=True, audio_codec=audio_codec, audio_bitrate=audio_bitrate
        )
        return self._transcode(source, target, params)

    def create_preview(self, source: Path, target: Path, duration: int = 30) -> Path:
        """Cut the first ``duration`` seconds, copying streams when the codec allows."""
        try:
            return self._transcode(
                source, target, TranscodeParams(duration=duration, stream_copy=True)
            )
        except CodecFailureError as exc:
            Log.warning(f"Stream copy preview failed for {source.name}, re-encoding: {exc}")
        video_codec, audio_codec = self.CONTAINER_CODECS.get(
            _container_of(target), self.CONTAINER_CODECS["mp4"]
        )
        params = TranscodeParams(
            duration=duration, video_codec=video_codec, audio_codec=audio_codec
        )
        return self._transcode(source, target, params)

    def apply(self, source: Path, output_dir: Path, operation: ProcessingOperation) -> Path:
        """Run one operation on ``source`` and return the path it wrote."""
        base = source.stem
        match operation:
            case Compress():
                return self.compress(
                    source,
                    output_dir / f"{base}_{operation.name}.mp4",
                    video_bitrate=operation.video_bitrate,
                    audio_bitrate=operation.audio_bitrate,
                    resolution=operation.resolution,
                    preset=operation.preset,
                )
            case Thumbnail():
                return self.generate_thumbnail(
                    source, output_dir / f"{base}_{operation.name}.jpg", operation.timestamp
                )
            case ConvertFormat():
                fmt = operation.format.lower().lstrip(".")
                return self.convert_format(
                    source, output_dir / f"{base}_{operation.name}.{fmt}", fmt
                )
            case ExtractAudio():
                return self.extract_audio(
                    source,
                    output_dir / f"{base}_{operation.name}.{operation.format}",
                    operation.audio_bitrate,
                )
            case GeneratePreview():
                suffix = source.suffix.lower() or ".mp4"
                return self.create_preview(
                    source, output_dir / f"{base}_{operation.name}{suffix}", operation.duration
                )
            case Resize() | Optimize() | Watermark() | GenerateSizes():
                raise UnsupportedOperationError(
                    f"'{operation.name}' is an image operation and does not apply to video"
                )
            case _:
                assert_never(operation)

    def batch_process_videos(
        self,
        input_dir: Path,
        output_dir: Path,
        operations: Sequence[ProcessingOperation],
    ) -> BatchResult:
        """Run every operation against every video in ``input_dir``.

        A failing operation fails its whole item; other items continue. Sources
        sharing a stem (``clip.mp4``, ``clip.mov``) would write the same
        outputs, so every source after the first fails with OutputCollisionError.
        """
        sources = list_media_files(input_dir, VIDEO_EXTENSIONS)
        collisions = stem_collisions(sources)
        output_dir.mkdir(parents=True, exist_ok=True)
        Log.info(f"Video batch: {len(sources)} files from {input_dir}")
        return self._batch.run(
            sources, lambda source: self._process_file(source, output_dir, operations, collisions)
        )

    def _process_file(
        self,
        source: Path,
        output_dir: Path,
        operations: Sequence[ProcessingOperation],
        collisions: dict[Path, Path],
    ) -> list[DerivedArtifact]:
        ensure_unique_stem(source, collisions)
        artifacts: list[DerivedArtifact] = []
        for operation in operations:
            target = self.apply(source, output_dir, operation)
            artifacts.append(
                DerivedArtifact(key=str(target), source_name=source.name, operation=operation.name)
            )
        return artifacts

    def _transcode(self, source: Path, target: Path, params: TranscodeParams) -> Path:
        Log.info(f"Transcoding {source.name} -> {target.name}")
        self._codec.transcode(source, target, params)
        return target


def _container_of(path: Path) -> str:
    return path.suffix.lower().lstrip(".")


def _to_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _parse_frame_rate(value: Any) -> float:
    """Parse ffprobe rates such as ``30000/1001``."""
    if not value:
        return 0.0
    try:
        return round(float(Fraction(str(value))), 3)
    except (ValueError, ZeroDivisionError):
        return 0.0


def build_video_processor(settings: Settings) -> VideoProcessor:
    """Build a VideoProcessor with the configured codec."""
    return VideoProcessor(
        codec=CodecFactory.create(settings),
        batch=BatchCoordinator(max_workers=settings.batch_max_workers),
    )
