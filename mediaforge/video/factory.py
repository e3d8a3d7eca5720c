from typing import ClassVar

from mediaforge.config.settings import Settings
from mediaforge.video.base import BaseCodec
from mediaforge.video.ffmpeg_codec import FfmpegCodec


class CodecFactory:
    """Creates the codec adapter selected by settings."""

    ENGINES: ClassVar[frozenset[str]] = frozenset({"ffmpeg"})

    @classmethod
    def create(cls, settings: Settings) -> BaseCodec:
        engine = settings.codec_engine.lower()
        if engine not in cls.ENGINES:
            raise ValueError(
                f"Unknown codec engine '{engine}'. Choose from: {sorted(cls.ENGINES)}"
            )
        return FfmpegCodec(
            ffmpeg_binary=settings.ffmpeg_binary,
            ffprobe_binary=settings.ffprobe_binary,
            timeout_seconds=settings.codec_timeout_seconds,
        )
