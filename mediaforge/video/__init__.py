from mediaforge.video.base import BaseCodec
from mediaforge.video.processor import VideoProcessor, build_video_processor

__all__ = ["BaseCodec", "VideoProcessor", "build_video_processor"]
