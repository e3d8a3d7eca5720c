from collections.abc import Sequence
from pathlib import Path

from mediaforge.config.settings import Settings
from mediaforge.image.processor import build_image_processor
from mediaforge.logging.logger import Log
from mediaforge.processing.models import BatchResult
from mediaforge.processing.operations import (
    Compress,
    GeneratePreview,
    GenerateSizes,
    Optimize,
    ProcessingOperation,
    Thumbnail,
)
from mediaforge.video.processor import build_video_processor

DEFAULT_OPERATIONS: dict[str, tuple[ProcessingOperation, ...]] = {
    "image": (Optimize(), GenerateSizes()),
    "video": (Compress(), Thumbnail(), GeneratePreview()),
}


def run_batch(
    settings: Settings,
    operations: Sequence[ProcessingOperation] | None = None,
) -> BatchResult:
    """Process every media file of ``batch_input_dir`` into ``batch_output_dir``."""
    if not settings.batch_input_dir or not settings.batch_output_dir:
        raise ValueError("batch_input_dir and batch_output_dir must be set")
    media_type = settings.batch_media_type.lower()
    if media_type not in DEFAULT_OPERATIONS:
        raise ValueError(
            f"Unknown batch media type '{media_type}'. Choose from: {list(DEFAULT_OPERATIONS)}"
        )
    ops = operations if operations is not None else DEFAULT_OPERATIONS[media_type]
    input_dir = Path(settings.batch_input_dir)
    output_dir = Path(settings.batch_output_dir)

    if media_type == "image":
        return build_image_processor(settings).batch_process(input_dir, output_dir, ops)
    return build_video_processor(settings).batch_process_videos(input_dir, output_dir, ops)


def main() -> None:
    """Entry point: load settings -> configure logging -> run one batch."""
    settings = Settings()
    Log.configure(settings.log_level)
    result = run_batch(settings)
    for item in result.failed:
        Log.error(f"{item.source_name}: {item.error}")
    if result.failed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
