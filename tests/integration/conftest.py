import shutil
import subprocess
from pathlib import Path

import pytest

from mediaforge.config.settings import Settings

_REQUIRED_ENCODERS = ("libx264", "libmp3lame", "aac")


def _test_settings() -> Settings:
    return Settings(codec_timeout_seconds=120)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def ffmpeg_available(test_settings: Settings) -> None:
    for binary in (test_settings.ffmpeg_binary, test_settings.ffprobe_binary):
        if shutil.which(binary) is None:
            pytest.skip(f"{binary} not found on PATH")
    result = subprocess.run(
        [test_settings.ffmpeg_binary, "-hide_banner", "-encoders"],
        capture_output=True,
        text=True,
        check=False,
    )
    missing = [name for name in _REQUIRED_ENCODERS if name not in result.stdout]
    if missing:
        pytest.skip(f"ffmpeg lacks encoders: {', '.join(missing)}")


@pytest.fixture(scope="session")
def sample_video(
    ffmpeg_available: None,
    test_settings: Settings,
    tmp_path_factory: pytest.TempPathFactory,
) -> Path:
    """A 3 second 640x480 25fps H.264/AAC clip with a sine tone."""
    path = tmp_path_factory.mktemp("video") / "sample.mp4"
    subprocess.run(
        [
            test_settings.ffmpeg_binary,
            "-y", "-hide_banner", "-loglevel", "error",
            "-f", "lavfi", "-i", "testsrc=duration=3:size=640x480:rate=25",
            "-f", "lavfi", "-i", "sine=frequency=440:duration=3",
            "-c:v", "libx264", "-pix_fmt", "yuv420p",
            "-c:a", "aac",
            "-shortest",
            str(path),
        ],
        capture_output=True,
        check=True,
    )
    return path
