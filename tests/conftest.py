import io
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image

ImageFactory = Callable[..., bytes]


def encode_image(image: Image.Image, fmt: str = "JPEG") -> bytes:
    buf = io.BytesIO()
    image.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture()
def make_image() -> ImageFactory:
    """Return a factory producing encoded solid-colour images."""

    def _make(
        width: int = 800,
        height: int = 600,
        fmt: str = "JPEG",
        color: tuple[int, ...] = (200, 30, 30),
        mode: str = "RGB",
    ) -> bytes:
        return encode_image(Image.new(mode, (width, height), color), fmt)

    return _make


@pytest.fixture()
def sample_jpeg_bytes(make_image: ImageFactory) -> bytes:
    """An 800x600 RGB JPEG."""
    return make_image(800, 600, "JPEG")


@pytest.fixture()
def gradient_jpeg_bytes() -> bytes:
    """A 256x256 greyscale gradient JPEG with non-trivial entropy."""
    gradient = Image.linear_gradient("L").convert("RGB")
    return encode_image(gradient, "JPEG")


@pytest.fixture()
def watermark_png_bytes() -> bytes:
    """A 100x50 opaque red RGBA PNG."""
    return encode_image(Image.new("RGBA", (100, 50), (255, 0, 0, 255)), "PNG")


@pytest.fixture()
def image_dir(tmp_path: Path, make_image: ImageFactory) -> Path:
    """Directory with nine valid JPEGs, one corrupt JPEG and a stray text file."""
    directory = tmp_path / "images"
    directory.mkdir()
    for index in range(9):
        (directory / f"photo_{index}.jpg").write_bytes(make_image(640, 480, "JPEG"))
    (directory / "broken.jpg").write_bytes(b"\xff\xd8\xff\xe0 definitely not a jpeg")
    (directory / "notes.txt").write_text("not an image")
    return directory
