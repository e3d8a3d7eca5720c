"""Pillow helpers for decoding images and computing pixel statistics."""

import io
from collections import Counter
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from mediaforge.image.models import ImageMetadata
from mediaforge.processing.exceptions import CodecFailureError, ImageDimensionLimitError

ImageSource = bytes | Path

_SAMPLE_BOX = (64, 64)
_DECODE_ERRORS = (UnidentifiedImageError, OSError, ValueError, SyntaxError, Image.DecompressionBombError)


def read_source(source: ImageSource) -> bytes:
    if isinstance(source, bytes):
        return source
    try:
        return source.read_bytes()
    except OSError as exc:
        raise CodecFailureError(f"Cannot read image {source}: {exc}") from exc


def open_image(source: ImageSource) -> Image.Image:
    """Open and fully decode an image.

    Raises:
        CodecFailureError: if the bytes are not a decodable image.
    """
    return load_pixels(probe_image(source))


def probe_image(source: ImageSource) -> Image.Image:
    """Open an image reading only its header; pixels stay undecoded.

    Raises:
        ImageDimensionLimitError: if the pixel count exceeds Pillow's bomb limit.
        CodecFailureError: if the bytes are not a recognizable image.
    """
    try:
        return Image.open(io.BytesIO(read_source(source)))
    except Image.DecompressionBombError as exc:
        raise ImageDimensionLimitError(f"Image exceeds the pixel limit: {exc}") from exc
    except _DECODE_ERRORS as exc:
        raise CodecFailureError(f"Unrecognized image data: {exc}") from exc


def load_pixels(image: Image.Image) -> Image.Image:
    """Decode the pixel data of an image opened with ``probe_image``."""
    try:
        image.load()
    except _DECODE_ERRORS as exc:
        raise CodecFailureError(f"Image could not be decoded: {exc}") from exc
    return image


def compute_metadata(image: Image.Image) -> ImageMetadata:
    """Collect dimensions, format, and pixel statistics of a decoded image.

    Raises:
        CodecFailureError: if pixel statistics cannot be computed.
    """
    bands = image.getbands()
    try:
        dominant = dominant_color(image)
        image_entropy = entropy(image)
    except _DECODE_ERRORS as exc:
        raise CodecFailureError(f"Pixel statistics unavailable: {exc}") from exc
    return ImageMetadata(
        width=image.width,
        height=image.height,
        format=(image.format or "").lower(),
        dominant_color=dominant,
        channels=len(bands),
        has_alpha="A" in bands or "transparency" in image.info,
        entropy=image_entropy,
    )


def dominant_color(image: Image.Image) -> tuple[int, int, int]:
    """Most frequent colour, bucketed to 16 levels per channel."""
    sample = image.convert("RGB")
    sample.thumbnail(_SAMPLE_BOX)
    buckets: Counter[tuple[int, int, int]] = Counter()
    for count, (r, g, b) in sample.getcolors(sample.width * sample.height) or []:
        buckets[(r >> 4, g >> 4, b >> 4)] += count
    if not buckets:
        raise ValueError("image has no pixels")
    (r, g, b), _count = buckets.most_common(1)[0]
    return (r * 16 + 8, g * 16 + 8, b * 16 + 8)


def entropy(image: Image.Image) -> float:
    """Shannon entropy (bits) of the greyscale histogram."""
    return image.convert("L").entropy()
