from dataclasses import dataclass


@dataclass(frozen=True)
class ImageMetadata:
    """Decoded image properties and pixel statistics."""

    width: int
    height: int
    format: str
    dominant_color: tuple[int, int, int]
    channels: int
    has_alpha: bool
    entropy: float


@dataclass(frozen=True)
class SizeVariant:
    """One encoded output of a multi-size generation."""

    suffix: str
    width: int
    height: int
    data: bytes
