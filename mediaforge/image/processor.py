"""Image transformations built on Pillow.

Every transform takes raw bytes or a path and returns encoded bytes, so
steps compose by feeding one output into the next. Resizing never enlarges
an image beyond its source dimensions.
"""

import io
from collections.abc import Sequence
from pathlib import Path
from typing import ClassVar, assert_never

from PIL import Image, ImageOps

from mediaforge.config.settings import Settings
from mediaforge.image.inspector import ImageSource, compute_metadata, open_image
from mediaforge.image.models import ImageMetadata, SizeVariant
from mediaforge.logging.logger import Log
from mediaforge.processing.batch import (
    BatchCoordinator,
    ensure_unique_stem,
    list_media_files,
    stem_collisions,
)
from mediaforge.processing.exceptions import UnsupportedFormatError, UnsupportedOperationError
from mediaforge.processing.models import BatchResult, DerivedArtifact
from mediaforge.processing.operations import (
    DEFAULT_SIZES,
    SIZE_SUFFIXES,
    Compress,
    ConvertFormat,
    ExtractAudio,
    FitMode,
    GeneratePreview,
    GenerateSizes,
    Optimize,
    ProcessingOperation,
    Resize,
    Thumbnail,
    Watermark,
)

IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".webp", ".gif", ".bmp", ".tif", ".tiff"})

_RESAMPLE = Image.Resampling.LANCZOS


def variant_filename(base: str, suffix: str, ext: str) -> str:
    """Build ``<base>_<suffix>.<ext>`` for a derived image."""
    return f"{base}_{suffix}.{ext.lstrip('.')}"


def fit_image(
    image: Image.Image,
    width: int | None,
    height: int | None,
    fit: str,
) -> Image.Image:
    """Scale ``image`` into a ``width`` x ``height`` box without enlarging it.

    A missing dimension is derived from the source aspect ratio. The box is
    clamped to the source size first, so no output dimension ever exceeds
    the corresponding source dimension.
    """
    src_w, src_h = image.size
    box_w, box_h = _target_box(src_w, src_h, width, height)
    out_w, out_h = min(box_w, src_w), min(box_h, src_h)

    if fit == "inside":
        scale = min(box_w / src_w, box_h / src_h, 1.0)
        if scale == 1.0:
            return image.copy()
        size = (max(1, round(src_w * scale)), max(1, round(src_h * scale)))
        return image.resize(size, _RESAMPLE)
    if fit == "stretch":
        return image.resize((out_w, out_h), _RESAMPLE)
    if fit == "cover":
        return ImageOps.fit(image, (out_w, out_h), method=_RESAMPLE, centering=(0.5, 0.5))
    if fit == "contain":
        scale = min(out_w / src_w, out_h / src_h)
        inner = image.convert("RGBA").resize(
            (max(1, round(src_w * scale)), max(1, round(src_h * scale))), _RESAMPLE
        )
        canvas = Image.new("RGBA", (out_w, out_h), (0, 0, 0, 0))
        canvas.paste(inner, ((out_w - inner.width) // 2, (out_h - inner.height) // 2))
        return canvas
    raise UnsupportedOperationError(f"Unknown fit mode '{fit}'")


def _target_box(
    src_w: int, src_h: int, width: int | None, height: int | None
) -> tuple[int, int]:
    if width is None and height is None:
        raise UnsupportedOperationError("resize needs a width, a height, or both")
    if width is None:
        width = round(src_w * height / src_h)  # type: ignore[operator]
    if height is None:
        height = round(src_h * width / src_w)
    if width < 1 or height < 1:
        raise UnsupportedOperationError(f"Invalid target size {width}x{height}")
    return width, height


class ImageProcessor:
    """Stateless image transforms plus a chained batch runner."""

    FORMAT_EXTENSIONS: ClassVar[dict[str, str]] = {
        "jpeg": "jpg",
        "png": "png",
        "webp": "webp",
    }
    # Per-format encoder settings used by convert_format.
    CONVERT_PARAMS: ClassVar[dict[str, dict[str, object]]] = {
        "jpeg": {"quality": 90, "progressive": True},
        "png": {"compress_level": 9},
        "webp": {"quality": 90},
    }

    WATERMARK_WIDTH_RATIO = 0.2
    WATERMARK_MARGIN = 20
    WATERMARK_OPACITY = 0.7

    def __init__(
        self,
        *,
        output_format: str = "jpeg",
        quality: int = 80,
        thumbnail_quality: int = 70,
        optimize_max_width: int = 1920,
        optimize_max_height: int = 1080,
        batch: BatchCoordinator | None = None,
    ) -> None:
        self._output_format = self._normalize_format(output_format)
        self._quality = quality
        self._thumbnail_quality = thumbnail_quality
        self._optimize_box = (optimize_max_width, optimize_max_height)
        self._batch = batch if batch is not None else BatchCoordinator()

    @property
    def output_extension(self) -> str:
        return self.FORMAT_EXTENSIONS[self._output_format]

    def resize(
        self,
        source: ImageSource,
        width: int | None = None,
        height: int | None = None,
        fit: FitMode = "cover",
        quality: int | None = None,
    ) -> bytes:
        image = fit_image(open_image(source), width, height, fit)
        return self._encode(image, self._output_format, quality=quality or self._quality)

    def thumbnail(self, source: ImageSource, size: int = 150, quality: int | None = None) -> bytes:
        """Center-cropped square thumbnail, never larger than the source."""
        image = open_image(source)
        side = min(size, image.width, image.height)
        square = ImageOps.fit(image, (side, side), method=_RESAMPLE, centering=(0.5, 0.5))
        return self._encode(square, "jpeg", quality=quality or self._thumbnail_quality)

    def optimize(
        self,
        source: ImageSource,
        max_width: int | None = None,
        max_height: int | None = None,
    ) -> bytes:
        """Downscale into the optimize box when needed and re-encode progressively."""
        image = open_image(source)
        box_w = max_width or self._optimize_box[0]
        box_h = max_height or self._optimize_box[1]
        if image.width > box_w or image.height > box_h:
            image = fit_image(image, box_w, box_h, "inside")
        return self._encode(image, self._output_format, quality=self._quality, progressive=True)

    def generate_sizes(
        self, source: ImageSource, sizes: Sequence[int] = DEFAULT_SIZES
    ) -> list[SizeVariant]:
        """Encode one variant per size; suffixes map positionally to thumb/small/medium/large."""
        image = open_image(source)
        variants: list[SizeVariant] = []
        for index, size in enumerate(sizes):
            suffix = SIZE_SUFFIXES[index] if index < len(SIZE_SUFFIXES) else str(size)
            resized = fit_image(image, size, size, "inside")
            variants.append(
                SizeVariant(
                    suffix=suffix,
                    width=resized.width,
                    height=resized.height,
                    data=self._encode(resized, self._output_format, quality=self._quality),
                )
            )
        return variants

    def watermark(self, source: ImageSource, mark: ImageSource) -> bytes:
        """Composite ``mark`` at the bottom-right corner at reduced opacity."""
        base = open_image(source)
        source_format = (base.format or "").lower()
        canvas = base.convert("RGBA")
        overlay = open_image(mark).convert("RGBA")

        mark_w = max(1, round(canvas.width * self.WATERMARK_WIDTH_RATIO))
        mark_h = max(1, round(overlay.height * mark_w / overlay.width))
        overlay = overlay.resize((mark_w, mark_h), _RESAMPLE)
        overlay.putalpha(
            overlay.getchannel("A").point(lambda v: round(v * self.WATERMARK_OPACITY))
        )

        x = max(0, canvas.width - mark_w - self.WATERMARK_MARGIN)
        y = max(0, canvas.height - mark_h - self.WATERMARK_MARGIN)
        overlay = overlay.crop((0, 0, min(mark_w, canvas.width - x), min(mark_h, canvas.height - y)))
        canvas.alpha_composite(overlay, dest=(x, y))

        fmt = source_format if source_format in self.FORMAT_EXTENSIONS else self._output_format
        return self._encode(canvas, fmt, quality=self._quality)

    def convert_format(self, source: ImageSource, fmt: str) -> bytes:
        """Re-encode to jpeg, png or webp with format-specific settings.

        Raises:
            UnsupportedFormatError: for any other target format.
        """
        target = self._normalize_format(fmt)
        image = open_image(source)
        params = self.CONVERT_PARAMS[target]
        return self._encode(image, target, **params)  # type: ignore[arg-type]

    def get_metadata(self, source: ImageSource) -> ImageMetadata:
        return compute_metadata(open_image(source))

    def apply(self, source: ImageSource, operation: ProcessingOperation) -> bytes:
        """Run a single-output operation and return the encoded result."""
        match operation:
            case Resize():
                return self.resize(
                    source, operation.width, operation.height, operation.fit, operation.quality
                )
            case Thumbnail():
                return self.thumbnail(source, operation.size, operation.quality)
            case Optimize():
                return self.optimize(source, operation.max_width, operation.max_height)
            case Watermark():
                return self.watermark(source, Path(operation.mark_path))
            case ConvertFormat():
                return self.convert_format(source, operation.format)
            case GenerateSizes():
                raise UnsupportedOperationError(
                    "generate_sizes produces several outputs and cannot run as a single step"
                )
            case Compress() | ExtractAudio() | GeneratePreview():
                raise UnsupportedOperationError(
                    f"'{operation.name}' is a video operation and does not apply to images"
                )
            case _:
                assert_never(operation)

    def batch_process(
        self,
        input_dir: Path,
        output_dir: Path,
        operations: Sequence[ProcessingOperation],
    ) -> BatchResult:
        """Chain ``operations`` over every image in ``input_dir``.

        Each operation consumes the previous one's output and the final bytes
        are written to ``output_dir`` under the original filename, even when a
        step changed the encoding: ``photo.png`` followed by a JPEG-producing
        step holds JPEG bytes. A trailing GenerateSizes writes
        ``<base>_<suffix>.<ext>`` variants instead.

        Sources sharing a stem (``photo.jpg``, ``photo.png``) would share
        variant names; only the first in name order is processed, the others
        fail with OutputCollisionError.
        """
        sources = list_media_files(input_dir, IMAGE_EXTENSIONS)
        collisions = stem_collisions(sources)
        output_dir.mkdir(parents=True, exist_ok=True)
        Log.info(f"Image batch: {len(sources)} files from {input_dir}")
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
        chain = list(operations)
        sizes = chain.pop() if chain and isinstance(chain[-1], GenerateSizes) else None

        data = source.read_bytes()
        for operation in chain:
            data = self.apply(data, operation)

        if sizes is None:
            target = output_dir / source.name
            target.write_bytes(data)
            operation_name = "+".join(op.name for op in chain) or "copy"
            return [DerivedArtifact(key=str(target), source_name=source.name, operation=operation_name)]

        artifacts: list[DerivedArtifact] = []
        for variant in self.generate_sizes(data, sizes.sizes):
            target = output_dir / variant_filename(source.stem, variant.suffix, self.output_extension)
            target.write_bytes(variant.data)
            artifacts.append(
                DerivedArtifact(key=str(target), source_name=source.name, operation=sizes.name)
            )
        return artifacts

    @classmethod
    def _normalize_format(cls, fmt: str) -> str:
        normalized = fmt.lower().lstrip(".")
        if normalized == "jpg":
            normalized = "jpeg"
        if normalized not in cls.FORMAT_EXTENSIONS:
            raise UnsupportedFormatError(
                f"Unsupported image format '{fmt}'. Choose from: {sorted(cls.FORMAT_EXTENSIONS)}"
            )
        return normalized

    @staticmethod
    def _encode(
        image: Image.Image,
        fmt: str,
        *,
        quality: int = 80,
        progressive: bool = False,
        compress_level: int = 6,
    ) -> bytes:
        buf = io.BytesIO()
        if fmt == "jpeg":
            _flatten(image).save(
                buf, format="JPEG", quality=quality, progressive=progressive, optimize=True
            )
        elif fmt == "png":
            if image.mode not in ("1", "L", "LA", "P", "RGB", "RGBA", "I"):
                image = image.convert("RGBA")
            image.save(buf, format="PNG", compress_level=compress_level)
        elif fmt == "webp":
            if image.mode not in ("RGB", "RGBA"):
                image = image.convert("RGBA" if _has_alpha(image) else "RGB")
            image.save(buf, format="WEBP", quality=quality)
        else:
            raise UnsupportedFormatError(f"Unsupported image format '{fmt}'")
        return buf.getvalue()


def _has_alpha(image: Image.Image) -> bool:
    return "A" in image.getbands() or "transparency" in image.info


def _flatten(image: Image.Image) -> Image.Image:
    """Drop transparency onto a white background for formats without alpha."""
    if not _has_alpha(image):
        return image if image.mode in ("RGB", "L") else image.convert("RGB")
    rgba = image.convert("RGBA")
    background = Image.new("RGB", rgba.size, (255, 255, 255))
    background.paste(rgba, mask=rgba.getchannel("A"))
    return background


def build_image_processor(settings: Settings) -> ImageProcessor:
    """Build an ImageProcessor from application settings."""
    return ImageProcessor(
        output_format=settings.image_output_format,
        quality=settings.image_quality,
        thumbnail_quality=settings.thumbnail_quality,
        optimize_max_width=settings.optimize_max_width,
        optimize_max_height=settings.optimize_max_height,
        batch=BatchCoordinator(max_workers=settings.batch_max_workers),
    )
