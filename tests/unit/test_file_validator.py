import io
from unittest.mock import MagicMock

import pytest
from PIL import Image

from mediaforge.validation.exceptions import (
    CorruptedFileError,
    ImageTooLargeError,
    ImageTooSmallError,
    MaliciousContentError,
    SizeExceededError,
    UnsupportedTypeError,
)
from mediaforge.validation.models import UploadCandidate, ValidationPolicy
from mediaforge.validation.scanner import BaseContentScanner
from mediaforge.validation.validator import FileValidator

_MB = 1024 * 1024


def _candidate(
    data: bytes,
    mimetype: str = "image/jpeg",
    filename: str = "photo.jpg",
    size: int | None = None,
) -> UploadCandidate:
    return UploadCandidate(
        data=data,
        mimetype=mimetype,
        size=len(data) if size is None else size,
        filename=filename,
    )


class TestTypeCheck:
    @pytest.mark.parametrize(
        "mimetype",
        ["application/x-msdownload", "image/svg+xml", "text/html", "application/zip", ""],
    )
    def test_rejects_types_outside_allow_lists(self, mimetype: str) -> None:
        validator = FileValidator()

        with pytest.raises(UnsupportedTypeError, match="not allowed"):
            validator.validate(_candidate(b"anything", mimetype=mimetype))

    def test_mimetype_match_is_case_insensitive(self) -> None:
        validator = FileValidator()

        result = validator.validate(_candidate(b"plain text", mimetype="TEXT/PLAIN", filename="a.txt"))

        assert result.mimetype == "text/plain"

    def test_type_check_runs_before_size_check(self) -> None:
        validator = FileValidator()

        with pytest.raises(UnsupportedTypeError):
            validator.validate(_candidate(b"x", mimetype="application/zip", size=500 * _MB))


class TestSizeCheck:
    @pytest.mark.parametrize(
        ("mimetype", "limit_mb"),
        [
            ("image/png", 5),
            ("application/pdf", 10),
            ("video/mp4", 50),
            ("audio/mpeg", 20),
        ],
    )
    def test_rejects_declared_size_over_category_limit(self, mimetype: str, limit_mb: int) -> None:
        validator = FileValidator()

        with pytest.raises(SizeExceededError, match=rf"exceeds {limit_mb}\.0MB limit"):
            validator.validate(_candidate(b"x", mimetype=mimetype, size=limit_mb * _MB + 1))

    def test_error_message_is_human_readable(self) -> None:
        validator = FileValidator()

        with pytest.raises(SizeExceededError) as exc_info:
            validator.validate(_candidate(b"x", mimetype="application/pdf", size=11 * _MB))

        assert str(exc_info.value) == "File size exceeds 10.0MB limit"

    def test_actual_length_counts_when_larger_than_declared(self) -> None:
        policy = ValidationPolicy(max_sizes={"document": 10}, require_malware_scan=False)
        validator = FileValidator(policy=policy)

        with pytest.raises(SizeExceededError):
            validator.validate(_candidate(b"x" * 11, mimetype="text/plain", size=1))

    def test_accepts_size_at_limit(self) -> None:
        policy = ValidationPolicy(max_sizes={"document": 10})
        validator = FileValidator(policy=policy)

        result = validator.validate(_candidate(b"x" * 10, mimetype="text/plain", filename="a.txt"))

        assert result.size == 10


class TestImageIntegrity:
    @pytest.mark.parametrize(("width", "height"), [(10, 10), (640, 480), (5000, 10), (10, 5000)])
    def test_accepts_images_within_bounds(self, make_image, width: int, height: int) -> None:
        validator = FileValidator()

        result = validator.validate(_candidate(make_image(width, height, "PNG"), "image/png", "a.png"))

        assert result.image_metadata is not None
        assert (result.image_metadata.width, result.image_metadata.height) == (width, height)

    @pytest.mark.parametrize(("width", "height"), [(9, 100), (100, 9), (5, 5)])
    def test_rejects_too_small(self, make_image, width: int, height: int) -> None:
        validator = FileValidator()

        with pytest.raises(ImageTooSmallError, match="too small"):
            validator.validate(_candidate(make_image(width, height, "PNG"), "image/png"))

    @pytest.mark.parametrize(("width", "height"), [(5001, 10), (10, 5001)])
    def test_rejects_too_large(self, make_image, width: int, height: int) -> None:
        validator = FileValidator()

        with pytest.raises(ImageTooLargeError, match="too large"):
            validator.validate(_candidate(make_image(width, height, "PNG"), "image/png"))

    def test_rejects_undecodable_bytes(self) -> None:
        validator = FileValidator()

        with pytest.raises(CorruptedFileError, match="corrupted"):
            validator.validate(_candidate(b"\xff\xd8\xff\xe0garbage", "image/jpeg"))

    def test_rejects_truncated_image(self, gradient_jpeg_bytes: bytes) -> None:
        validator = FileValidator()
        truncated = gradient_jpeg_bytes[: len(gradient_jpeg_bytes) // 2]

        with pytest.raises(CorruptedFileError):
            validator.validate(_candidate(truncated, "image/jpeg"))

    def test_metadata_reports_pixel_statistics(self, make_image) -> None:
        validator = FileValidator()

        result = validator.validate(
            _candidate(make_image(64, 32, "PNG", color=(0, 0, 255, 128), mode="RGBA"), "image/png")
        )

        metadata = result.image_metadata
        assert metadata is not None
        assert metadata.format == "png"
        assert metadata.channels == 4
        assert metadata.has_alpha is True
        assert metadata.dominant_color == (8, 8, 248)
        assert metadata.entropy == 0.0

    def test_skips_image_checks_when_disabled(self) -> None:
        validator = FileValidator(policy=ValidationPolicy(require_image_validation=False))

        result = validator.validate(_candidate(b"not really a png", "image/png", "x.png"))

        assert result.image_metadata is None

    def test_non_image_has_no_metadata(self) -> None:
        validator = FileValidator()

        result = validator.validate(_candidate(b"%PDF-1.7 body", "application/pdf", "r.pdf"))

        assert result.image_metadata is None


class TestMaliciousContent:
    @pytest.mark.parametrize(
        "payload",
        [
            b"<script>alert(1)</script>",
            b"<SCRIPT src=x>",
            b"see JavaScript:void(0)",
            b"x = EVAL(atob('...'))",
            b"<?PHP system($_GET['c']); ?>",
        ],
    )
    def test_rejects_signatures_case_insensitively(self, payload: bytes) -> None:
        validator = FileValidator()

        with pytest.raises(MaliciousContentError):
            validator.validate(_candidate(payload, "text/plain", "x.txt"))

    def test_only_inspects_leading_bytes(self) -> None:
        validator = FileValidator()
        data = b"a" * 200 + b"<script>"

        result = validator.validate(_candidate(data, "text/plain", "x.txt"))

        assert result.size == 208

    def test_scan_can_be_disabled(self) -> None:
        validator = FileValidator(policy=ValidationPolicy(require_malware_scan=False))

        result = validator.validate(_candidate(b"<script>", "text/plain", "x.txt"))

        assert result.mimetype == "text/plain"

    def test_uses_injected_scanner(self) -> None:
        scanner = MagicMock(spec=BaseContentScanner)
        scanner.scan.side_effect = MaliciousContentError("engine says no")
        validator = FileValidator(scanner=scanner)

        with pytest.raises(MaliciousContentError, match="engine says no"):
            validator.validate(_candidate(b"clean", "text/plain", "x.txt"))
        scanner.scan.assert_called_once_with(b"clean")

    def test_scan_runs_after_image_integrity(self) -> None:
        scanner = MagicMock(spec=BaseContentScanner)
        validator = FileValidator(scanner=scanner)

        with pytest.raises(CorruptedFileError):
            validator.validate(_candidate(b"<script>", "image/png"))
        scanner.scan.assert_not_called()


class TestValidatedFile:
    def test_success_produces_secure_name_and_size(self, sample_jpeg_bytes: bytes) -> None:
        validator = FileValidator()

        result = validator.validate(_candidate(sample_jpeg_bytes, filename="My Photo.JPG"))

        assert result.secure_filename.startswith("My_Photo_")
        assert result.secure_filename.endswith(".jpg")
        assert result.size == len(sample_jpeg_bytes)
        assert result.mimetype == "image/jpeg"

    def test_validated_file_is_immutable(self, sample_jpeg_bytes: bytes) -> None:
        result = FileValidator().validate(_candidate(sample_jpeg_bytes))

        with pytest.raises(AttributeError):
            result.size = 1  # type: ignore[misc]

    def test_call_policy_overrides_default(self, sample_jpeg_bytes: bytes) -> None:
        validator = FileValidator()
        strict = ValidationPolicy(max_sizes={"image": 10})

        with pytest.raises(SizeExceededError):
            validator.validate(_candidate(sample_jpeg_bytes), strict)


class TestErrorPayload:
    def test_to_dict_carries_code_and_message(self) -> None:
        validator = FileValidator()

        with pytest.raises(UnsupportedTypeError) as exc_info:
            validator.validate(_candidate(b"x", mimetype="application/zip"))

        assert exc_info.value.to_dict() == {
            "code": "unsupported_type",
            "message": "File type 'application/zip' is not allowed",
        }


class TestPixelLimit:
    def test_image_over_pillow_pixel_limit_is_too_large(self) -> None:
        # 196M pixels: above Pillow's decompression bomb limit, tiny on disk.
        buf = io.BytesIO()
        Image.new("1", (14000, 14000)).save(buf, format="PNG")
        data = buf.getvalue()
        validator = FileValidator()

        with pytest.raises(ImageTooLargeError) as exc_info:
            validator.validate(_candidate(data, "image/png", "huge.png"))

        assert exc_info.value.to_dict()["code"] == "too_large"
