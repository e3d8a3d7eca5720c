from mediaforge.image.inspector import compute_metadata, load_pixels, probe_image
from mediaforge.image.models import ImageMetadata
from mediaforge.logging.logger import Log
from mediaforge.processing.exceptions import CodecFailureError, ImageDimensionLimitError
from mediaforge.validation.exceptions import (
    CorruptedFileError,
    ImageTooLargeError,
    ImageTooSmallError,
    SizeExceededError,
    UnsupportedTypeError,
)
from mediaforge.validation.filename import generate_secure_filename
from mediaforge.validation.models import UploadCandidate, ValidatedFile, ValidationPolicy
from mediaforge.validation.scanner import BaseContentScanner, SignatureScanner

_MB = 1024 * 1024


class FileValidator:
    """Gatekeeper turning raw uploads into ValidatedFile descriptors.

    Checks run in order: type, size, image integrity, content scan. The
    first failing check raises; nothing is written anywhere.
    """

    def __init__(
        self,
        policy: ValidationPolicy | None = None,
        scanner: BaseContentScanner | None = None,
    ) -> None:
        self._policy = policy if policy is not None else ValidationPolicy()
        self._scanner = scanner if scanner is not None else SignatureScanner()

    def validate(
        self,
        candidate: UploadCandidate,
        policy: ValidationPolicy | None = None,
    ) -> ValidatedFile:
        """Validate ``candidate`` against ``policy`` (or the default policy).

        Raises:
            ValidationError: the subclass names the failed check.
        """
        policy = policy if policy is not None else self._policy
        mimetype = candidate.mimetype.lower()

        self._check_type(mimetype, policy)
        self._check_size(candidate, mimetype, policy)

        image_metadata = None
        if policy.category_of(mimetype) == "image" and policy.require_image_validation:
            image_metadata = self._check_image(candidate.data, policy)

        if policy.require_malware_scan:
            self._scanner.scan(candidate.data)

        validated = ValidatedFile(
            secure_filename=generate_secure_filename(candidate.filename),
            mimetype=mimetype,
            size=len(candidate.data),
            image_metadata=image_metadata,
        )
        Log.info(
            f"Accepted upload '{candidate.filename}' as {validated.secure_filename} "
            f"({mimetype}, {validated.size} bytes)"
        )
        return validated

    @staticmethod
    def _check_type(mimetype: str, policy: ValidationPolicy) -> None:
        if not policy.is_allowed(mimetype):
            raise UnsupportedTypeError(f"File type '{mimetype}' is not allowed")

    @staticmethod
    def _check_size(candidate: UploadCandidate, mimetype: str, policy: ValidationPolicy) -> None:
        limit = policy.max_size_for(mimetype)
        size = max(candidate.size, len(candidate.data))
        if size > limit:
            raise SizeExceededError(f"File size exceeds {limit / _MB:.1f}MB limit")

    @staticmethod
    def _check_image(data: bytes, policy: ValidationPolicy) -> ImageMetadata:
        try:
            image = probe_image(data)
        except ImageDimensionLimitError as exc:
            raise ImageTooLargeError(
                f"Image is too large (maximum {policy.max_dimension}x{policy.max_dimension}px): {exc}"
            ) from exc
        except CodecFailureError as exc:
            raise CorruptedFileError(f"Invalid or corrupted image: {exc}") from exc

        width, height = image.size
        if width < policy.min_dimension or height < policy.min_dimension:
            raise ImageTooSmallError(
                f"Image {width}x{height} is too small "
                f"(minimum {policy.min_dimension}x{policy.min_dimension}px)"
            )
        if width > policy.max_dimension or height > policy.max_dimension:
            raise ImageTooLargeError(
                f"Image {width}x{height} is too large "
                f"(maximum {policy.max_dimension}x{policy.max_dimension}px)"
            )

        try:
            return compute_metadata(load_pixels(image))
        except CodecFailureError as exc:
            raise CorruptedFileError(f"Invalid or corrupted image: {exc}") from exc
