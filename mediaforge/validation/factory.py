from typing import ClassVar

from mediaforge.config.settings import Settings
from mediaforge.validation.models import ValidationPolicy
from mediaforge.validation.scanner import BaseContentScanner, NullScanner, SignatureScanner
from mediaforge.validation.validator import FileValidator


class FileValidatorFactory:
    """Creates a FileValidator with the configured policy and scanner."""

    SCANNERS: ClassVar[dict[str, type[BaseContentScanner]]] = {
        "signature": SignatureScanner,
        "none": NullScanner,
    }

    @classmethod
    def create(cls, settings: Settings) -> FileValidator:
        name = settings.content_scanner.lower()
        scanner_cls = cls.SCANNERS.get(name)
        if scanner_cls is None:
            raise ValueError(
                f"Unknown content scanner '{name}'. Choose from: {list(cls.SCANNERS)}"
            )
        return FileValidator(policy=ValidationPolicy.from_settings(settings), scanner=scanner_cls())
