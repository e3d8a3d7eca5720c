from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from mediaforge.config.settings import Settings
from mediaforge.image.models import ImageMetadata

_MB = 1024 * 1024

DEFAULT_ALLOWED_TYPES: Mapping[str, frozenset[str]] = MappingProxyType({
    "image": frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"}),
    "document": frozenset({
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "text/plain",
    }),
    "video": frozenset({"video/mp4", "video/mpeg", "video/quicktime", "video/webm"}),
    "audio": frozenset({"audio/mpeg", "audio/wav", "audio/ogg", "audio/webm"}),
})

DEFAULT_MAX_SIZES: Mapping[str, int] = MappingProxyType({
    "image": 5 * _MB,
    "document": 10 * _MB,
    "video": 50 * _MB,
    "audio": 20 * _MB,
})


@dataclass(frozen=True)
class UploadCandidate:
    """Raw upload as received, before any check has run."""

    data: bytes
    mimetype: str
    size: int
    filename: str


@dataclass(frozen=True)
class ValidatedFile:
    """An accepted upload. Only FileValidator creates these."""

    secure_filename: str
    mimetype: str
    size: int
    image_metadata: ImageMetadata | None = None


@dataclass(frozen=True)
class ValidationPolicy:
    """Allow-lists, limits and toggles applied by FileValidator."""

    allowed_types: Mapping[str, frozenset[str]] = field(
        default_factory=lambda: DEFAULT_ALLOWED_TYPES
    )
    max_sizes: Mapping[str, int] = field(default_factory=lambda: DEFAULT_MAX_SIZES)
    default_max_size: int = 1 * _MB
    min_dimension: int = 10
    max_dimension: int = 5000
    require_image_validation: bool = True
    require_malware_scan: bool = True

    def category_of(self, mimetype: str) -> str | None:
        normalized = mimetype.lower()
        for category, types in self.allowed_types.items():
            if normalized in types:
                return category
        return None

    def is_allowed(self, mimetype: str) -> bool:
        return self.category_of(mimetype) is not None

    def max_size_for(self, mimetype: str) -> int:
        category = self.category_of(mimetype)
        if category is None:
            return self.default_max_size
        return self.max_sizes.get(category, self.default_max_size)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ValidationPolicy":
        return cls(
            max_sizes=MappingProxyType({
                "image": settings.upload_max_image_bytes,
                "document": settings.upload_max_document_bytes,
                "video": settings.upload_max_video_bytes,
                "audio": settings.upload_max_audio_bytes,
            }),
            default_max_size=settings.upload_max_other_bytes,
            min_dimension=settings.image_min_dimension,
            max_dimension=settings.image_max_dimension,
            require_image_validation=settings.require_image_validation,
            require_malware_scan=settings.require_malware_scan,
        )
