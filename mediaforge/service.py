"""Upload-to-artifact flow: validate, store the original, derive renditions."""

import tempfile
from collections.abc import Sequence
from pathlib import Path, PurePosixPath

from mediaforge.config.settings import Settings
from mediaforge.image.inspector import probe_image
from mediaforge.image.processor import ImageProcessor, build_image_processor, variant_filename
from mediaforge.logging.logger import Log
from mediaforge.processing.exceptions import ProcessingError, UnsupportedOperationError
from mediaforge.processing.models import DerivedArtifact
from mediaforge.processing.operations import GenerateSizes, ProcessingOperation
from mediaforge.processing.publisher import ArtifactPublisher
from mediaforge.storage.base import BaseBlobStore
from mediaforge.storage.factory import BlobStoreFactory
from mediaforge.validation.factory import FileValidatorFactory
from mediaforge.validation.models import UploadCandidate, ValidatedFile
from mediaforge.validation.validator import FileValidator
from mediaforge.video.processor import VideoProcessor, build_video_processor


class MediaService:
    """Coordinates validation, storage and processing for stored uploads."""

    def __init__(
        self,
        *,
        validator: FileValidator,
        store: BaseBlobStore,
        image_processor: ImageProcessor,
        video_processor: VideoProcessor | None = None,
    ) -> None:
        self._validator = validator
        self._store = store
        self._images = image_processor
        self._videos = video_processor
        self._publisher = ArtifactPublisher(store)

    def ingest(self, candidate: UploadCandidate) -> ValidatedFile:
        """Validate an upload and store the original under its secure filename.

        Raises:
            ValidationError: if the upload is rejected; nothing is stored.
        """
        validated = self._validator.validate(candidate)
        self._store.put(validated.secure_filename, candidate.data)
        return validated

    def derive_image(
        self,
        validated: ValidatedFile,
        operations: Sequence[ProcessingOperation],
    ) -> list[DerivedArtifact]:
        """Apply each operation to the stored original, publishing one artifact per output.

        Operations are independent of each other. A failing operation yields a
        failed artifact and does not stop the others.
        """
        if not validated.mimetype.startswith("image/"):
            raise UnsupportedOperationError(f"{validated.secure_filename} is not an image")
        original = self._store.get(validated.secure_filename)
        base = PurePosixPath(validated.secure_filename).stem

        artifacts: list[DerivedArtifact] = []
        for operation in operations:
            try:
                if isinstance(operation, GenerateSizes):
                    for variant in self._images.generate_sizes(original, operation.sizes):
                        key = variant_filename(base, variant.suffix, self._images.output_extension)
                        artifacts.append(self._publish(validated, operation.name, key, variant.data))
                    continue
                data = self._images.apply(original, operation)
                key = variant_filename(base, operation.name, _extension_of(data))
                artifacts.append(self._publish(validated, operation.name, key, data))
            except ProcessingError as exc:
                Log.error(f"{operation.name} failed for {validated.secure_filename}: {exc}")
                artifacts.append(_failed(validated, operation.name, str(exc)))
        return artifacts

    def derive_video(
        self,
        validated: ValidatedFile,
        operations: Sequence[ProcessingOperation],
    ) -> list[DerivedArtifact]:
        """Run video operations on a local copy of the stored original and publish outputs."""
        if self._videos is None:
            raise UnsupportedOperationError("No video processor configured")
        if not validated.mimetype.startswith("video/"):
            raise UnsupportedOperationError(f"{validated.secure_filename} is not a video")

        artifacts: list[DerivedArtifact] = []
        with tempfile.TemporaryDirectory(prefix="mediaforge-") as workdir:
            work = Path(workdir)
            source = work / validated.secure_filename
            source.write_bytes(self._store.get(validated.secure_filename))
            outputs = work / "out"
            outputs.mkdir()
            for operation in operations:
                try:
                    produced = self._videos.apply(source, outputs, operation)
                except ProcessingError as exc:
                    Log.error(f"{operation.name} failed for {validated.secure_filename}: {exc}")
                    artifacts.append(_failed(validated, operation.name, str(exc)))
                    continue
                artifacts.append(
                    self._publish(validated, operation.name, produced.name, produced.read_bytes())
                )
        return artifacts

    def _publish(
        self, validated: ValidatedFile, operation: str, key: str, data: bytes
    ) -> DerivedArtifact:
        return self._publisher.publish(validated.secure_filename, operation, key, data)


def _failed(validated: ValidatedFile, operation: str, error: str) -> DerivedArtifact:
    return DerivedArtifact(
        key="",
        source_name=validated.secure_filename,
        operation=operation,
        success=False,
        error=error,
    )


def _extension_of(data: bytes) -> str:
    fmt = (probe_image(data).format or "").lower()
    return ImageProcessor.FORMAT_EXTENSIONS.get(fmt, fmt or "bin")


def build_media_service(settings: Settings) -> MediaService:
    """Build a MediaService with all adapters configured from settings."""
    return MediaService(
        validator=FileValidatorFactory.create(settings),
        store=BlobStoreFactory.create(settings),
        image_processor=build_image_processor(settings),
        video_processor=build_video_processor(settings),
    )
