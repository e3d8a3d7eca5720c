from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from mediaforge.logging.logger import Log
from mediaforge.processing.exceptions import OutputCollisionError
from mediaforge.processing.models import BatchItemResult, BatchResult, DerivedArtifact

ItemHandler = Callable[[Path], list[DerivedArtifact]]


class BatchCoordinator:
    """Runs a handler over many source files, isolating failures per item."""

    def __init__(self, max_workers: int = 1) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._max_workers = max_workers

    def run(self, sources: Sequence[Path], handler: ItemHandler) -> BatchResult:
        """Apply ``handler`` to every source and collect per-item outcomes.

        A failing item is recorded with ``success=False`` and never stops the
        remaining items. Results keep the order of ``sources``.
        """
        Log.info(f"Batch started: {len(sources)} items, {self._max_workers} worker(s)")
        if self._max_workers == 1 or len(sources) <= 1:
            items = [self._run_one(source, handler) for source in sources]
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                items = list(pool.map(lambda s: self._run_one(s, handler), sources))
        result = BatchResult(items=items)
        Log.info(
            f"Batch finished: {len(result.succeeded)} succeeded, {len(result.failed)} failed"
        )
        return result

    @staticmethod
    def _run_one(source: Path, handler: ItemHandler) -> BatchItemResult:
        try:
            artifacts = handler(source)
        except Exception as exc:
            Log.exception(f"Batch item {source.name} failed: {exc}", source=source.name)
            return BatchItemResult(source_name=source.name, success=False, error=str(exc))
        return BatchItemResult(source_name=source.name, success=True, artifacts=artifacts)


def list_media_files(directory: Path, extensions: frozenset[str]) -> list[Path]:
    """Return files in ``directory`` whose suffix is in ``extensions``, sorted by name."""
    if not directory.is_dir():
        raise FileNotFoundError(f"Input directory not found: {directory}")
    return sorted(
        path
        for path in directory.iterdir()
        if path.is_file() and path.suffix.lower() in extensions
    )


def stem_collisions(sources: Sequence[Path]) -> dict[Path, Path]:
    """Map each source to the earlier source sharing its case-folded stem.

    Outputs are named after the stem, so ``clip.mp4`` and ``clip.mov`` would
    write the same files. Only the later sources appear as keys.
    """
    first_by_stem: dict[str, Path] = {}
    collisions: dict[Path, Path] = {}
    for source in sources:
        stem = source.stem.casefold()
        if stem in first_by_stem:
            collisions[source] = first_by_stem[stem]
        else:
            first_by_stem[stem] = source
    return collisions


def ensure_unique_stem(source: Path, collisions: dict[Path, Path]) -> None:
    """Raise if another source of the same batch already owns ``source``'s output names.

    Raises:
        OutputCollisionError: if ``source`` shares its stem with an earlier source.
    """
    owner = collisions.get(source)
    if owner is not None:
        raise OutputCollisionError(
            f"Output names for {source.name} collide with {owner.name}; rename one of them"
        )
