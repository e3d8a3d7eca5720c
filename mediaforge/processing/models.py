from dataclasses import dataclass, field


@dataclass(frozen=True)
class DerivedArtifact:
    """Output of one processing operation.

    ``source_name`` refers back to the file the artifact was derived from
    (the secure filename for stored uploads); the artifact does not own it.
    """

    key: str
    source_name: str
    operation: str
    success: bool = True
    error: str | None = None


@dataclass(frozen=True)
class BatchItemResult:
    """Outcome for one file of a batch."""

    source_name: str
    success: bool
    artifacts: list[DerivedArtifact] = field(default_factory=list)
    error: str | None = None


@dataclass
class BatchResult:
    """Per-item outcomes of a batch run, in input order."""

    items: list[BatchItemResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[BatchItemResult]:
        return [item for item in self.items if item.success]

    @property
    def failed(self) -> list[BatchItemResult]:
        return [item for item in self.items if not item.success]
