import re
from dataclasses import dataclass

from mediaforge.streaming.exceptions import RangeNotSatisfiableError

_RANGE_RE = re.compile(r"^\s*bytes\s*=\s*(\d*)\s*-\s*(\d*)\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class ByteRange:
    """Inclusive byte range within a resource."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1


def parse_range_header(header: str | None, file_size: int) -> ByteRange | None:
    """Resolve a ``Range`` header against a resource of ``file_size`` bytes.

    Returns None when there is no header or it is not a single ``bytes=``
    range, in which case the whole resource is served. ``bytes=-N`` selects
    the last N bytes. An end past the resource is clamped to its last byte.

    Raises:
        RangeNotSatisfiableError: if start > end or start >= file_size.
    """
    if not header:
        return None
    match = _RANGE_RE.match(header)
    if match is None:
        return None
    start_raw, end_raw = match.groups()
    if not start_raw and not end_raw:
        return None

    if not start_raw:
        suffix_length = int(end_raw)
        if suffix_length == 0 or file_size == 0:
            raise RangeNotSatisfiableError(
                f"Range '{header}' not satisfiable for {file_size} bytes", file_size
            )
        return ByteRange(start=max(0, file_size - suffix_length), end=file_size - 1)

    start = int(start_raw)
    end = int(end_raw) if end_raw else file_size - 1
    if start >= file_size or start > end:
        raise RangeNotSatisfiableError(
            f"Range '{header}' not satisfiable for {file_size} bytes", file_size
        )
    return ByteRange(start=start, end=min(end, file_size - 1))
