import re
import secrets
import string
import time
from pathlib import PurePosixPath

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_SAFE_EXTENSION = re.compile(r"^\.[a-z0-9]+$")
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
_SUFFIX_LENGTH = 6


def generate_secure_filename(original: str, *, now_ms: int | None = None) -> str:
    """Build a collision-resistant, filesystem-safe storage name.

    ``photo (1).JPG`` becomes ``photo__1__<unixMillis>_<random6>.jpg``.
    Extensions containing anything but ``[a-z0-9]`` are dropped.
    """
    original = original.replace("\\", "/")
    suffix = PurePosixPath(original).suffix
    base = original[: -len(suffix)] if suffix else original
    extension = suffix.lower() if _SAFE_EXTENSION.match(suffix.lower()) else ""

    safe_base = _UNSAFE_CHARS.sub("_", base) or "file"
    millis = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    random_part = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{safe_base}_{millis}_{random_part}{extension}"
