"""Content scanners run by FileValidator.

``SignatureScanner`` is a best-effort pre-filter: it looks for a handful of
script signatures at the start of the upload. Passing it is not a security
guarantee. Deployments that need real malware detection should provide a
``BaseContentScanner`` backed by a scanning engine.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from mediaforge.validation.exceptions import MaliciousContentError

DEFAULT_SIGNATURES: tuple[str, ...] = ("<script", "javascript:", "eval(", "<?php")


class BaseContentScanner(ABC):
    """Contract for upload content scanners."""

    @abstractmethod
    def scan(self, data: bytes) -> None:
        """Inspect ``data``.

        Raises:
            MaliciousContentError: if the content is flagged.
        """


class SignatureScanner(BaseContentScanner):
    """Case-insensitive signature match over the first bytes of an upload."""

    def __init__(
        self,
        signatures: Iterable[str] = DEFAULT_SIGNATURES,
        head_bytes: int = 100,
    ) -> None:
        self._signatures = tuple(s.lower() for s in signatures)
        self._head_bytes = head_bytes

    def scan(self, data: bytes) -> None:
        head = data[: self._head_bytes].decode("utf-8", errors="ignore").lower()
        for signature in self._signatures:
            if signature in head:
                raise MaliciousContentError(
                    f"Potentially malicious content detected: '{signature}'"
                )


class NullScanner(BaseContentScanner):
    """Accepts everything; for deployments that scan elsewhere."""

    def scan(self, data: bytes) -> None:
        return None
