from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from mediaforge.video.models import TranscodeParams


class BaseCodec(ABC):
    """Contract for the external codec capability used by VideoProcessor."""

    @abstractmethod
    def probe(self, input_path: Path) -> dict[str, Any]:
        """Return container and stream information.

        The result follows the ffprobe JSON layout: a ``format`` mapping with
        ``duration``, ``size`` and ``bit_rate``, and a ``streams`` list whose
        entries carry ``codec_type``, ``codec_name``, ``width``, ``height``
        and ``r_frame_rate``.

        Raises:
            CodecFailureError: if the input cannot be probed.
        """

    @abstractmethod
    def transcode(self, input_path: Path, output_path: Path, params: TranscodeParams) -> None:
        """Write ``output_path`` from ``input_path`` as described by ``params``.

        Raises:
            CodecFailureError: if the codec invocation fails.
        """
