import json
import subprocess
from pathlib import Path
from typing import Any

from mediaforge.logging.logger import Log
from mediaforge.processing.exceptions import CodecFailureError
from mediaforge.video.base import BaseCodec
from mediaforge.video.models import TranscodeParams

_STDERR_TAIL = 500


class FfmpegCodec(BaseCodec):
    """Codec capability backed by the ffmpeg and ffprobe command-line tools."""

    def __init__(
        self,
        *,
        ffmpeg_binary: str = "ffmpeg",
        ffprobe_binary: str = "ffprobe",
        timeout_seconds: int | None = None,
    ) -> None:
        self._ffmpeg = ffmpeg_binary
        self._ffprobe = ffprobe_binary
        self._timeout = timeout_seconds

    def probe(self, input_path: Path) -> dict[str, Any]:
        cmd = [
            self._ffprobe,
            "-v", "error",
            "-print_format", "json",
            "-show_format",
            "-show_streams",
            str(input_path),
        ]
        result = self._run(cmd)
        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as exc:
            raise CodecFailureError(f"Invalid ffprobe output for {input_path.name}: {exc}") from exc
        if not isinstance(data, dict):
            raise CodecFailureError(f"Invalid ffprobe output for {input_path.name}")
        return data

    def transcode(self, input_path: Path, output_path: Path, params: TranscodeParams) -> None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(input_path, output_path, params)
        Log.debug(f"Running: {' '.join(cmd)}")
        self._run(cmd)

    def build_command(
        self, input_path: Path, output_path: Path, params: TranscodeParams
    ) -> list[str]:
        cmd = [self._ffmpeg, "-y", "-hide_banner", "-loglevel", "error"]
        if params.start:
            cmd += ["-ss", params.start]
        cmd += ["-i", str(input_path)]
        if params.duration is not None:
            cmd += ["-t", f"{params.duration:g}"]

        if params.stream_copy:
            cmd += ["-c", "copy"]
        else:
            if params.no_video:
                cmd.append("-vn")
            else:
                if params.video_codec:
                    cmd += ["-c:v", params.video_codec]
                if params.video_bitrate:
                    cmd += ["-b:v", params.video_bitrate]
                if params.size:
                    cmd += ["-s", params.size]
                if params.preset:
                    cmd += ["-preset", params.preset]
            if params.no_audio:
                cmd.append("-an")
            else:
                if params.audio_codec:
                    cmd += ["-c:a", params.audio_codec]
                if params.audio_bitrate:
                    cmd += ["-b:a", params.audio_bitrate]

        if params.frames is not None:
            cmd += ["-frames:v", str(params.frames)]
        cmd.append(str(output_path))
        return cmd

    def _run(self, cmd: list[str]) -> subprocess.CompletedProcess[str]:
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise CodecFailureError(f"Codec binary not found: {cmd[0]}") from exc
        except subprocess.TimeoutExpired as exc:
            raise CodecFailureError(f"{cmd[0]} timed out after {self._timeout}s") from exc

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()[-_STDERR_TAIL:]
            raise CodecFailureError(
                f"{cmd[0]} exited with code {result.returncode}: {stderr or 'no output'}"
            )
        return result
