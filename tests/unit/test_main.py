from pathlib import Path

import pytest

from mediaforge.config.settings import Settings
from mediaforge.main import DEFAULT_OPERATIONS, main, run_batch
from mediaforge.processing.operations import Resize


def _make_settings(input_dir: Path, output_dir: Path, **overrides: object) -> Settings:
    return Settings(
        batch_input_dir=str(input_dir),
        batch_output_dir=str(output_dir),
        **overrides,  # type: ignore[arg-type]
    )


class TestRunBatch:
    def test_default_image_operations(self, image_dir: Path, tmp_path: Path) -> None:
        out = tmp_path / "out"

        result = run_batch(_make_settings(image_dir, out))

        assert len(result.succeeded) == 9
        assert len(result.failed) == 1
        assert (out / "photo_0_thumb.jpg").is_file()
        assert (out / "photo_0_large.jpg").is_file()

    def test_explicit_operations(self, image_dir: Path, tmp_path: Path) -> None:
        out = tmp_path / "out"

        run_batch(_make_settings(image_dir, out), [Resize(width=64, height=64)])

        assert (out / "photo_0.jpg").is_file()

    def test_requires_directories(self) -> None:
        with pytest.raises(ValueError, match="must be set"):
            run_batch(Settings())

    def test_unknown_media_type(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Unknown batch media type"):
            run_batch(_make_settings(tmp_path, tmp_path, batch_media_type="audio"))

    def test_default_operation_table(self) -> None:
        assert set(DEFAULT_OPERATIONS) == {"image", "video"}


class TestMain:
    def test_exits_non_zero_when_items_fail(
        self, monkeypatch: pytest.MonkeyPatch, image_dir: Path, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("BATCH_INPUT_DIR", str(image_dir))
        monkeypatch.setenv("BATCH_OUTPUT_DIR", str(tmp_path / "out"))

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1

    def test_clean_batch_returns_normally(
        self, monkeypatch: pytest.MonkeyPatch, image_dir: Path, tmp_path: Path
    ) -> None:
        (image_dir / "broken.jpg").unlink()
        monkeypatch.setenv("BATCH_INPUT_DIR", str(image_dir))
        monkeypatch.setenv("BATCH_OUTPUT_DIR", str(tmp_path / "out"))

        main()

        assert (tmp_path / "out" / "photo_8_medium.jpg").is_file()
