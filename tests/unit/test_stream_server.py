import inspect
from pathlib import Path

import pytest

from mediaforge.config.settings import Settings
from mediaforge.streaming.server import StreamServer, build_stream_server

_SIZE = 1000


@pytest.fixture()
def media_file(tmp_path: Path) -> Path:
    path = tmp_path / "clip.mp4"
    path.write_bytes(bytes(i % 256 for i in range(_SIZE)))
    return path


class TestFullResponse:
    def test_no_range_serves_whole_file(self, media_file: Path) -> None:
        response = StreamServer().serve(media_file)

        assert response.status == 200
        assert response.headers == {
            "Content-Length": "1000",
            "Content-Type": "video/mp4",
            "Accept-Ranges": "bytes",
        }
        assert response.read() == media_file.read_bytes()

    def test_explicit_content_type_wins(self, media_file: Path) -> None:
        response = StreamServer().serve(media_file, content_type="video/webm")

        assert response.headers["Content-Type"] == "video/webm"

    def test_unknown_extension_is_octet_stream(self, tmp_path: Path) -> None:
        path = tmp_path / "blob.unknownext"
        path.write_bytes(b"abc")

        response = StreamServer().serve(path)

        assert response.headers["Content-Type"] == "application/octet-stream"

    def test_small_chunks_reassemble(self, media_file: Path) -> None:
        response = StreamServer(chunk_size=7).serve(media_file)

        chunks = list(response.body)

        assert len(chunks) == 143
        assert b"".join(chunks) == media_file.read_bytes()

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.mp4"
        path.write_bytes(b"")

        response = StreamServer().serve(path)

        assert response.status == 200
        assert response.read() == b""


class TestPartialResponse:
    def test_first_hundred_bytes(self, media_file: Path) -> None:
        response = StreamServer().serve(media_file, "bytes=0-99")

        body = response.read()
        assert response.status == 206
        assert response.headers["Content-Range"] == "bytes 0-99/1000"
        assert response.headers["Content-Length"] == "100"
        assert response.headers["Accept-Ranges"] == "bytes"
        assert body == media_file.read_bytes()[:100]

    def test_open_ended_range(self, media_file: Path) -> None:
        response = StreamServer(chunk_size=64).serve(media_file, "bytes=990-")

        assert response.headers["Content-Range"] == "bytes 990-999/1000"
        assert response.read() == media_file.read_bytes()[990:]

    def test_suffix_range(self, media_file: Path) -> None:
        response = StreamServer().serve(media_file, "bytes=-10")

        assert response.status == 206
        assert response.read() == media_file.read_bytes()[-10:]

    def test_body_length_matches_header(self, media_file: Path) -> None:
        response = StreamServer(chunk_size=33).serve(media_file, "bytes=100-499")

        assert len(response.read()) == int(response.headers["Content-Length"]) == 400


class TestErrorResponses:
    def test_range_past_end_is_416(self, media_file: Path) -> None:
        response = StreamServer().serve(media_file, "bytes=1500-")

        assert response.status == 416
        assert response.headers["Content-Range"] == "bytes */1000"
        assert response.read() == b""

    def test_missing_file_is_404(self, tmp_path: Path) -> None:
        response = StreamServer().serve(tmp_path / "gone.mp4")

        assert response.status == 404
        assert response.read() == b""

    def test_directory_is_404(self, tmp_path: Path) -> None:
        assert StreamServer().serve(tmp_path).status == 404

    def test_rejects_zero_chunk_size(self) -> None:
        with pytest.raises(ValueError):
            StreamServer(chunk_size=0)


class TestHandleLifetime:
    def test_file_is_not_opened_before_iteration(self, media_file: Path) -> None:
        response = StreamServer().serve(media_file, "bytes=0-99")

        assert inspect.getgeneratorstate(response.body) == inspect.GEN_CREATED

    def test_close_mid_stream_releases_file(self, media_file: Path) -> None:
        response = StreamServer(chunk_size=10).serve(media_file)

        first = next(response.body)
        response.close()

        assert first == media_file.read_bytes()[:10]
        assert response.body.gi_frame is None
        with pytest.raises(StopIteration):
            next(response.body)

    def test_concurrent_responses_are_independent(self, media_file: Path) -> None:
        server = StreamServer(chunk_size=10)
        first = server.serve(media_file, "bytes=0-19")
        second = server.serve(media_file, "bytes=500-519")

        a1 = next(first.body)
        b1 = next(second.body)
        a2 = next(first.body)

        assert a1 + a2 == media_file.read_bytes()[:20]
        assert b1 == media_file.read_bytes()[500:510]
        first.close()
        second.close()


def test_build_stream_server_uses_configured_chunk_size(media_file: Path) -> None:
    server = build_stream_server(Settings(stream_chunk_size=250))

    chunks = list(server.serve(media_file).body)

    assert [len(c) for c in chunks] == [250, 250, 250, 250]
