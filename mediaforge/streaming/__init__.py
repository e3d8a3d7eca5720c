from mediaforge.streaming.server import StreamResponse, StreamServer, build_stream_server

__all__ = ["StreamResponse", "StreamServer", "build_stream_server"]
