"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, Optional, Tuple
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bytehttp import HTTPServer, ServerConfig
from bytehttp.core.connection import BytesSource


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/abc HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a body."""
    body = b"12345"
    return (
        b"POST /files/number HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
        + body
    )


@pytest.fixture
def files_root(tmp_path: Path) -> Path:
    """Empty directory used as the /files/ root."""
    root = tmp_path / "files"
    root.mkdir()
    return root


@pytest.fixture
def config(files_root: Path) -> ServerConfig:
    """Test server configuration with /files/ enabled."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        directory=files_root,
        timeout=5.0,
        log_level="WARNING",
    )


class FakeConnection(BytesSource):
    """
    In-memory stand-in for Connection.

    Reads come from the given bytes, writes are collected in .sent.
    """

    def __init__(self, data: bytes, chunk_size: Optional[int] = None):
        super().__init__(data, chunk_size)
        self.id = "test0000"
        self.sent = bytearray()
        self.closed = False

    def send_all(self, data: bytes) -> None:
        self.sent += data

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


@pytest.fixture
def fake_connection():
    """Factory for FakeConnection objects."""
    return FakeConnection


class TestServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def address(self) -> Tuple[str, int]:
        return self.server.address

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        if self.server.is_running:
            self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes and return everything the server wrote back."""
        with socket.create_connection(self.address, timeout=5.0) as sock:
            sock.sendall(raw)
            chunks = []
            while True:
                try:
                    chunk = sock.recv(4096)
                except ConnectionResetError:
                    break  # Server closed with our bytes still unread
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A live server on a free port, serving files from files_root."""
    test_srv = TestServer(HTTPServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()


@pytest.fixture
def test_server_without_directory(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A live server with /files/ disabled."""
    from dataclasses import replace

    test_srv = TestServer(HTTPServer(replace(config, directory=None)))
    test_srv.start()

    yield test_srv

    test_srv.stop()
