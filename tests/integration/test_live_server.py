"""
Integration tests against a running server over real sockets.
"""

import gzip
import socket
import threading
import time
from pathlib import Path


def read_all(sock: socket.socket) -> bytes:
    """Read until the server closes the connection."""
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


class TestRoutes:
    """One request per connection, checked byte for byte."""

    def test_root(self, test_server):
        """Test GET /."""
        assert test_server.request(b"GET / HTTP/1.1\r\n\r\n") == b"HTTP/1.1 200 OK\r\n\r\n"

    def test_echo(self, test_server):
        """Test GET /echo/<text>."""
        response = test_server.request(
            b"GET /echo/abc HTTP/1.1\r\nHost: localhost:4221\r\n\r\n"
        )

        assert response == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: text/plain\r\n"
            b"Content-Length: 3\r\n"
            b"\r\n"
            b"abc"
        )

    def test_echo_gzip(self, test_server):
        """Test gzip negotiation."""
        response = test_server.request(
            b"GET /echo/abc HTTP/1.1\r\nAccept-Encoding: invalid-1, gzip, invalid-2\r\n\r\n"
        )
        head, _, body = response.partition(b"\r\n\r\n")

        assert b"Content-Encoding: gzip" in head.split(b"\r\n")
        assert f"Content-Length: {len(body)}".encode() in head.split(b"\r\n")
        assert gzip.decompress(body) == b"abc"

    def test_user_agent(self, test_server):
        """Test GET /user-agent."""
        response = test_server.request(
            b"GET /user-agent HTTP/1.1\r\nUser-Agent: foobar/1.2.3\r\n\r\n"
        )
        assert response.endswith(b"Content-Length: 12\r\n\r\nfoobar/1.2.3")

    def test_not_found(self, test_server):
        """Test an unknown path."""
        response = test_server.request(b"GET /index.html HTTP/1.1\r\n\r\n")
        assert response == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_malformed_request_closes_silently(self, test_server):
        """Test that a bad request line gets no response bytes."""
        assert test_server.request(b"BREW /pot HTTP/1.1\r\n\r\n") == b""

    def test_server_survives_bad_request(self, test_server):
        """Test that a failed connection doesn't affect the next one."""
        test_server.request(b"garbage\r\n\r\n")

        assert test_server.request(b"GET / HTTP/1.1\r\n\r\n") == b"HTTP/1.1 200 OK\r\n\r\n"


class TestFiles:
    """File storage over the wire."""

    def test_post_then_get(self, test_server, files_root: Path):
        """Test creating a file and reading it back."""
        created = test_server.request(
            b"POST /files/number HTTP/1.1\r\n"
            b"Content-Type: application/octet-stream\r\n"
            b"Content-Length: 5\r\n"
            b"\r\n"
            b"12345"
        )
        assert created == b"HTTP/1.1 201 Created\r\n\r\n"
        assert (files_root / "number").read_bytes() == b"12345"

        response = test_server.request(b"GET /files/number HTTP/1.1\r\n\r\n")
        assert response == (
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: application/octet-stream\r\n"
            b"Content-Length: 5\r\n"
            b"\r\n"
            b"12345"
        )

    def test_post_twice(self, test_server):
        """Test that the second POST to a name conflicts."""
        request = b"POST /files/once HTTP/1.1\r\nContent-Length: 1\r\n\r\nx"

        assert test_server.request(request) == b"HTTP/1.1 201 Created\r\n\r\n"
        assert test_server.request(request) == b"HTTP/1.1 409 Conflict\r\n\r\n"

    def test_get_missing(self, test_server):
        """Test 404 for a missing file."""
        response = test_server.request(b"GET /files/non_existent HTTP/1.1\r\n\r\n")
        assert response == b"HTTP/1.1 404 Not Found\r\n\r\n"

    def test_without_directory(self, test_server_without_directory):
        """Test 503 when no root is configured."""
        response = test_server_without_directory.request(b"GET /files/foo HTTP/1.1\r\n\r\n")
        assert response == b"HTTP/1.1 503 Service Unavailable\r\n\r\n"


class TestConcurrency:
    """Several clients at once."""

    def test_parallel_clients(self, test_server):
        """Test that concurrent connections each get their own answer."""
        results = {}

        def client(n: int):
            results[n] = test_server.request(f"GET /echo/{n} HTTP/1.1\r\n\r\n".encode())

        threads = [threading.Thread(target=client, args=(n,)) for n in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10.0)

        for n in range(20):
            assert results[n].endswith(f"\r\n\r\n{n}".encode())

    def test_slow_client_does_not_block_others(self, test_server):
        """Test that a half-sent request doesn't stall other connections."""
        with socket.create_connection(test_server.address, timeout=5.0) as slow:
            slow.sendall(b"GET /echo/slow HTTP/1.1\r\n")

            assert test_server.request(b"GET / HTTP/1.1\r\n\r\n") == b"HTTP/1.1 200 OK\r\n\r\n"

            time.sleep(0.1)
            slow.sendall(b"\r\n")
            assert read_all(slow).endswith(b"\r\n\r\nslow")

    def test_request_split_across_writes(self, test_server):
        """Test a request body arriving in separate TCP writes."""
        with socket.create_connection(test_server.address, timeout=5.0) as sock:
            sock.sendall(b"POST /files/split HTTP/1.1\r\nContent-Len")
            time.sleep(0.05)
            sock.sendall(b"gth: 6\r\n\r\nabc")
            time.sleep(0.05)
            sock.sendall(b"def")

            assert read_all(sock) == b"HTTP/1.1 201 Created\r\n\r\n"
