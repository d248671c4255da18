"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Byte sources for the request parser and the socket wrapper used for each
accepted client.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. A request written as

    GET /echo/hi HTTP/1.1\r\n
    Host: localhost\r\n
    \r\n

might arrive as

    First recv():  "GET /echo/h"        (incomplete!)
    Second recv(): "i HTTP/1.1\r\nHo"   (rest of line + next line start)
    Third recv():  "st: localhost\r\n\r\n"

So the parser never touches recv() directly. It asks a ByteSource for
exactly two things:

    read_until(b"\r\n")   bytes up to (not including) the delimiter;
                          the delimiter itself is consumed
    read_exact(n)         exactly n bytes

ByteSource keeps whatever recv() returned past the point the caller asked
for in an internal buffer, so nothing is lost between calls:

    ┌──────────────────────────────────────────────────────────────────┐
    │  _buffer: b"Host: localhost\r\n\r\nhello"                        │
    │                                                                   │
    │  read_until(b"\r\n")  → b"Host: localhost"                        │
    │  _buffer: b"\r\nhello"                                            │
    │                                                                   │
    │  read_until(b"\r\n")  → b""        (blank line: headers are done) │
    │  _buffer: b"hello"                                                │
    │                                                                   │
    │  read_exact(5)        → b"hello"                                  │
    │  _buffer: b""                                                     │
    └──────────────────────────────────────────────────────────────────┘

If the peer closes before a delimiter or before n bytes arrived, the
source raises ConnectionClosedError. That is a transport failure, not a
parse error: the request was cut short, not malformed.

=============================================================================
"""

import socket
import logging
import uuid
from abc import ABC, abstractmethod
from typing import Optional


logger = logging.getLogger(__name__)


class ConnectionClosedError(ConnectionError):
    """The peer closed the stream before the requested bytes arrived."""


class ByteSource(ABC):
    """
    Buffered reader offering delimited and fixed-length reads.

    Subclasses only supply _fill(), which returns the next chunk of bytes
    or b"" at end of stream. Any chunk size works: the buffering here
    keeps delimiter and length semantics exact.
    """

    def __init__(self):
        self._buffer = bytearray()

    @abstractmethod
    def _fill(self) -> bytes:
        """Return the next chunk from the underlying stream (b"" at EOF)."""

    def read_until(self, delimiter: bytes = b"\r\n") -> bytes:
        """
        Read up to and excluding delimiter, consuming the delimiter.

        An empty result means the delimiter came first (a blank line).

        Raises:
            ConnectionClosedError: Stream ended before the delimiter.
        """
        # Resume the search where the last scan stopped, minus a partial
        # delimiter that may straddle two chunks.
        start = 0
        while True:
            index = self._buffer.find(delimiter, start)
            if index != -1:
                data = bytes(self._buffer[:index])
                del self._buffer[:index + len(delimiter)]
                return data

            start = max(0, len(self._buffer) - len(delimiter) + 1)
            chunk = self._fill()
            if not chunk:
                raise ConnectionClosedError(
                    f"stream closed before {delimiter!r} "
                    f"({len(self._buffer)} bytes buffered)"
                )
            self._buffer += chunk

    def read_exact(self, size: int) -> bytes:
        """
        Read exactly size bytes, blocking until they arrive.

        Raises:
            ConnectionClosedError: Stream ended first (short read).
        """
        while len(self._buffer) < size:
            chunk = self._fill()
            if not chunk:
                raise ConnectionClosedError(
                    f"expected {size} bytes, stream closed after {len(self._buffer)}"
                )
            self._buffer += chunk

        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data


class BytesSource(ByteSource):
    """
    ByteSource over an in-memory byte string.

    Useful for parsing a request that was already received in full, and
    for tests. chunk_size simulates TCP splitting the data into pieces.
    """

    def __init__(self, data: bytes, chunk_size: Optional[int] = None):
        super().__init__()
        self._data = data
        self._offset = 0
        self._chunk_size = chunk_size or max(len(data), 1)

    def _fill(self) -> bytes:
        chunk = self._data[self._offset:self._offset + self._chunk_size]
        self._offset += len(chunk)
        return chunk


class Connection(ByteSource):
    """
    An accepted client socket.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. BUFFERED READING (inherited from ByteSource)                     │
    │     └── read_until() for the request line and headers               │
    │     └── read_exact() for the Content-Length body                    │
    │                                                                      │
    │  2. WRITING                                                          │
    │     └── send_all() retries partial sends until every byte is out    │
    │                                                                      │
    │  3. CLOSING                                                          │
    │     └── Context manager closes the socket exactly once              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short random identifier used to tag log lines.
    """

    def __init__(
        self,
        sock: socket.socket,
        address: tuple[str, int],
        buffer_size: int = 8192,
        timeout: Optional[float] = None,
    ):
        super().__init__()
        self.socket = sock
        self.address = address
        self.buffer_size = buffer_size
        self.id = str(uuid.uuid4())[:8]
        self.closed = False

        # None keeps the socket fully blocking: a stalled peer holds its
        # thread until it sends more data or disconnects.
        self.socket.settimeout(timeout)

    def __repr__(self) -> str:
        return f"Connection(id={self.id!r}, address={self.address!r})"

    @property
    def client_ip(self) -> str:
        return self.address[0]

    def _fill(self) -> bytes:
        return self.socket.recv(self.buffer_size)

    def send_all(self, data: bytes) -> None:
        """
        Send every byte of data.

        sendall() loops over partial writes internally; an OSError here
        means the peer is gone and is left to propagate.
        """
        self.socket.sendall(data)

    def close(self):
        """Shut down and release the socket. Safe to call twice."""
        if self.closed:
            return
        self.closed = True

        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # Peer already gone

        try:
            self.socket.close()
        except OSError:
            pass

        logger.debug(f"[{self.id}] Connection closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
