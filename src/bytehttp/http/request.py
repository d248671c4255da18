"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads one HTTP/1.1 request from a ByteSource and turns it into an
immutable HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │    POST /files/notes.txt HTTP/1.1\r\n                           │ │
    │  │    ─┬── ────────┬─────── ───┬────                               │ │
    │  │   Method       Path      Version (read, not validated)          │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Host: localhost:4221\r\n                                     │ │
    │  │    User-Agent: curl/8.4.0\r\n                                   │ │
    │  │    Content-Length: 2\r\n                                        │ │
    │  │    Accept-Encoding: gzip, br\r\n                                │ │
    │  │    \r\n                      ◄── blank line ends the headers    │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY (exactly Content-Length bytes) ──────────────────────────┐ │
    │  │    hi                                                           │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
WHAT IS STRICT AND WHAT IS LENIENT
=============================================================================

    STRICT (HTTPParseError, connection dropped without a response):
      - request line not exactly 3 space-separated tokens
      - method other than GET, POST, PUT, DELETE (case-sensitive)

    LENIENT (logged as a warning, request continues):
      - header line without ": "
      - header name outside the known set
      - Content-Length that is not a non-negative integer (becomes 0)
      - Accept-Encoding tokens we don't know (dropped)

    TRANSPORT (ConnectionClosedError from the byte source):
      - stream ends before the request line, a header line, or the body
        is complete

=============================================================================
INTERVIEW QUESTIONS ABOUT REQUEST PARSING
=============================================================================

Q: "How do you know where the headers end?"
A: "Read line by line. A line with zero bytes before \\r\\n is the blank
   line. A line with N > 0 bytes is a header. Both consume the \\r\\n."

Q: "How do you know where the body ends?"
A: "Content-Length. We read exactly that many bytes after the blank line.
   No chunked encoding, so without Content-Length there is no body."

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .encoding import ContentEncoding
from ..config import ServerConfig
from ..core.connection import ByteSource, BytesSource


logger = logging.getLogger(__name__)


class HTTPParseError(ValueError):
    """
    Raised when a request is malformed beyond repair.

    There is no status code attached: a malformed request gets no response
    at all, the connection is just closed.
    """

    def __init__(self, message: str, line: str = ""):
        super().__init__(f"{message}: {line!r}" if line else message)
        self.line = line


class HTTPMethod(Enum):
    """Request methods the parser accepts."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, token: str) -> "HTTPMethod":
        try:
            return cls(token)
        except ValueError:
            raise HTTPParseError("unknown method", token) from None

    def __str__(self) -> str:
        return self.value


# Headers we keep, keyed by lower-cased wire name. Everything else is
# dropped with a warning.
KNOWN_HEADERS = {
    "host",
    "user-agent",
    "accept",
    "content-type",
    "content-length",
    "accept-encoding",
}


@dataclass(frozen=True)
class RequestHeaders:
    """
    The recognized request headers, with defaults applied.

    accept_encoding is never empty: a request that names no known encoding
    accepts identity.
    """

    host: str = ""
    user_agent: str = ""
    accept: str = "*/*"
    content_type: str = ""
    content_length: int = 0
    accept_encoding: frozenset = frozenset({ContentEncoding.IDENTITY})

    def get(self, name: str, default: str = "") -> str:
        """
        Look a header up by wire name, any case.

        Example:
            headers.get("User-Agent")  # same as headers.user_agent
        """
        name = name.lower()
        if name not in KNOWN_HEADERS:
            return default
        value = getattr(self, name.replace("-", "_"))
        if name == "accept-encoding":
            return ", ".join(sorted(e.value for e in value))
        return str(value)


class RequestHeadersBuilder:
    """
    Accumulates header lines, then materializes RequestHeaders once.

    Every field starts unset. build() is the single place defaults are
    applied, which matters for accept-encoding: identity is only added if
    no recognized token showed up in any Accept-Encoding line.
    """

    def __init__(self):
        self._values: dict[str, str] = {}
        self._content_length: Optional[int] = None
        self._accept_encoding: set[ContentEncoding] = set()

    def apply_line(self, line: str) -> "RequestHeadersBuilder":
        """Apply one raw header line ("Name: value")."""
        name, sep, value = line.partition(": ")
        if not sep:
            logger.warning(f"Ignoring header line without separator: {line!r}")
            return self
        return self.apply(name, value)

    def apply(self, name: str, value: str) -> "RequestHeadersBuilder":
        """Apply one header by name (matched case-insensitively)."""
        key = name.lower()

        if key not in KNOWN_HEADERS:
            logger.warning(f"Ignoring unknown header: {name!r}")
        elif key == "content-length":
            self._content_length = _parse_content_length(value)
        elif key == "accept-encoding":
            # Comma-space separated list; unknown tokens are dropped.
            for token in value.split(", "):
                encoding = ContentEncoding.parse(token)
                if encoding is not None:
                    self._accept_encoding.add(encoding)
        else:
            self._values[key] = value

        return self

    def build(self) -> RequestHeaders:
        return RequestHeaders(
            host=self._values.get("host", ""),
            user_agent=self._values.get("user-agent", ""),
            accept=self._values.get("accept", "*/*"),
            content_type=self._values.get("content-type", ""),
            content_length=self._content_length or 0,
            accept_encoding=frozenset(self._accept_encoding or {ContentEncoding.IDENTITY}),
        )


def _parse_content_length(value: str) -> int:
    """Content-Length as a non-negative int; anything else becomes 0."""
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        logger.warning(f"Unparsable Content-Length {value!r}, assuming 0")
        return 0
    return int(value)


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request. Never mutated after the parser builds it.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:   HTTPMethod (GET, POST, PUT, DELETE)

        path:     Request target exactly as sent, "/" if the token was
                  empty. No query splitting, no percent-decoding.

        version:  Version token from the request line ("HTTP/1.1").
                  Kept for logging only.

        headers:  RequestHeaders with defaults applied.

        body:     Exactly headers.content_length bytes.

        config:   The server-wide ServerConfig. Shared with every other
                  request; read-only.

    =========================================================================
    """

    method: HTTPMethod
    path: str
    version: str = "HTTP/1.1"
    headers: RequestHeaders = field(default_factory=RequestHeaders)
    body: bytes = b""
    config: ServerConfig = field(default_factory=ServerConfig, repr=False)

    @property
    def content_length(self) -> int:
        return self.headers.content_length

    @property
    def accept_encoding(self) -> frozenset:
        return self.headers.accept_encoding

    @property
    def user_agent(self) -> str:
        return self.headers.user_agent

    def __str__(self) -> str:
        return (
            f"{self.method} {self.path} {self.version} "
            f"headers={self.headers} body_len={len(self.body)}"
        )


class RequestParser:
    """
    Parses one request from a ByteSource.

    ==========================================================================
    PARSER FLOW
    ==========================================================================

        ByteSource
              │
              ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  1. read_until(CRLF) → request line                               │
        │     │  split(" ") must give 3 tokens  → else HTTPParseError       │
        │     │  method must be known           → else HTTPParseError       │
        │     ▼                                                             │
        │  2. loop: read_until(CRLF)                                        │
        │     │  b""  → stop (blank line)                                   │
        │     │  else → RequestHeadersBuilder.apply_line()                  │
        │     ▼                                                             │
        │  3. builder.build() → RequestHeaders (defaults applied)           │
        │     ▼                                                             │
        │  4. content_length > 0 → read_exact(content_length)               │
        └───────────────────────────────────────────────────────────────────┘
              │
              ▼
        HTTPRequest

    ==========================================================================
    """

    # Wire bytes are decoded leniently: header names and values are ASCII
    # in practice, and a stray byte must not turn into a parse error.
    ENCODING = "utf-8"

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config if config is not None else ServerConfig()

    def parse(self, source: ByteSource) -> HTTPRequest:
        """
        Read and parse a complete request.

        Raises:
            HTTPParseError: Malformed request line or unknown method.
            ConnectionClosedError: Stream ended mid-request.
        """
        line = self._decode(source.read_until(b"\r\n"))
        method, path, version = self._parse_request_line(line)

        builder = RequestHeadersBuilder()
        while True:
            raw = source.read_until(b"\r\n")
            if not raw:
                break
            builder.apply_line(self._decode(raw))
        headers = builder.build()

        body = b""
        if headers.content_length > 0:
            body = source.read_exact(headers.content_length)

        request = HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            config=self.config,
        )
        logger.debug(f"Parsed request: {request}")
        return request

    def _parse_request_line(self, line: str) -> tuple[HTTPMethod, str, str]:
        """
        Split "METHOD SP PATH SP VERSION" on single spaces.

        Two spaces in a row produce an empty token, so "GET  HTTP/1.1"
        is three tokens with an empty path, which becomes "/".
        """
        tokens = line.split(" ")
        if len(tokens) != 3:
            raise HTTPParseError("invalid request line", line)

        method_token, path, version = tokens
        method = HTTPMethod.parse(method_token)
        return method, path or "/", version

    def _decode(self, raw: bytes) -> str:
        return raw.decode(self.ENCODING, errors="replace")


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(data: bytes, config: Optional[ServerConfig] = None) -> HTTPRequest:
    """
    Parse a request that is already fully in memory.

    Args:
        data: Raw request bytes.
        config: Server configuration to attach (defaults to ServerConfig()).

    Returns:
        Parsed HTTPRequest.
    """
    return RequestParser(config).parse(BytesSource(data))
