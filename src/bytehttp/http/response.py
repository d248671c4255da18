"""
=============================================================================
HTTP RESPONSE MODEL AND SERIALIZER
=============================================================================

Structured responses and their exact wire form.

=============================================================================
WIRE LAYOUT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\r\n                        status line (always)    │
    │  Content-Type: text/plain\r\n               ┐                       │
    │  Content-Length: 3\r\n                      ├ only if body non-empty│
    │  Content-Encoding: gzip\r\n                 ┘ (encoding: not identity)
    │  \r\n                                       blank line (always)     │
    │  abc                                        body bytes, verbatim    │
    └─────────────────────────────────────────────────────────────────────┘

Header order is fixed so the output is byte-for-byte predictable.

An empty body produces just the status line and the blank line:

    HTTP/1.1 404 Not Found\r\n
    \r\n

Serialization never transforms the body. Encoding is decided earlier, by
the connection handler, and is already final when to_bytes() runs.

=============================================================================
BUILDER PATTERN
=============================================================================

    ResponseBuilder()
        .status(HTTPStatus.OK)
        .content_type("application/octet-stream")
        .octets(file_bytes)
        .build()

Every field is optional on the builder; build() fills in the defaults
(200, text/plain, empty identity body) in one place.

=============================================================================
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from .encoding import ContentEncoding, EncodedContent
from .status_codes import HTTPStatus


DEFAULT_CONTENT_TYPE = "text/plain"
OCTET_STREAM = "application/octet-stream"


@dataclass(frozen=True)
class HTTPResponse:
    """
    A response ready to be serialized.

        HTTPResponse(                      to_bytes()
          status=HTTPStatus.OK,      ──────────────────►   b"HTTP/1.1 200 OK\\r\\n..."
          content_type="text/plain",
          body=EncodedContent(b"hi"),
        )

    content_length is derived from the body, so it stays correct after
    the body is re-encoded.
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: str = DEFAULT_CONTENT_TYPE
    body: EncodedContent = field(default_factory=EncodedContent)
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE

        Example: "HTTP/1.1 409 Conflict"
        """
        return f"{self.version} {self.status.value} {self.status.phrase}"

    @property
    def content_length(self) -> int:
        return len(self.body)

    @property
    def has_body(self) -> bool:
        return not self.body.is_empty

    @property
    def encoding(self) -> ContentEncoding:
        return self.body.encoding

    def encode_body(self, target: ContentEncoding) -> "HTTPResponse":
        """
        Return a copy whose body is re-encoded to target.

        Raises:
            EncodingError: If the current body cannot be decoded.
        """
        return replace(self, body=self.body.encode(target))

    def to_bytes(self) -> bytes:
        """Serialize to wire bytes."""
        return serialize_response(self)


def serialize_response(response: HTTPResponse) -> bytes:
    """
    Turn a response into the exact bytes sent on the wire.

    Pure function: the same response always gives the same bytes.
    """
    lines = [response.status_line]

    if response.has_body:
        lines.append(f"Content-Type: {response.content_type}")
        lines.append(f"Content-Length: {response.content_length}")
        if response.encoding is not ContentEncoding.IDENTITY:
            lines.append(f"Content-Encoding: {response.encoding.header_value}")

    head = "".join(f"{line}\r\n" for line in lines) + "\r\n"
    return head.encode("latin-1") + response.body.buffer


class ResponseBuilder:
    """
    Fluent builder for HTTPResponse.

    Usage:
        response = (ResponseBuilder()
            .status(HTTPStatus.CREATED)
            .build())

        response = (ResponseBuilder()
            .text("hello")
            .encode_body(ContentEncoding.GZIP)
            .build())
    """

    def __init__(self, status: Optional[HTTPStatus] = None):
        self._status = status
        self._content_type: Optional[str] = None
        self._body: Optional[EncodedContent] = None

    @classmethod
    def from_response(cls, response: HTTPResponse) -> "ResponseBuilder":
        """Start a builder pre-filled from an existing response."""
        return (cls(response.status)
            .content_type(response.content_type)
            .body(response.body))

    # =========================================================================
    # STATUS / HEADERS
    # =========================================================================

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        self._content_type = content_type
        return self

    # =========================================================================
    # BODY METHODS
    # =========================================================================

    def body(self, body: EncodedContent) -> "ResponseBuilder":
        """Set an already-tagged body."""
        self._body = body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """
        Set a UTF-8 text body (identity encoded).

        Content-Type is left as is, so the default text/plain applies
        unless content_type() was called.
        """
        self._body = EncodedContent(text.encode("utf-8"))
        return self

    def octets(self, data: bytes) -> "ResponseBuilder":
        """Set a raw binary body (identity encoded)."""
        self._body = EncodedContent(data)
        return self

    def encode_body(self, target: ContentEncoding) -> "ResponseBuilder":
        """
        Re-encode the body set so far. No-op without a body.

        Raises:
            EncodingError: If the current body cannot be decoded.
        """
        if self._body is not None:
            self._body = self._body.encode(target)
        return self

    # =========================================================================
    # BUILD
    # =========================================================================

    def build(self) -> HTTPResponse:
        """Apply defaults and return the response."""
        return HTTPResponse(
            status=self._status if self._status is not None else HTTPStatus.OK,
            content_type=self._content_type or DEFAULT_CONTENT_TYPE,
            body=self._body if self._body is not None else EncodedContent(),
        )

    def to_bytes(self) -> bytes:
        """Build and serialize in one step."""
        return self.build().to_bytes()


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
#     return ok("hello")
#     return not_found()
#     return internal_error(f"Error: {e}")
#
# =============================================================================

def ok(body: bytes = b"", content_type: str = DEFAULT_CONTENT_TYPE) -> HTTPResponse:
    """200 OK with an optional identity-encoded body."""
    return (ResponseBuilder(HTTPStatus.OK)
        .content_type(content_type)
        .octets(body)
        .build())


def created() -> HTTPResponse:
    """201 Created, empty body."""
    return ResponseBuilder(HTTPStatus.CREATED).build()


def not_found() -> HTTPResponse:
    """404 Not Found, empty body."""
    return ResponseBuilder(HTTPStatus.NOT_FOUND).build()


def conflict() -> HTTPResponse:
    """409 Conflict, empty body."""
    return ResponseBuilder(HTTPStatus.CONFLICT).build()


def service_unavailable() -> HTTPResponse:
    """503 Service Unavailable, empty body."""
    return ResponseBuilder(HTTPStatus.SERVICE_UNAVAILABLE).build()


def internal_error(message: str) -> HTTPResponse:
    """
    500 Internal Server Error with a plain-text description.

    The message goes to the client as is; callers pass the OS error text
    of a failed file operation.
    """
    return (ResponseBuilder(HTTPStatus.INTERNAL_SERVER_ERROR)
        .text(message)
        .build())
