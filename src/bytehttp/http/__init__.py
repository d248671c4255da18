"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

Translates bytes from a ByteSource into HTTPRequest objects and
HTTPResponse objects back into bytes.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST PARSER (request.py)                                         │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   ByteSource over b"GET /echo/hi HTTP/1.1\r\n...\r\n\r\n"    │
    │ Output:  HTTPRequest(method=GET, path="/echo/hi", ...)              │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ ENCODING (encoding.py)                                              │
    │ ─────────────────────────────────────────────────────────────────── │
    │ identity / gzip vocabulary, codec, Accept-Encoding negotiation      │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE SERIALIZER (response.py)                                   │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Input:   HTTPResponse(status=OK, body=EncodedContent(b"hi"))        │
    │ Output:  b"HTTP/1.1 200 OK\r\nContent-Type: ...\r\n\r\nhi"          │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ ROUTER (router.py)                                                  │
    │ ─────────────────────────────────────────────────────────────────── │
    │ Fixed-priority prefix table. Import it from bytehttp.http.router:   │
    │ it depends on the file handler, which depends on this package.      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .status_codes import HTTPStatus
from .encoding import (
    ContentEncoding,
    EncodedContent,
    EncodingError,
    decode,
    encode,
    negotiate_encoding,
)
from .request import (
    HTTPMethod,
    HTTPParseError,
    HTTPRequest,
    RequestHeaders,
    RequestHeadersBuilder,
    RequestParser,
    parse_request,
)
from .response import (
    HTTPResponse,
    ResponseBuilder,
    serialize_response,
    ok,
    created,
    not_found,
    conflict,
    service_unavailable,
    internal_error,
)

__all__ = [
    # Status codes
    "HTTPStatus",

    # Encoding
    "ContentEncoding",
    "EncodedContent",
    "EncodingError",
    "encode",
    "decode",
    "negotiate_encoding",

    # Request parsing
    "HTTPMethod",
    "HTTPParseError",
    "HTTPRequest",
    "RequestHeaders",
    "RequestHeadersBuilder",
    "RequestParser",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "serialize_response",

    # Response convenience functions
    "ok",
    "created",
    "not_found",
    "conflict",
    "service_unavailable",
    "internal_error",
]
