"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can answer with, and their reason phrases.

    HTTP/1.1 404 Not Found
             ─── ─────────
              │      │
              │      └── Reason phrase (.phrase)
              └───────── Status code (the enum value)

Only six codes are ever produced:

    ┌──────┬───────────────────────┬──────────────────────────────────────┐
    │ Code │ Phrase                │ Produced when                        │
    ├──────┼───────────────────────┼──────────────────────────────────────┤
    │ 200  │ OK                    │ echo, user-agent, root, file GET     │
    │ 201  │ Created               │ file POST wrote a new file           │
    │ 404  │ Not Found             │ unknown route, missing file          │
    │ 409  │ Conflict              │ file POST onto an existing file      │
    │ 500  │ Internal Server Error │ file read/write failed               │
    │ 503  │ Service Unavailable   │ /files/ used without a root dir      │
    └──────┴───────────────────────┴──────────────────────────────────────┘

Malformed requests never get a status code: the connection is simply
closed (see server.py).

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the server.

    IntEnum, so members compare and format as plain integers:

        >>> HTTPStatus.CONFLICT == 409
        True
        >>> f"{HTTPStatus.CREATED}"
        '201'
        >>> HTTPStatus.CREATED.phrase
        'Created'
    """

    OK = 200
    CREATED = 201
    NOT_FOUND = 404
    CONFLICT = 409
    INTERNAL_SERVER_ERROR = 500
    SERVICE_UNAVAILABLE = 503

    def __str__(self) -> str:
        return str(self.value)

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line."""
        return _STATUS_PHRASES[self]

    @property
    def is_error(self) -> bool:
        """True for 4xx and 5xx codes."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.CONFLICT: "Conflict",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
    HTTPStatus.SERVICE_UNAVAILABLE: "Service Unavailable",
}
