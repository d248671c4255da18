"""
=============================================================================
BYTEHTTP - A Minimal HTTP/1.1 Server Built From Scratch
=============================================================================

Raw sockets in, raw bytes out. No http.server, no framework: the request
line, headers, body, gzip negotiation and response wire format are all
handled here.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        BYTEHTTP ARCHITECTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. RAW SOCKET PROGRAMMING                                          │
    │      - TCP socket creation, binding, accept loop                     │
    │      - Buffered delimiter / fixed-length reads                       │
    │                                                                      │
    │   2. HTTP/1.1 PROTOCOL                                               │
    │      - Request parsing (method, path, known headers, body)           │
    │      - Response serialization with an exact header order             │
    │      - One request per connection, then close                        │
    │                                                                      │
    │   3. CONTENT ENCODING                                                │
    │      - Accept-Encoding parsing (gzip, identity)                       │
    │      - Bodies re-encoded to what the client accepts                  │
    │                                                                      │
    │   4. CONCURRENCY                                                     │
    │      - One thread per connection                                     │
    │      - Shared read-only configuration, no locks                      │
    │                                                                      │
    │   5. ROUTES                                                          │
    │      - /files/<name>  GET and POST under a root directory            │
    │      - /echo/<text>   text back                                      │
    │      - /user-agent    User-Agent header back                         │
    │      - /              200, empty                                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    bytehttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m bytehttp)
    ├── server.py            # HTTPServer: connection handling
    ├── config.py            # ServerConfig dataclass
    ├── core/                # Transport
    │   ├── socket_server.py # Bind / listen / accept
    │   └── connection.py    # ByteSource, Connection
    ├── http/                # Protocol
    │   ├── request.py       # Request parsing
    │   ├── response.py      # Response model and serializer
    │   ├── encoding.py      # gzip / identity codec and negotiation
    │   ├── router.py        # Fixed-priority routing table
    │   └── status_codes.py  # HTTP status enum
    └── handlers/
        └── files.py         # /files/ GET and POST

=============================================================================
QUICK START
=============================================================================

    from bytehttp import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=4221, directory="/tmp/files"))
    server.run()

    $ curl -v http://localhost:4221/echo/abc
    $ curl -v -H "Accept-Encoding: gzip" http://localhost:4221/echo/abc
    $ curl -v --data "hello" http://localhost:4221/files/hello.txt

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
