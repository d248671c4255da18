"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

The transport layer of the server: everything below HTTP.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer          listening socket + accept loop              │
    │        │                                                             │
    │        ▼                                                             │
    │   Connection            one client socket, buffered reads,          │
    │        │                write-all, close-once                       │
    │        ▼                                                             │
    │   ByteSource            read_until() / read_exact(), the only       │
    │                         interface the request parser sees           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Nothing in here knows about HTTP. The parser works on any ByteSource, so
it can be fed from a socket, or from memory (BytesSource) in tests.

=============================================================================
"""

from .connection import ByteSource, BytesSource, Connection, ConnectionClosedError
from .socket_server import SocketServer

__all__ = [
    "ByteSource",             # Abstract buffered reader
    "BytesSource",            # In-memory ByteSource
    "Connection",             # Socket-backed ByteSource with send_all()
    "ConnectionClosedError",  # Stream ended mid-read
    "SocketServer",           # Bind / listen / accept loop
]
