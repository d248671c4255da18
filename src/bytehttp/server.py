"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together. One thread per accepted connection runs
process_connection() from start to finish:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    ONE CONNECTION, ONE REQUEST                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Connection (ByteSource)                                            │
    │        │                                                             │
    │        ▼                                                             │
    │   1. RequestParser.parse()        HTTPParseError → close, no bytes  │
    │        │                                                             │
    │        ▼                                                             │
    │   2. accepted = request.accept_encoding   (captured before routing) │
    │        │                                                             │
    │        ▼                                                             │
    │   3. Router.route(request)        → HTTPResponse (identity body)    │
    │        │                                                             │
    │        ▼                                                             │
    │   4. body non-empty and its encoding not in accepted?               │
    │        └── yes → response.encode_body(preferred accepted encoding)   │
    │        │                                                             │
    │        ▼                                                             │
    │   5. conn.send_all(response.to_bytes())                             │
    │        │                                                             │
    │        ▼                                                             │
    │   close                                                              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no keep-alive: every connection carries exactly one request.
The whole response is built in memory before the first byte is written.

=============================================================================
FAILURE HANDLING
=============================================================================

    HTTPParseError         malformed request line / unknown method
    ConnectionClosedError  peer went away mid-request (short read)
    EncodingError          body could not be re-encoded
    OSError                socket read/write failed

All of these end only the connection they happened on. They are logged,
the socket is closed, and no response is attempted. Application problems
(missing file, file exists, no root directory) never get here; the
handlers turn them into 404/409/500/503 responses.

=============================================================================
CONCURRENCY
=============================================================================

    accept loop ──► Thread(process_connection, conn)  ──► ...
                ──► Thread(process_connection, conn)  ──► ...
                ──► ...

No pool, no queue, no limit. Threads share only the ServerConfig (frozen)
and the Router (stateless), so no locks are needed.

=============================================================================
"""

import logging
import threading
from dataclasses import replace
from typing import Optional, Tuple

from .config import ServerConfig
from .core.connection import Connection, ConnectionClosedError
from .core.socket_server import SocketServer
from .http.encoding import EncodingError, negotiate_encoding
from .http.request import HTTPParseError, RequestParser
from .http.response import HTTPResponse
from .http.router import Router, create_router


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    The HTTP server.

    Usage:
        server = HTTPServer(ServerConfig(port=4221, directory="/tmp/files"))
        server.run()  # Blocks until Ctrl+C
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        """
        Args:
            config: Server configuration (defaults to ServerConfig()).
            router: Routing table (defaults to create_router(config)).
        """
        self.config = config if config is not None else ServerConfig()
        self.router = router if router is not None else create_router(self.config)
        self._parser = RequestParser(self.config)
        self._socket_server = SocketServer(self.config)

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); meaningful once the server is listening."""
        return self._socket_server.bound_address

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Args:
            host: Override config host.
            port: Override config port.

        Raises:
            ValueError: Invalid configuration.
            OSError: Address cannot be bound.
        """
        if host is not None or port is not None:
            self.config = replace(
                self.config,
                host=host if host is not None else self.config.host,
                port=port if port is not None else self.config.port,
            )
            self._parser = RequestParser(self.config)
            self._socket_server = SocketServer(self.config)

        self._setup_logging()
        self.config.validate()

        logger.info(f"Starting {self.config.server_name} on {self.config.host}:{self.config.port}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. In-flight connections finish on their own."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is listening. False on timeout."""
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = self.config.logging_level

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("bytehttp").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Spawn a thread for one accepted connection.

        Called by SocketServer on the accept thread, so it must not block.
        """
        thread = threading.Thread(
            target=self.process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        thread.start()

    def process_connection(self, conn: Connection):
        """
        Serve one request on conn, then close it.

        Never raises: every failure is logged and ends only this
        connection.
        """
        with conn:
            try:
                self.respond(conn)
            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Malformed request, closing: {e}")
            except ConnectionClosedError as e:
                logger.warning(f"[{conn.id}] Connection closed early: {e}")
            except EncodingError as e:
                logger.error(f"[{conn.id}] Encoding failed: {e}")
            except OSError as e:
                logger.error(f"[{conn.id}] I/O error: {e}")
            except Exception as e:
                logger.exception(f"[{conn.id}] Unexpected error: {e}")

    def respond(self, conn: Connection) -> HTTPResponse:
        """
        Read one request from conn, route it and write the response.

        Returns:
            The response that was written.

        Raises:
            HTTPParseError: Malformed request (nothing is written).
            ConnectionClosedError: Stream ended mid-request.
            EncodingError: Response body could not be re-encoded.
            OSError: Socket failure while reading or writing.
        """
        request = self._parser.parse(conn)

        # Routing never looks at Accept-Encoding; remember it for step 4.
        accepted = request.accept_encoding

        response = self.router.route(request)
        response = self.reconcile_encoding(response, accepted)

        conn.send_all(response.to_bytes())

        logger.info(
            f"[{conn.id}] {request.method} {request.path} -> "
            f"{response.status.value} ({response.content_length} bytes)"
        )
        return response

    @staticmethod
    def reconcile_encoding(response: HTTPResponse, accepted) -> HTTPResponse:
        """
        Re-encode the body if the client can't take its current encoding.

        Empty bodies are left alone: they are sent without any Content-*
        headers anyway. A body already in an accepted encoding is kept as
        is, even if the client also accepts others.
        """
        if not response.has_body:
            return response

        target = negotiate_encoding(response.encoding, accepted)
        if target is None:
            return response

        logger.debug(f"Re-encoding body {response.encoding.value} -> {target.value}")
        return response.encode_body(target)
