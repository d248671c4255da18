"""
=============================================================================
TCP SOCKET SERVER
=============================================================================

The listening socket and the accept loop. Everything HTTP happens
elsewhere: each accepted client is wrapped in a Connection and handed to a
callback.

=============================================================================
THE SERVER SOCKET LIFECYCLE
=============================================================================

    socket() ──► setsockopt() ──► bind() ──► listen() ──► accept() loop
                 SO_REUSEADDR     host:port   backlog        │
                                                             ▼
                                               Connection(client_socket)
                                                             │
                                                             ▼
                                               connection_handler(conn)

=============================================================================
SIGNAL HANDLING FOR GRACEFUL SHUTDOWN
=============================================================================

SIGINT (2):   Sent when user presses Ctrl+C
SIGTERM (15): Sent by docker stop, systemd stop, kill command

Both set the running flag to False. accept() times out every second, so
the loop notices within a second and exits. Signal handlers can only be
installed from the main thread; when the server runs in a background
thread (tests) this step is skipped.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    # How often accept() wakes up to check for shutdown.
    POLL_INTERVAL = 1.0

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Server configuration (host, port, backlog, ...).

        The socket is created lazily in start().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._address: Optional[Tuple[str, int]] = None
        self._running = False

        # Set once the socket is listening; tests wait on it.
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def bound_address(self) -> Tuple[str, int]:
        """
        The address actually bound.

        Differs from the configured one when port 0 asked the OS to pick.
        """
        if self._address is not None:
            return self._address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create the listening socket with its options set."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Rebind immediately after a restart instead of waiting for
        # TIME_WAIT to expire.
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        sock.settimeout(self.POLL_INTERVAL)
        return sock

    def _setup_signals(self):
        """Install SIGINT/SIGTERM handlers (main thread only)."""
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        """Restore original signal handlers."""
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen, and accept until shutdown() is called.

        This method BLOCKS.

        Args:
            connection_handler: Receives each accepted Connection and owns
                                it from then on (including closing it).

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._address = self._socket.getsockname()[:2]

        self._running = True
        self._setup_signals()

        host, port = self.bound_address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections until the running flag drops.

        accept() returns a new socket per client; the listening socket keeps
        listening. There is no limit on how many clients are in flight.
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Normal: lets us re-check self._running.
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                client_socket,
                client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
            )
            connection_handler(conn)

    def shutdown(self):
        """
        Stop the accept loop. Idempotent, callable from any thread or a
        signal handler.
        """
        logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._ready_event.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the socket is listening. False on timeout."""
        return self._ready_event.wait(timeout)
