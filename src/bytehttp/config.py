"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

One immutable ServerConfig is built at startup and shared, by reference,
with every connection thread:

    main() ──► ServerConfig(...) ──► HTTPServer
                     │
                     ├──► thread for connection 1  ┐
                     ├──► thread for connection 2  ├─ read-only, no locks
                     └──► thread for connection N  ┘

Nothing writes to it after startup, so no synchronization is needed.
frozen=True makes accidental writes raise FrozenInstanceError.

=============================================================================
SOURCES
=============================================================================

    CLI                       python -m bytehttp --directory /tmp/files
    Environment               BYTEHTTP_DIRECTORY=/tmp/files python -m bytehttp
    Code                      ServerConfig(directory="/tmp/files")

The only setting the protocol itself cares about is `directory`: without
it, every /files/ request answers 503 Service Unavailable. The rest is
socket plumbing and logging.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    FILE SERVING
    - directory

    LOGGING
    - log_level, server_name

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Address to bind. "0.0.0.0" for all interfaces."""

    port: int = 4221
    """Port to listen on. 0 lets the OS pick a free one (tests)."""

    backlog: int = 128
    """Maximum number of queued, not yet accepted connections."""

    buffer_size: int = 8192
    """Bytes requested per recv() call."""

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None = block forever on a silent peer (the protocol default).
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILE SERVING
    # ─────────────────────────────────────────────────────────────────────

    directory: Optional[Union[Path, str]] = None
    """
    Root directory for GET/POST /files/<name>.
    None disables the route (503), other routes keep working.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    server_name: str = "bytehttp/1.0.0"
    """Name shown in the startup log line."""

    def __post_init__(self):
        # Accept str for convenience, store Path.
        if self.directory is not None and not isinstance(self.directory, Path):
            object.__setattr__(self, "directory", Path(self.directory))

    @property
    def files_enabled(self) -> bool:
        """True when a root directory is configured."""
        return self.directory is not None

    @property
    def logging_level(self) -> int:
        """log_level as a logging module constant."""
        return getattr(logging, self.log_level.upper(), logging.INFO)

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        BYTEHTTP_HOST        Server host (default: 127.0.0.1)
        BYTEHTTP_PORT        Server port (default: 4221)
        BYTEHTTP_DIRECTORY   Root for /files/ (default: unset)
        BYTEHTTP_TIMEOUT     Socket timeout in seconds (default: unset)
        BYTEHTTP_LOG_LEVEL   Logging level (default: INFO)

        =====================================================================
        """
        timeout = os.getenv("BYTEHTTP_TIMEOUT")
        return cls(
            host=os.getenv("BYTEHTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("BYTEHTTP_PORT", "4221")),
            directory=os.getenv("BYTEHTTP_DIRECTORY") or None,
            timeout=float(timeout) if timeout else None,
            log_level=os.getenv("BYTEHTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Fail fast at startup rather than on the first /files/ request.

        Raises:
            ValueError: On the first invalid setting found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.directory is not None and not self.directory.is_dir():
            raise ValueError(f"Not a directory: {self.directory}")
