"""
=============================================================================
HTTP SERVER CLI ENTRY POINT
=============================================================================

    # Run with defaults (127.0.0.1:4221, /files/ disabled)
    python -m bytehttp

    # Serve and store files under /tmp/files
    python -m bytehttp --directory /tmp/files

    # Listen on all interfaces (for containers)
    python -m bytehttp --host 0.0.0.0 --port 8080

    # Drop connections from clients silent for 30 seconds
    python -m bytehttp --timeout 30

Settings not given on the command line fall back to the BYTEHTTP_*
environment variables (see ServerConfig.from_env), then to the defaults.

=============================================================================
"""

import argparse
import sys
from dataclasses import replace
from typing import List, Optional

from . import __version__
from .config import LOG_LEVELS, ServerConfig
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bytehttp",
        description="Minimal HTTP/1.1 server built from scratch in Python",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m bytehttp                          # Run with defaults
  python -m bytehttp --directory /tmp/files   # Enable /files/
  python -m bytehttp --port 8080              # Custom port
  python -m bytehttp --host 0.0.0.0           # Listen on all interfaces
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for containers)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 4221)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Per-connection socket timeout in seconds (default: none)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # FEATURE ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Root directory for /files/ (default: none, /files/ answers 503)"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: INFO)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"bytehttp {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """
    Layer CLI arguments over the environment.

    Only arguments actually given override the environment values.
    """
    config = ServerConfig.from_env()

    overrides = {
        "host": args.host,
        "port": args.port,
        "timeout": args.timeout,
        "directory": args.directory,
        "log_level": args.log_level,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}

    return replace(config, **overrides)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status (1 on invalid configuration or bind failure).
    """
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        config.validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    server = HTTPServer(config)

    # This blocks until Ctrl+C / SIGTERM
    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
