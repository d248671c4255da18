"""
=============================================================================
FILE HANDLER
=============================================================================

GET and POST for /files/<name> under the configured root directory.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      /files/<name> DECISIONS                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   no root configured ─────────────────────────► 503 (any method)    │
    │                                                                      │
    │   GET   file missing ─────────────────────────► 404                 │
    │         read ok ──────────────────────────────► 200 octet-stream    │
    │         read failed ──────────────────────────► 500 + error text    │
    │                                                                      │
    │   POST  file exists ──────────────────────────► 409 (no overwrite)  │
    │         written ──────────────────────────────► 201                 │
    │         write failed ─────────────────────────► 500 + error text    │
    │                                                                      │
    │   PUT / DELETE ───────────────────────────────► 404                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Every outcome is a response. Filesystem errors never escape this module.
A name the OS refuses outright (longer than NAME_MAX, embedded NUL byte)
cannot exist, so GET answers 404 and POST answers 500 with the error.

=============================================================================
PATH TRAVERSAL (KNOWN, NOT BLOCKED)
=============================================================================

The name is joined to the root as sent:

    root:     /srv/files
    request:  GET /files/../secret.txt
    target:   /srv/files/../secret.txt  →  /srv/secret.txt

Nothing stops this. Requests whose target resolves outside the root are
served unchanged but logged at WARNING, so the gap is visible in the logs.

=============================================================================
CONCURRENT POSTS
=============================================================================

The file is created with mode "xb" (O_CREAT | O_EXCL). If two POSTs race
past the existence check, the kernel lets only one create the file and
the other gets FileExistsError, answered with 409 like the normal case.

=============================================================================
"""

import logging
from pathlib import Path

from ..http.request import HTTPMethod, HTTPRequest
from ..http.response import (
    HTTPResponse, OCTET_STREAM,
    ok, created, not_found, conflict, service_unavailable, internal_error,
)


logger = logging.getLogger(__name__)


class FileHandler:
    """
    Serves and stores files under request.config.directory.

    Usage:
        handler = FileHandler()
        response = handler.handle(request, "notes.txt")
    """

    def handle(self, request: HTTPRequest, filename: str) -> HTTPResponse:
        """
        Handle a /files/ request.

        Args:
            request: The parsed request (its config supplies the root).
            filename: Path remainder after "/files/".

        Returns:
            HTTP response; never raises for filesystem errors.
        """
        root = request.config.directory
        if root is None:
            return service_unavailable()

        target = self._resolve(root, filename)

        if request.method is HTTPMethod.GET:
            return self._get(target)
        if request.method is HTTPMethod.POST:
            return self._post(target, request.body)

        return not_found()

    def _resolve(self, root: Path, filename: str) -> Path:
        """Join filename to root, warning if it lands outside the root."""
        target = root / filename

        try:
            resolved = target.resolve()
        except (OSError, ValueError):
            # Unresolvable names fail again, and get answered, in _get/_post.
            return target

        try:
            resolved.relative_to(root.resolve())
        except ValueError:
            logger.warning(f"File path escapes root {root}: {filename!r}")

        return target

    def _get(self, target: Path) -> HTTPResponse:
        if not _exists(target):
            return not_found()

        try:
            content = target.read_bytes()
        except OSError as e:
            logger.error(f"Error reading {target}: {e}")
            return internal_error(f"Error: {e}")

        return ok(content, content_type=OCTET_STREAM)

    def _post(self, target: Path, body: bytes) -> HTTPResponse:
        try:
            if target.exists():
                return conflict()

            with open(target, "xb") as f:
                f.write(body)
        except FileExistsError:
            # Lost the race against a concurrent POST.
            return conflict()
        except (OSError, ValueError) as e:
            logger.error(f"Error writing {target}: {e}")
            return internal_error(f"Error when writing: {e}")

        logger.info(f"Created {target} ({len(body)} bytes)")
        return created()


def _exists(target: Path) -> bool:
    """
    Path.exists() that answers False instead of raising.

    Names the OS refuses to look up (too long, embedded NUL) cannot name
    an existing file.
    """
    try:
        return target.exists()
    except (OSError, ValueError) as e:
        logger.warning(f"Cannot stat {target!r}: {e}")
        return False
