"""
=============================================================================
REQUEST HANDLERS
=============================================================================

Handlers too large to live inline in the routing table.

    FileHandler     GET / POST /files/<name> under the configured root

Usage:

    from bytehttp.handlers import FileHandler

    router.add_prefix("/files/", FileHandler().handle)

=============================================================================
"""

from .files import FileHandler

__all__ = [
    "FileHandler",
]
