"""
=============================================================================
CONTENT ENCODING
=============================================================================

Encoding vocabulary and codec for response bodies.

A client lists the encodings it can decode in Accept-Encoding; the server
picks one and labels the body with Content-Encoding:

    Request:
    ┌───────────────────────────────────────────────────────────────┐
    │ GET /echo/abc HTTP/1.1                                        │
    │ Accept-Encoding: invalid-1, gzip, invalid-2                   │
    │                  ─────────  ────  ─────────                   │
    │                      │        │       │                       │
    │                   dropped   kept   dropped                    │
    └───────────────────────────────────────────────────────────────┘

    Response:
    ┌───────────────────────────────────────────────────────────────┐
    │ HTTP/1.1 200 OK                                               │
    │ Content-Type: text/plain                                      │
    │ Content-Length: 23      (compressed size)                     │
    │ Content-Encoding: gzip                                        │
    │                                                               │
    │ [gzip compressed "abc"]                                       │
    └───────────────────────────────────────────────────────────────┘

=============================================================================
THE VOCABULARY IS CLOSED
=============================================================================

Only two encodings exist here:

    IDENTITY   the bytes as they are (the default)
    GZIP       RFC 1952 gzip stream

Any other token ("br", "deflate", "x-foo") parses to None and is filtered
out by the request parser. Nothing unrecognized is ever stored.

Both names of the identity tag ("identity", and the older "none") are
recognized on the wire, not just "gzip". A client that sends

    Accept-Encoding: gzip, identity

therefore gets the body uncompressed: it is already in an accepted
encoding, and bodies in an accepted encoding are never re-encoded. A
server that only knew "gzip" would compress that response instead.

=============================================================================
ENCODE / DECODE
=============================================================================

Every transform goes through identity:

        GZIP ──decode──► IDENTITY ──encode──► GZIP

    encode(content, target)
        target == content.encoding  → content unchanged
        otherwise                   → decode to identity, then apply target

    decode(content)
        already identity            → content unchanged
        gzip                        → gzip.decompress()

The gzip header's timestamp is always 0, so the same input compresses to
the same bytes and encode(decode(x), x.encoding) == x holds for gzip too.

A corrupt gzip stream is an EncodingError. The connection handler treats
it like a broken socket: the connection is dropped.

=============================================================================
"""

import gzip
import zlib
from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, Optional


class EncodingError(OSError):
    """Raised when a body cannot be compressed or decompressed."""


class ContentEncoding(Enum):
    """Body encodings the server understands."""

    IDENTITY = "identity"
    GZIP = "gzip"

    @classmethod
    def parse(cls, token: str) -> Optional["ContentEncoding"]:
        """
        Map a wire token to an encoding.

        Case-insensitive. "none" is accepted as an alias of identity.
        Returns None for anything unrecognized.
        """
        token = token.strip().lower()
        if token == "none":
            return cls.IDENTITY
        try:
            return cls(token)
        except ValueError:
            return None

    @property
    def header_value(self) -> str:
        """Token written in the Content-Encoding header."""
        return self.value


# Preference order when the body must be re-encoded and the client
# accepts more than one encoding.
PREFERENCE = (ContentEncoding.GZIP, ContentEncoding.IDENTITY)


@dataclass(frozen=True)
class EncodedContent:
    """
    A byte buffer tagged with the encoding it is currently in.

    Two contents with different bytes but the same tag negotiate the same
    way: only the tag matters to the connection handler.
    """

    buffer: bytes = b""
    encoding: ContentEncoding = ContentEncoding.IDENTITY

    def __len__(self) -> int:
        return len(self.buffer)

    @property
    def is_empty(self) -> bool:
        return not self.buffer

    def encode(self, target: ContentEncoding) -> "EncodedContent":
        return encode(self, target)

    def decode(self) -> "EncodedContent":
        return decode(self)


def encode(content: EncodedContent, target: ContentEncoding) -> EncodedContent:
    """
    Re-encode content into the target encoding.

    Args:
        content: Current body and its tag.
        target: Encoding the result should carry.

    Returns:
        New EncodedContent tagged with target (or content itself if it
        already is).

    Raises:
        EncodingError: If decoding the current buffer fails.
    """
    if content.encoding is target:
        return content

    plain = decode(content)
    if target is ContentEncoding.IDENTITY:
        return plain

    try:
        compressed = gzip.compress(plain.buffer, mtime=0)
    except (zlib.error, ValueError) as e:
        raise EncodingError(f"gzip compression failed: {e}") from e
    return EncodedContent(compressed, ContentEncoding.GZIP)


def decode(content: EncodedContent) -> EncodedContent:
    """
    Undo the content's encoding.

    Raises:
        EncodingError: If the buffer is not a valid gzip stream
                       (bad magic number, truncated data, bad CRC).
    """
    if content.encoding is ContentEncoding.IDENTITY:
        return content

    try:
        plain = gzip.decompress(content.buffer)
    except (gzip.BadGzipFile, EOFError, zlib.error) as e:
        raise EncodingError(f"gzip decompression failed: {e}") from e
    return EncodedContent(plain, ContentEncoding.IDENTITY)


def negotiate_encoding(
    current: ContentEncoding,
    accepted: AbstractSet[ContentEncoding],
) -> Optional[ContentEncoding]:
    """
    Decide whether a body must be re-encoded for this client.

    Args:
        current: Encoding the body is in now.
        accepted: Encodings the client declared (never empty after parsing).

    Returns:
        None if current is already acceptable, otherwise the encoding to
        convert to.
    """
    if current in accepted:
        return None

    for candidate in PREFERENCE:
        if candidate in accepted:
            return candidate

    # Parsed requests always accept at least identity.
    return ContentEncoding.IDENTITY
