"""
Unit tests for content encoding.
"""

import gzip
import time

import pytest

from bytehttp.http.encoding import (
    ContentEncoding,
    EncodedContent,
    EncodingError,
    decode,
    encode,
    negotiate_encoding,
)


IDENTITY = ContentEncoding.IDENTITY
GZIP = ContentEncoding.GZIP


class TestContentEncoding:
    """Tests for the encoding vocabulary."""

    @pytest.mark.parametrize("token,expected", [
        ("gzip", GZIP),
        ("GZIP", GZIP),
        (" gzip ", GZIP),
        ("identity", IDENTITY),
        ("none", IDENTITY),
        ("br", None),
        ("deflate", None),
        ("invalid-1", None),
        ("", None),
    ])
    def test_parse(self, token: str, expected):
        """Test mapping wire tokens to encodings."""
        assert ContentEncoding.parse(token) is expected

    def test_header_value(self):
        """Test the Content-Encoding token."""
        assert GZIP.header_value == "gzip"


class TestEncodedContent:
    """Tests for EncodedContent."""

    def test_defaults(self):
        """Test that the default content is empty identity."""
        content = EncodedContent()

        assert content.is_empty
        assert len(content) == 0
        assert content.encoding is IDENTITY

    def test_length_is_buffer_length(self):
        """Test that len() reflects the encoded bytes."""
        assert len(EncodedContent(b"abc")) == 3


class TestCodec:
    """Tests for encode() and decode()."""

    def test_encode_to_gzip(self):
        """Test gzip compression of an identity body."""
        result = encode(EncodedContent(b"abc"), GZIP)

        assert result.encoding is GZIP
        assert gzip.decompress(result.buffer) == b"abc"

    def test_encode_same_encoding_is_noop(self):
        """Test that encoding to the current tag returns the content itself."""
        content = EncodedContent(b"abc")
        assert encode(content, IDENTITY) is content

    def test_encode_gzip_to_identity(self):
        """Test decoding through encode()."""
        content = EncodedContent(gzip.compress(b"hello"), GZIP)
        result = encode(content, IDENTITY)

        assert result == EncodedContent(b"hello", IDENTITY)

    def test_decode_identity_is_noop(self):
        """Test that identity content decodes to itself."""
        content = EncodedContent(b"abc")
        assert decode(content) is content

    def test_decode_gzip(self):
        """Test gzip decompression."""
        content = EncodedContent(gzip.compress(b"hello"), GZIP)
        assert content.decode() == EncodedContent(b"hello")

    def test_round_trip(self):
        """Test that gzip then identity restores the bytes."""
        data = bytes(range(256)) * 16
        assert EncodedContent(data).encode(GZIP).encode(IDENTITY).buffer == data

    @pytest.mark.parametrize("encoding", [IDENTITY, GZIP])
    def test_decode_then_encode_restores_content(self, encoding):
        """Test encode(decode(x), x.encoding) == x for both encodings."""
        original = encode(EncodedContent(b"abc" * 100), encoding)

        assert encode(decode(original), encoding) == original

    def test_gzip_output_is_deterministic(self, monkeypatch):
        """Test that compression ignores the wall clock."""
        later = time.time() + 3600.0
        first = encode(EncodedContent(b"abc"), GZIP)
        monkeypatch.setattr(time, "time", lambda: later)
        second = encode(EncodedContent(b"abc"), GZIP)

        assert first.buffer == second.buffer
        assert first.buffer[4:8] == b"\x00\x00\x00\x00"

    def test_decode_corrupt_gzip(self):
        """Test that a bad gzip stream raises EncodingError."""
        with pytest.raises(EncodingError):
            decode(EncodedContent(b"not gzip at all", GZIP))

    def test_decode_truncated_gzip(self):
        """Test that a truncated gzip stream raises EncodingError."""
        truncated = gzip.compress(b"hello world")[:-6]

        with pytest.raises(EncodingError):
            decode(EncodedContent(truncated, GZIP))

    def test_encoding_error_is_io_error(self):
        """Test that codec failures are I/O-class errors."""
        assert issubclass(EncodingError, OSError)


class TestNegotiateEncoding:
    """Tests for negotiate_encoding()."""

    def test_current_accepted(self):
        """Test that an accepted encoding needs no conversion."""
        assert negotiate_encoding(IDENTITY, frozenset({IDENTITY})) is None
        assert negotiate_encoding(GZIP, frozenset({GZIP, IDENTITY})) is None

    def test_identity_to_gzip(self):
        """Test conversion when the client only takes gzip."""
        assert negotiate_encoding(IDENTITY, frozenset({GZIP})) is GZIP

    def test_gzip_to_identity(self):
        """Test conversion when the client only takes identity."""
        assert negotiate_encoding(GZIP, frozenset({IDENTITY})) is IDENTITY

    def test_identity_kept_when_both_accepted(self):
        """Test that an acceptable body is never re-encoded."""
        assert negotiate_encoding(IDENTITY, frozenset({GZIP, IDENTITY})) is None

    def test_empty_set_falls_back_to_identity(self):
        """Test the fallback for an empty accepted set."""
        assert negotiate_encoding(GZIP, frozenset()) is IDENTITY
