"""Tests for content hashing."""

import hashlib

import pytest

from nbpress.hashing import ContentHasher


class TestContentHasher:
    """Tests for ContentHasher class."""

    def test_fingerprint_is_md5(self):
        assert ContentHasher().fingerprint(b"abc") == hashlib.md5(b"abc").hexdigest()

    def test_text_is_utf8_encoded(self):
        hasher = ContentHasher()
        assert hasher.fingerprint("héllo") == hasher.fingerprint("héllo".encode("utf-8"))

    def test_any_byte_change_changes_fingerprint(self):
        hasher = ContentHasher()
        assert hasher.fingerprint(b'{"cells": []}') != hasher.fingerprint(b'{"cells": [] }')

    def test_short(self):
        hasher = ContentHasher()
        assert hasher.short(b"abc") == hasher.fingerprint(b"abc")[:8]
        assert len(hasher.short(b"abc", length=12)) == 12

    def test_short_rejects_bad_length(self):
        with pytest.raises(ValueError):
            ContentHasher().short(b"abc", length=0)
