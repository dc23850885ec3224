# tests/test_security.py
"""Tests for the password hasher and random source capabilities."""

import hashlib

from devicekey_auth.core.security import (
    Sha256PasswordHasher,
    SystemRandomSource,
    hash_password,
)


def test_sha256_hasher_matches_hex_digest() -> None:
    expected = hashlib.sha256(b"secret").hexdigest()
    assert Sha256PasswordHasher().hash("secret") == expected
    assert hash_password("secret") == expected


def test_hash_password_uses_supplied_hasher() -> None:
    class ReversingHasher:
        def hash(self, plaintext: str) -> str:
            return plaintext[::-1]

    assert hash_password("abc", ReversingHasher()) == "cba"


def test_system_random_source_returns_requested_size() -> None:
    source = SystemRandomSource()
    first = source.token_bytes(33)
    assert len(first) == 33
    assert first != source.token_bytes(33)
