"""Password hashing and randomness capabilities."""
from __future__ import annotations

import hashlib
import secrets
from typing import Protocol


class PasswordHasher(Protocol):
    """One-way digest used both when storing and when checking a password."""

    def hash(self, plaintext: str) -> str: ...


class RandomSource(Protocol):
    """Source of cryptographically strong random bytes."""

    def token_bytes(self, size: int) -> bytes: ...


class Sha256PasswordHasher:
    """Unsalted SHA-256 hex digest, compatible with existing stored hashes."""

    def hash(self, plaintext: str) -> str:
        return hashlib.sha256(plaintext.encode("utf-8")).hexdigest()


class SystemRandomSource:
    """Random source backed by the operating system CSPRNG."""

    def token_bytes(self, size: int) -> bytes:
        return secrets.token_bytes(size)


def hash_password(plaintext: str, hasher: PasswordHasher | None = None) -> str:
    """Return the stored digest for `plaintext` using `hasher` (SHA-256 by default)."""
    return (hasher or Sha256PasswordHasher()).hash(plaintext)
