"""Issuance of single-use renewal challenges."""

from __future__ import annotations

import base64
import secrets
from dataclasses import dataclass

from devicekey_auth.core.security import RandomSource, SystemRandomSource
from devicekey_auth.core.settings import settings


@dataclass(frozen=True)
class IssuedChallenge:
    """Encoded challenge and its absolute expiry (epoch millis)."""

    value: str
    expires_at: int


class ChallengeIssuer:
    """Generate random challenges and check them against stored state."""

    def __init__(
        self,
        random_source: RandomSource | None = None,
        *,
        size: int | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        self.random_source = random_source or SystemRandomSource()
        self.size = size if size is not None else settings.challenge_bytes
        self.ttl_ms = (ttl_seconds if ttl_seconds is not None else settings.challenge_ttl_seconds) * 1000

    def issue(self, now: int) -> IssuedChallenge:
        """Return a fresh standard-base64 challenge valid until `now` + TTL."""
        raw = self.random_source.token_bytes(self.size)
        return IssuedChallenge(
            value=base64.b64encode(raw).decode("ascii"),
            expires_at=now + self.ttl_ms,
        )

    @staticmethod
    def is_live(expires_at: int | None, now: int) -> bool:
        """A challenge is usable strictly before its expiry instant."""
        return expires_at is not None and now < expires_at

    @staticmethod
    def matches(stored: str | None, supplied: str) -> bool:
        if stored is None:
            return False
        return secrets.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))
