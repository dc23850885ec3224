"""Data access helpers for user accounts."""
from __future__ import annotations

from collections.abc import Callable

from sqlalchemy import select
from sqlalchemy.orm import Session

from devicekey_auth.db.time import now_millis
from devicekey_auth.models.user import User

__all__ = ["UserRepository"]


class UserRepository:
    """Thin wrapper around database access for user accounts."""

    def __init__(self, session: Session, clock: Callable[[], int] = now_millis) -> None:
        self.session = session
        self.clock = clock

    def get_by_email(self, email: str) -> User | None:
        """Return a user by its normalized e-mail."""
        return self.session.get(User, email)

    def find_by_credentials(self, email: str, password_hash: str) -> User | None:
        """Return the user only if both e-mail and password digest match."""
        stmt = select(User).where(
            User.email == email,
            User.password_hash == password_hash,
        )
        return self.session.execute(stmt).scalars().first()

    def create(self, *, email: str, password_hash: str | None) -> User:
        """Insert a user; `email` must already be lowercase."""
        user = User(email=email, password_hash=password_hash, created_at=self.clock())
        self.session.add(user)
        self.session.flush()
        return user
