"""SQLAlchemy model for password-holding user accounts."""

from __future__ import annotations

from sqlalchemy import BigInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from devicekey_auth.db.session import Base
from devicekey_auth.db.time import now_millis


class User(Base):
    """Account identified by its lowercase e-mail address."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(Text, primary_key=True)
    password_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=now_millis)
