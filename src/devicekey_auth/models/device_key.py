"""SQLAlchemy model for device public keys and their renewal challenge."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import JSON, BigInteger, Index, Integer, LargeBinary, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from devicekey_auth.db.session import Base


class DeviceKey(Base):
    """Public key registered by one device of a user.

    A user owns any number of keys. `challenge` and `challenge_expires_at` are
    only set between an init-renew and the renew that consumes them.
    """

    __tablename__ = "user_keys"
    __table_args__ = (Index("ix_user_keys_id_owner", "id", "owner"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    public_key: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    last_usage: Mapped[int] = mapped_column(BigInteger, nullable=False)
    expires_after: Mapped[int] = mapped_column(BigInteger, nullable=False)
    device_info: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    challenge: Mapped[str | None] = mapped_column(Text, nullable=True)
    challenge_expires_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    invalid_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
