"""Stored display preferences of a user."""

from __future__ import annotations

from sqlalchemy import BigInteger, Integer, SmallInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from devicekey_auth.db.session import Base


class UserPreferencesRecord(Base):
    """Per-user preferences; absent fields fall back to client defaults."""

    __tablename__ = "user_preferences"

    email: Mapped[str] = mapped_column(Text, primary_key=True)
    lang: Mapped[str | None] = mapped_column(Text, nullable=True)
    distance_unit: Mapped[str | None] = mapped_column(Text, nullable=True)
    hour_format: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_format: Mapped[str | None] = mapped_column(Text, nullable=True)
    theme: Mapped[str | None] = mapped_column(Text, nullable=True)
    trace_min_meters: Mapped[int | None] = mapped_column(Integer, nullable=True)
    trace_min_millis: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    photo_max_pixels: Mapped[int | None] = mapped_column(Integer, nullable=True)
    photo_max_quality: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)
