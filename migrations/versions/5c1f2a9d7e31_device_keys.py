"""users, device keys and preferences

Revision ID: 5c1f2a9d7e31
Revises:
Create Date: 2026-10-19 09:12:44.301552

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1f2a9d7e31"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create account, device key and preference tables."""
    op.create_table(
        "users",
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("email"),
    )
    op.create_table(
        "user_keys",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("owner", sa.Text(), nullable=False),
        sa.Column("public_key", sa.LargeBinary(), nullable=False),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("last_usage", sa.BigInteger(), nullable=False),
        sa.Column("expires_after", sa.BigInteger(), nullable=False),
        sa.Column("device_info", sa.JSON(), nullable=True),
        sa.Column("challenge", sa.Text(), nullable=True),
        sa.Column("challenge_expires_at", sa.BigInteger(), nullable=True),
        sa.Column("invalid_attempts", sa.Integer(), nullable=False),
        sa.Column("deleted_at", sa.BigInteger(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_keys_owner", "user_keys", ["owner"])
    op.create_index("ix_user_keys_id_owner", "user_keys", ["id", "owner"])
    op.create_table(
        "user_preferences",
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("lang", sa.Text(), nullable=True),
        sa.Column("distance_unit", sa.Text(), nullable=True),
        sa.Column("hour_format", sa.Text(), nullable=True),
        sa.Column("date_format", sa.Text(), nullable=True),
        sa.Column("theme", sa.Text(), nullable=True),
        sa.Column("trace_min_meters", sa.Integer(), nullable=True),
        sa.Column("trace_min_millis", sa.BigInteger(), nullable=True),
        sa.Column("photo_max_pixels", sa.Integer(), nullable=True),
        sa.Column("photo_max_quality", sa.SmallInteger(), nullable=True),
        sa.PrimaryKeyConstraint("email"),
    )


def downgrade() -> None:
    """Drop the tables created by this revision."""
    op.drop_table("user_preferences")
    op.drop_index("ix_user_keys_id_owner", table_name="user_keys")
    op.drop_index("ix_user_keys_owner", table_name="user_keys")
    op.drop_table("user_keys")
    op.drop_table("users")
