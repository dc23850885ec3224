"""Data access helpers for device keys and their renewal challenges."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from devicekey_auth.db.time import now_millis
from devicekey_auth.models.device_key import DeviceKey

__all__ = ["DeviceKeyRepository"]

logger = logging.getLogger(__name__)


class DeviceKeyRepository:
    """Narrow set of persisted operations on `DeviceKey` rows.

    There is no generic update path: each mutation the authentication flows
    need is a dedicated method. Methods flush but never commit; the caller owns
    the transaction.
    """

    def __init__(self, session: Session, clock: Callable[[], int] = now_millis) -> None:
        self.session = session
        self.clock = clock

    def create(
        self,
        *,
        owner: str,
        public_key: bytes,
        device_info: dict[str, Any] | None,
        expires_after: int,
    ) -> DeviceKey:
        """Insert a new key with a fresh id and no pending challenge.

        Identical `public_key` bytes on another row are allowed; keys are
        identified by id only.
        """
        now = self.clock()
        key = DeviceKey(
            id=uuid.uuid4(),
            owner=owner,
            public_key=public_key,
            created_at=now,
            last_usage=now,
            expires_after=expires_after,
            device_info=device_info or {},
            invalid_attempts=0,
        )
        self.session.add(key)
        self.session.flush()
        return key

    def find_by_id_and_owner(
        self,
        key_id: uuid.UUID,
        owner: str,
        include_expired: bool = False,
    ) -> DeviceKey | None:
        """Return the non-revoked key with this id owned by `owner`, or None.

        Keys past their lifetime are skipped unless `include_expired` is set.
        """
        stmt = select(DeviceKey).where(
            DeviceKey.id == key_id,
            DeviceKey.owner == owner,
            DeviceKey.deleted_at.is_(None),
        )
        if not include_expired:
            stmt = stmt.where(DeviceKey.created_at + DeviceKey.expires_after > self.clock())
        return self.session.execute(stmt).scalars().first()

    def list_by_owner(self, owner: str, include_deleted: bool = False) -> list[DeviceKey]:
        """Return the owner's keys, oldest first."""
        stmt = select(DeviceKey).where(DeviceKey.owner == owner)
        if not include_deleted:
            stmt = stmt.where(DeviceKey.deleted_at.is_(None))
        stmt = stmt.order_by(DeviceKey.created_at)
        return list(self.session.execute(stmt).scalars())

    def set_challenge(self, key: DeviceKey, challenge: str, expires_at: int) -> None:
        """Store a new pending challenge, replacing any previous one."""
        key.challenge = challenge
        key.challenge_expires_at = expires_at
        self.session.flush()

    def consume_challenge(
        self,
        key: DeviceKey,
        expected_challenge: str,
        device_info: dict[str, Any] | None,
    ) -> bool:
        """Clear the challenge only if it still equals `expected_challenge`.

        Runs as one conditional UPDATE so that, of several concurrent renewals
        presenting the same challenge, exactly one affects the row. Returns
        True when this call won.
        """
        values: dict[str, Any] = {
            "challenge": None,
            "challenge_expires_at": None,
            "last_usage": self.clock(),
            "invalid_attempts": 0,
        }
        if device_info is not None:
            values["device_info"] = device_info
        stmt = (
            update(DeviceKey)
            .where(
                DeviceKey.id == key.id,
                DeviceKey.owner == key.owner,
                DeviceKey.challenge == expected_challenge,
                DeviceKey.deleted_at.is_(None),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        self.session.refresh(key)
        return result.rowcount == 1

    def touch(self, key: DeviceKey) -> None:
        """Record a use of the key without touching its challenge."""
        key.last_usage = self.clock()
        self.session.flush()

    def record_failed_attempt(self, key: DeviceKey, max_attempts: int) -> bool:
        """Count a rejected renewal; revoke the key past `max_attempts`.

        Both steps are single UPDATE statements so concurrent failures are all
        counted and only one of them performs the revocation. Returns True when
        the key was revoked by this call.
        """
        self.session.flush()
        self.session.execute(
            update(DeviceKey)
            .where(DeviceKey.id == key.id)
            .values(invalid_attempts=DeviceKey.invalid_attempts + 1)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(
            update(DeviceKey)
            .where(
                DeviceKey.id == key.id,
                DeviceKey.deleted_at.is_(None),
                DeviceKey.invalid_attempts > max_attempts,
            )
            .values(deleted_at=self.clock())
            .execution_options(synchronize_session=False)
        )
        self.session.refresh(key)
        return result.rowcount == 1

    def revoke(self, key: DeviceKey) -> None:
        """Soft-delete the key; it can no longer be found for renewal."""
        if key.deleted_at is None:
            key.deleted_at = self.clock()
            key.challenge = None
            key.challenge_expires_at = None
            self.session.flush()

    def expire_keys(self, now: int) -> int:
        """Revoke every active key whose lifetime ended before `now`."""
        stmt = (
            update(DeviceKey)
            .where(
                DeviceKey.deleted_at.is_(None),
                DeviceKey.created_at + DeviceKey.expires_after < now,
            )
            .values(deleted_at=now, challenge=None, challenge_expires_at=None)
        )
        return self._execute_bulk(stmt)

    def purge_deleted(self, before: int) -> int:
        """Physically delete keys revoked before `before`."""
        stmt = delete(DeviceKey).where(
            DeviceKey.deleted_at.is_not(None),
            DeviceKey.deleted_at < before,
        )
        return self._execute_bulk(stmt)

    def purge_superseded(self) -> int:
        """Physically delete revoked keys replaced by a newer key of the same device.

        Keys are grouped by owner and the `deviceId` entry of their device
        info; keys without a `deviceId` are never considered.
        """
        device_id = DeviceKey.device_info["deviceId"].as_string()
        latest = self.session.execute(
            select(DeviceKey.owner, device_id.label("device_id"), func.max(DeviceKey.created_at))
            .where(device_id.is_not(None))
            .group_by(DeviceKey.owner, "device_id")
        ).all()

        total = 0
        for owner, device, newest in latest:
            stmt = delete(DeviceKey).where(
                DeviceKey.owner == owner,
                device_id == device,
                DeviceKey.created_at < newest,
                DeviceKey.deleted_at.is_not(None),
            )
            count = self._execute_bulk(stmt)
            if count:
                logger.info("Deleted superseded keys of %s device %s: %d", owner, device, count)
            total += count
        return total

    def _execute_bulk(self, stmt) -> int:
        # Objects already in the session are reloaded on next access.
        self.session.flush()
        result = self.session.execute(stmt.execution_options(synchronize_session=False))
        self.session.expire_all()
        return result.rowcount
