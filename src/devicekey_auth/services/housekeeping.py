"""Periodic cleanup of expired and revoked device keys."""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from devicekey_auth.core.settings import settings
from devicekey_auth.db.time import now_millis
from devicekey_auth.repositories.device_key_repo import DeviceKeyRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HousekeepingReport:
    """Number of keys affected by one housekeeping run."""

    expired: int
    purged: int
    superseded: int


def expire_keys(db: Session, now: int) -> int:
    """Revoke keys whose lifetime has ended."""
    logger.info("Revoking expired device keys")
    count = DeviceKeyRepository(db).expire_keys(now)
    db.commit()
    logger.info("Revoked expired device keys: %d", count)
    return count


def purge_deleted_keys(db: Session, now: int, retention_ms: int | None = None) -> int:
    """Delete keys revoked longer ago than the retention period."""
    retention = settings.deleted_key_retention_ms if retention_ms is None else retention_ms
    logger.info("Purging device keys revoked more than %d ms ago", retention)
    count = DeviceKeyRepository(db).purge_deleted(now - retention)
    db.commit()
    logger.info("Purged device keys: %d", count)
    return count


def purge_superseded_keys(db: Session) -> int:
    """Delete revoked keys having a more recent key for the same user and device id."""
    logger.info("Purging revoked device keys superseded on the same device")
    count = DeviceKeyRepository(db).purge_superseded()
    db.commit()
    logger.info("Purged superseded device keys: %d", count)
    return count


def run_housekeeping(
    db: Session,
    clock: Callable[[], int] = now_millis,
    *,
    purge: bool = True,
    retention_ms: int | None = None,
) -> HousekeepingReport:
    """Expire, then purge old and superseded revoked keys.

    One reference instant is used for every step. With `purge` False only the
    expiry step runs.
    """
    now = clock()
    expired = expire_keys(db, now)
    if not purge:
        return HousekeepingReport(expired=expired, purged=0, superseded=0)
    return HousekeepingReport(
        expired=expired,
        purged=purge_deleted_keys(db, now, retention_ms),
        superseded=purge_superseded_keys(db),
    )
