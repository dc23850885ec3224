# src/devicekey_auth/scripts/housekeeping.py
"""
Daily maintenance job for device keys.

This script should be run once a day to:
1. Revoke keys whose lifetime has ended
2. Delete keys revoked longer ago than the retention period
3. Delete revoked keys replaced by a newer key on the same device
"""
from __future__ import annotations

import argparse
import sys

from devicekey_auth.core.logging import configure_logging
from devicekey_auth.core.settings import MILLIS_PER_DAY
from devicekey_auth.db.session import SessionLocal
from devicekey_auth.services.housekeeping import run_housekeeping


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Expire and purge device keys")
    parser.add_argument(
        "--skip-purge",
        action="store_true",
        help="Only revoke expired keys; keep revoked rows.",
    )
    parser.add_argument(
        "--retention-days",
        type=int,
        default=None,
        help="Override DELETED_KEY_RETENTION_DAYS for this run.",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    retention_ms = None if args.retention_days is None else args.retention_days * MILLIS_PER_DAY
    db = SessionLocal()
    try:
        report = run_housekeeping(db, purge=not args.skip_purge, retention_ms=retention_ms)
    except Exception as exc:
        print(f"[housekeeping] ERROR: {exc}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print(
        f"[housekeeping] expired={report.expired} purged={report.purged} "
        f"superseded={report.superseded}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
