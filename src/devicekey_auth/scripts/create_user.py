"""Utility script to create or reset a password account."""
from __future__ import annotations

import argparse
import getpass
import sys

from devicekey_auth.core.security import hash_password
from devicekey_auth.db.session import SessionLocal, create_tables
from devicekey_auth.repositories.user_repo import UserRepository


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a user account for password login")
    parser.add_argument("email", help="Account e-mail (stored lowercase)")
    parser.add_argument(
        "--password",
        default=None,
        help="Password; prompted for when omitted.",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before inserting (development databases).",
    )
    args = parser.parse_args(argv)

    email = args.email.strip().lower()
    password = args.password or getpass.getpass(f"Password for {email}: ")
    if not password:
        print("[create_user] ERROR: empty password", file=sys.stderr)
        return 1

    if args.create_tables:
        create_tables()

    db = SessionLocal()
    try:
        users = UserRepository(db)
        user = users.get_by_email(email)
        if user is None:
            users.create(email=email, password_hash=hash_password(password))
            print(f"[create_user] created {email}")
        else:
            user.password_hash = hash_password(password)
            print(f"[create_user] reset password of {email}")
        db.commit()
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
