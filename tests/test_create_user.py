# tests/test_create_user.py
from __future__ import annotations

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from devicekey_auth.core.security import hash_password
from devicekey_auth.models import User
from devicekey_auth.scripts import create_user


def test_creates_then_resets_account(engine: Engine, db_session: Session, monkeypatch) -> None:
    monkeypatch.setattr(create_user, "SessionLocal", sessionmaker(bind=engine))

    assert create_user.main(["Dana@Example.com", "--password", "first"]) == 0
    assert create_user.main(["dana@example.com", "--password", "second"]) == 0

    user = db_session.get(User, "dana@example.com")
    assert user is not None
    assert user.password_hash == hash_password("second")


def test_empty_password_is_refused(monkeypatch, capsys) -> None:
    monkeypatch.setattr(create_user.getpass, "getpass", lambda prompt: "")

    assert create_user.main(["dana@example.com"]) == 1
    assert "empty password" in capsys.readouterr().err
