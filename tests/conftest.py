# tests/conftest.py
from __future__ import annotations

import base64
import os
from collections.abc import Generator, Iterator
from dataclasses import dataclass

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-device-key-auth")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from devicekey_auth.core.security import hash_password
from devicekey_auth.db.session import Base
from devicekey_auth.db.session import get_db as app_get_session
from devicekey_auth.main import app as fastapi_app
from devicekey_auth.models import User
from devicekey_auth.services.auth_service import AuthService

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "correct horse battery staple"
START_MILLIS = 1_760_000_000_000


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


@dataclass
class DeviceIdentity:
    """RSA key pair held by a simulated client device."""

    private_key: rsa.RSAPrivateKey

    @property
    def public_der(self) -> bytes:
        return self.private_key.public_key().public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )

    @property
    def public_b64(self) -> str:
        return b64(self.public_der)

    def sign(self, email: str, challenge: str) -> str:
        signature = self.private_key.sign(
            (email + challenge).encode("utf-8"),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
        return b64(signature)


class FakeClock:
    """Manually advanced clock returning epoch millis."""

    def __init__(self, now: int = START_MILLIS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, *, seconds: float = 0, millis: int = 0) -> None:
        self.now += int(seconds * 1000) + millis


class CountingRandomSource:
    """Deterministic random source: each call returns bytes of the next value."""

    def __init__(self) -> None:
        self.calls = 0

    def token_bytes(self, size: int) -> bytes:
        self.calls += 1
        return bytes([self.calls % 256]) * size


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture(scope="session")
def _rsa_keys() -> list[rsa.RSAPrivateKey]:
    # Key generation is slow; share a small pool across the session.
    return [rsa.generate_private_key(public_exponent=65537, key_size=2048) for _ in range(2)]


@pytest.fixture()
def device(_rsa_keys: list[rsa.RSAPrivateKey]) -> DeviceIdentity:
    """Primary simulated device."""
    return DeviceIdentity(_rsa_keys[0])


@pytest.fixture()
def other_device(_rsa_keys: list[rsa.RSAPrivateKey]) -> DeviceIdentity:
    """Second device holding a different key pair."""
    return DeviceIdentity(_rsa_keys[1])


def _create_user(db_session: Session, email: str) -> User:
    user = User(email=email, password_hash=hash_password(TEST_PASSWORD), created_at=START_MILLIS)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Persisted account with password TEST_PASSWORD."""
    return _create_user(db_session, "alice@example.com")


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """Second persisted account with the same password."""
    return _create_user(db_session, "bob@example.com")


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def random_source() -> CountingRandomSource:
    return CountingRandomSource()


@pytest.fixture()
def auth_service(
    db_session: Session,
    clock: FakeClock,
    random_source: CountingRandomSource,
) -> AuthService:
    """Service wired with a controllable clock and random source."""
    return AuthService(db_session, clock=clock, random_source=random_source)
