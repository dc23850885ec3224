# tests/test_device_key_repo.py
"""Tests for the device key repository."""

import uuid

from sqlalchemy import update
from sqlalchemy.orm import Session

from devicekey_auth.models import DeviceKey
from devicekey_auth.repositories.device_key_repo import DeviceKeyRepository
from tests.conftest import FakeClock

DAY_MS = 24 * 60 * 60 * 1000
OWNER = "alice@example.com"


def _repo(db_session: Session, clock: FakeClock) -> DeviceKeyRepository:
    return DeviceKeyRepository(db_session, clock=clock)


def _create(repo: DeviceKeyRepository, public_key: bytes = b"pk", owner: str = OWNER) -> DeviceKey:
    return repo.create(
        owner=owner,
        public_key=public_key,
        device_info={"platform": "test"},
        expires_after=30 * DAY_MS,
    )


def test_create_sets_timestamps_and_no_challenge(db_session: Session, clock: FakeClock) -> None:
    key = _create(_repo(db_session, clock))

    assert isinstance(key.id, uuid.UUID)
    assert key.created_at == key.last_usage == clock.now
    assert key.challenge is None
    assert key.challenge_expires_at is None
    assert key.invalid_attempts == 0
    assert key.device_info == {"platform": "test"}


def test_duplicate_public_keys_get_distinct_rows(db_session: Session, clock: FakeClock) -> None:
    repo = _repo(db_session, clock)
    first = _create(repo, public_key=b"same")
    second = _create(repo, public_key=b"same")

    assert first.id != second.id
    assert repo.find_by_id_and_owner(first.id, OWNER) is first
    assert repo.find_by_id_and_owner(second.id, OWNER) is second


def test_find_requires_matching_owner(db_session: Session, clock: FakeClock) -> None:
    repo = _repo(db_session, clock)
    key = _create(repo)

    assert repo.find_by_id_and_owner(key.id, "bob@example.com") is None
    assert repo.find_by_id_and_owner(uuid.uuid4(), OWNER) is None


def test_find_skips_revoked_and_expired_keys(db_session: Session, clock: FakeClock) -> None:
    repo = _repo(db_session, clock)
    revoked = _create(repo)
    repo.revoke(revoked)
    short_lived = repo.create(owner=OWNER, public_key=b"pk", device_info=None, expires_after=1_000)

    assert repo.find_by_id_and_owner(revoked.id, OWNER) is None
    assert repo.find_by_id_and_owner(short_lived.id, OWNER) is short_lived
    clock.advance(seconds=1)
    assert repo.find_by_id_and_owner(short_lived.id, OWNER) is None


def test_set_challenge_overwrites_previous(db_session: Session, clock: FakeClock) -> None:
    repo = _repo(db_session, clock)
    key = _create(repo)

    repo.set_challenge(key, "first", clock.now + 60_000)
    repo.set_challenge(key, "second", clock.now + 90_000)

    reloaded = db_session.get(DeviceKey, key.id)
    assert reloaded.challenge == "second"
    assert reloaded.challenge_expires_at == clock.now + 90_000


def test_consume_challenge_clears_and_touches(db_session: Session, clock: FakeClock) -> None:
    repo = _repo(db_session, clock)
    key = _create(repo)
    repo.set_challenge(key, "nonce", clock.now + 60_000)
    key.invalid_attempts = 2
    db_session.flush()
    clock.advance(seconds=5)

    assert repo.consume_challenge(key, "nonce", {"platform": "renewed"}) is True

    assert key.challenge is None
    assert key.challenge_expires_at is None
    assert key.last_usage == clock.now
    assert key.invalid_attempts == 0
    assert key.device_info == {"platform": "renewed"}


def test_consume_challenge_only_once(db_session: Session, clock: FakeClock) -> None:
    repo = _repo(db_session, clock)
    key = _create(repo)
    repo.set_challenge(key, "nonce", clock.now + 60_000)

    assert repo.consume_challenge(key, "nonce", None) is True
    assert repo.consume_challenge(key, "nonce", None) is False


def test_consume_challenge_loses_when_row_changed(db_session: Session, clock: FakeClock) -> None:
    """A competing writer that already cleared the row makes the update a no-op."""
    repo = _repo(db_session, clock)
    key = _create(repo)
    repo.set_challenge(key, "nonce", clock.now + 60_000)

    db_session.execute(
        update(DeviceKey)
        .where(DeviceKey.id == key.id)
        .values(challenge=None, challenge_expires_at=None)
        .execution_options(synchronize_session=False)
    )
    assert key.challenge == "nonce"  # stale in-memory view, as in a concurrent request

    assert repo.consume_challenge(key, "nonce", None) is False
    assert key.challenge is None


def test_touch_updates_last_usage_only(db_session: Session, clock: FakeClock) -> None:
    repo = _repo(db_session, clock)
    key = _create(repo)
    repo.set_challenge(key, "nonce", clock.now + 60_000)
    clock.advance(seconds=10)

    repo.touch(key)

    assert key.last_usage == clock.now
    assert key.challenge == "nonce"


def test_record_failed_attempt_revokes_past_threshold(db_session: Session, clock: FakeClock) -> None:
    repo = _repo(db_session, clock)
    key = _create(repo)

    assert [repo.record_failed_attempt(key, max_attempts=2) for _ in range(3)] == [
        False,
        False,
        True,
    ]
    assert key.deleted_at == clock.now
    assert repo.find_by_id_and_owner(key.id, OWNER) is None


def test_record_failed_attempt_counts_in_database(db_session: Session, clock: FakeClock) -> None:
    repo = _repo(db_session, clock)
    key = _create(repo)
    # A concurrent request records a failure the loaded object has not seen.
    db_session.execute(
        update(DeviceKey)
        .where(DeviceKey.id == key.id)
        .values(invalid_attempts=1)
        .execution_options(synchronize_session=False)
    )
    assert key.invalid_attempts == 0

    assert repo.record_failed_attempt(key, max_attempts=3) is False
    assert key.invalid_attempts == 2


def test_find_can_include_expired_keys(db_session: Session, clock: FakeClock) -> None:
    repo = _repo(db_session, clock)
    key = repo.create(owner=OWNER, public_key=b"pk", device_info=None, expires_after=1_000)
    clock.advance(seconds=5)

    assert repo.find_by_id_and_owner(key.id, OWNER) is None
    assert repo.find_by_id_and_owner(key.id, OWNER, include_expired=True) is key
    repo.revoke(key)
    assert repo.find_by_id_and_owner(key.id, OWNER, include_expired=True) is None


def test_list_by_owner_filters_revoked(db_session: Session, clock: FakeClock) -> None:
    repo = _repo(db_session, clock)
    active = _create(repo)
    clock.advance(millis=1)
    revoked = _create(repo)
    repo.revoke(revoked)
    _create(repo, owner="bob@example.com")

    assert [k.id for k in repo.list_by_owner(OWNER)] == [active.id]
    assert [k.id for k in repo.list_by_owner(OWNER, include_deleted=True)] == [active.id, revoked.id]


def test_expire_and_purge(db_session: Session, clock: FakeClock) -> None:
    repo = _repo(db_session, clock)
    old = repo.create(owner=OWNER, public_key=b"pk", device_info=None, expires_after=1_000)
    fresh = _create(repo)
    clock.advance(seconds=2)

    assert repo.expire_keys(clock.now) == 1
    assert db_session.get(DeviceKey, old.id).deleted_at == clock.now
    assert db_session.get(DeviceKey, fresh.id).deleted_at is None

    assert repo.purge_deleted(before=clock.now) == 0
    assert repo.purge_deleted(before=clock.now + 1) == 1
    assert [k.id for k in repo.list_by_owner(OWNER, include_deleted=True)] == [fresh.id]
