"""Password login and signed-challenge session renewal."""

from __future__ import annotations

import base64
import binascii
import logging
import uuid
from collections.abc import Callable

from sqlalchemy.orm import Session

from devicekey_auth.core.exceptions import ForbiddenError, InvalidInputError
from devicekey_auth.core.security import PasswordHasher, RandomSource, Sha256PasswordHasher
from devicekey_auth.core.settings import settings
from devicekey_auth.db.time import now_millis
from devicekey_auth.models.device_key import DeviceKey
from devicekey_auth.repositories.device_key_repo import DeviceKeyRepository
from devicekey_auth.repositories.user_repo import UserRepository
from devicekey_auth.schemas.auth import (
    AuthResponse,
    InitRenewRequest,
    InitRenewResponse,
    LoginRequest,
    RenewTokenRequest,
    UserKeyResponse,
)
from devicekey_auth.services.challenge import ChallengeIssuer
from devicekey_auth.services.preferences import PreferencesService
from devicekey_auth.services.signature import SignatureVerifier
from devicekey_auth.services.tokens import TokenIssuer

logger = logging.getLogger(__name__)


def decode_b64(data: str) -> bytes:
    """Decode standard or URL-safe base64, accepting omitted padding.

    Raises:
        ValueError: If `data` is not base64.
    """
    cleaned = data.strip().replace("-", "+").replace("_", "/")
    padding = "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned + padding, validate=True)
    except binascii.Error as err:
        raise ValueError(f"Invalid base64 encoding: {err}") from err


class AuthService:
    """Orchestrates login, challenge issuance and renewal for device keys.

    Every credential failure raises `ForbiddenError`; the reason it carries is
    only logged. Each successful flow commits its own transaction.
    """

    def __init__(
        self,
        session: Session,
        *,
        token_issuer: TokenIssuer | None = None,
        password_hasher: PasswordHasher | None = None,
        random_source: RandomSource | None = None,
        clock: Callable[[], int] = now_millis,
        verifier: SignatureVerifier | None = None,
    ) -> None:
        self.session = session
        self.clock = clock
        self.keys = DeviceKeyRepository(session, clock=clock)
        self.users = UserRepository(session, clock=clock)
        self.preferences = PreferencesService(session)
        self.token_issuer = token_issuer or TokenIssuer()
        self.password_hasher = password_hasher or Sha256PasswordHasher()
        self.challenges = ChallengeIssuer(random_source)
        self.verifier = verifier or SignatureVerifier()

    # --- Login ---------------------------------------------------------------------
    def login(self, request: LoginRequest) -> AuthResponse:
        """Check the password and register the submitted device key."""
        email = request.email.lower()
        public_key = self._decode_public_key("publicKey", request.public_key)

        password_hash = self.password_hasher.hash(request.password)
        user = self.users.find_by_credentials(email, password_hash)
        if user is None:
            raise ForbiddenError("invalid credentials")

        key = self.keys.create(
            owner=email,
            public_key=public_key,
            device_info=request.device_info,
            expires_after=self._expires_after(request.expires_after),
        )
        response = self._response(email, key)
        self.session.commit()
        logger.info("Registered device key %s for %s", key.id, email)
        return response

    # --- Renewal -------------------------------------------------------------------
    def init_renew(self, request: InitRenewRequest) -> InitRenewResponse:
        """Issue a new challenge for the key, superseding any pending one."""
        key = self._find_key(request.key_id, request.email)
        challenge = self.challenges.issue(self.clock())
        self.keys.set_challenge(key, challenge.value, challenge.expires_at)
        self.session.commit()
        return InitRenewResponse(challenge=challenge.value)

    def renew(self, request: RenewTokenRequest) -> AuthResponse:
        """Verify the signed challenge and mint a new access token."""
        new_public_key: bytes | None = None
        if request.new_public_key is not None:
            new_public_key = self._decode_public_key("newPublicKey", request.new_public_key)

        key = self._find_key(request.key_id, request.email)
        expected = key.challenge
        if expected is None or not self.challenges.is_live(key.challenge_expires_at, self.clock()):
            raise ForbiddenError("no live challenge")

        if not self._is_valid_proof(key, expected, request):
            revoked = self.keys.record_failed_attempt(key, settings.key_max_invalid_attempts)
            self.session.commit()
            if revoked:
                logger.warning(
                    "Device key %s of %s revoked after %d invalid attempts",
                    key.id,
                    key.owner,
                    key.invalid_attempts,
                )
            raise ForbiddenError("invalid challenge response")

        if self.users.get_by_email(key.owner) is None:
            raise ForbiddenError("owner no longer exists")

        if not self.keys.consume_challenge(key, expected, request.device_info):
            self.session.rollback()
            raise ForbiddenError("challenge consumed concurrently")

        if new_public_key is not None:
            new_key = self.keys.create(
                owner=key.owner,
                public_key=new_public_key,
                device_info=request.device_info or key.device_info,
                expires_after=self._expires_after(request.new_key_expires_after),
            )
            self.keys.revoke(key)
            logger.info("Device key %s of %s rotated to %s", key.id, key.owner, new_key.id)
            key = new_key

        response = self._response(key.owner, key)
        self.session.commit()
        return response

    # --- Key management ------------------------------------------------------------
    def list_keys(self, email: str) -> list[UserKeyResponse]:
        """Return the active keys of `email`."""
        return [
            UserKeyResponse(
                id=str(key.id),
                created_at=key.created_at,
                last_usage=key.last_usage,
                device_info=key.device_info or {},
                deleted_at=key.deleted_at,
            )
            for key in self.keys.list_by_owner(email.lower())
        ]

    def delete_key(self, email: str, key_id: str) -> None:
        """Revoke one of the caller's keys, expired or not; unknown ids are ignored."""
        try:
            key = self._find_key(key_id, email, include_expired=True)
        except ForbiddenError:
            return
        self.keys.revoke(key)
        self.session.commit()

    # --- Helpers -------------------------------------------------------------------
    def _find_key(self, key_id: str, email: str, include_expired: bool = False) -> DeviceKey:
        try:
            parsed = uuid.UUID(key_id)
        except ValueError as err:
            raise ForbiddenError("malformed key id") from err
        key = self.keys.find_by_id_and_owner(parsed, email.lower(), include_expired)
        if key is None:
            raise ForbiddenError("unknown key for owner")
        return key

    def _is_valid_proof(self, key: DeviceKey, expected: str, request: RenewTokenRequest) -> bool:
        if not self.challenges.matches(expected, request.random):
            return False
        try:
            signature = decode_b64(request.signature)
        except ValueError:
            return False
        # The signed message uses the e-mail exactly as the client sent it.
        return self.verifier.verify_renewal(key.public_key, request.email, expected, signature)

    def _decode_public_key(self, field: str, encoded: str) -> bytes:
        try:
            public_key = decode_b64(encoded)
        except ValueError as err:
            raise InvalidInputError(field, str(err)) from err
        if not self.verifier.is_supported_public_key(public_key):
            raise InvalidInputError(field, "Invalid public key")
        return public_key

    @staticmethod
    def _expires_after(requested: int | None) -> int:
        if requested is None or requested < 1:
            return settings.key_default_expires_after_ms
        return requested

    def _response(self, email: str, key: DeviceKey) -> AuthResponse:
        token, expires_at = self.token_issuer.generate_token(email)
        return AuthResponse(
            access_token=token,
            expires=int(expires_at.timestamp() * 1000),
            email=email,
            key_id=str(key.id),
            key_created_at=key.created_at,
            key_expires_at=key.created_at + key.expires_after,
            preferences=self.preferences.get_preferences(email),
        )
