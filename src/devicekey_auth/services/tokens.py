"""Access token issuance and validation."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from devicekey_auth.core.settings import settings


class TokenIssuer:
    """Mint and decode HS256 JWT access tokens whose subject is an e-mail."""

    def __init__(
        self,
        secret_key: str | None = None,
        *,
        algorithm: str | None = None,
        lifetime: timedelta | None = None,
    ) -> None:
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.jwt_algorithm
        self.lifetime = lifetime or timedelta(minutes=settings.access_token_expire_minutes)

    def generate_token(self, subject: str) -> tuple[str, datetime]:
        """Return `(token, expires_at)` for `subject`."""
        now = datetime.now(UTC)
        # JWT exp has second precision; keep the reported expiry consistent with it.
        expires_at = (now + self.lifetime).replace(microsecond=0)
        claims: dict[str, object] = {"sub": subject, "iat": now, "exp": expires_at}
        token: str = jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
        return token, expires_at

    def decode_subject(self, token: str) -> str:
        """Return the subject of a valid, unexpired token.

        Raises:
            ValueError: If the token is malformed, expired or carries no subject.
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as err:
            raise ValueError("Could not validate credentials") from err
        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise ValueError("Could not validate credentials")
        return subject


def get_token_issuer() -> TokenIssuer:
    """Return a token issuer configured from settings."""
    return TokenIssuer()
