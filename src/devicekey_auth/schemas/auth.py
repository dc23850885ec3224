"""Authentication request and response schemas."""

from typing import Any

from pydantic import Field, field_validator

from devicekey_auth.core.settings import MILLIS_PER_DAY

from .common import CamelModel
from .preferences import UserPreferences

# Upper bound for a requested key lifetime; keeps created_at + expires_after in BIGINT range.
MAX_KEY_LIFETIME_MS = 100 * 366 * MILLIS_PER_DAY


class EmailRequest(CamelModel):
    """Request carrying the e-mail that identifies the account."""

    email: str = Field(..., max_length=250)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Reject values that cannot be an e-mail address; the value is kept as sent."""
        if v != v.strip():
            raise ValueError("E-mail must not have surrounding whitespace")
        local, sep, domain = v.partition("@")
        if not sep or not local or not domain or "@" in domain:
            raise ValueError("A valid e-mail address is required")
        return v


class LoginRequest(EmailRequest):
    """Password login that registers a new device key."""

    password: str = Field(..., min_length=1)
    public_key: str = Field(..., description="Base64 SPKI (X.509 DER) public key")
    device_info: dict[str, Any] | None = None
    expires_after: int | None = Field(
        None,
        le=MAX_KEY_LIFETIME_MS,
        description="Requested key lifetime in milliseconds",
    )


class InitRenewRequest(EmailRequest):
    """Request for a fresh renewal challenge."""

    key_id: str = Field(..., max_length=64)


class InitRenewResponse(CamelModel):
    """Challenge the device must sign."""

    challenge: str


class RenewTokenRequest(EmailRequest):
    """Signed challenge proving possession of a registered private key."""

    key_id: str = Field(..., max_length=64)
    random: str = Field(..., max_length=256, description="Challenge echoed back")
    signature: str = Field(..., description="Base64 signature over email + challenge")
    device_info: dict[str, Any] | None = None
    new_public_key: str | None = Field(
        None,
        description="Optional replacement key; the current key is revoked on success",
    )
    new_key_expires_after: int | None = Field(None, le=MAX_KEY_LIFETIME_MS)


class AuthResponse(CamelModel):
    """Access token returned after login or renewal."""

    access_token: str
    expires: int = Field(..., description="Token expiry as epoch milliseconds")
    email: str
    key_id: str
    key_created_at: int
    key_expires_at: int = Field(..., description="Device key expiry as epoch milliseconds")
    preferences: UserPreferences


class UserKeyResponse(CamelModel):
    """Device key as listed to its owner."""

    id: str
    created_at: int
    last_usage: int
    device_info: dict[str, Any] = Field(default_factory=dict)
    deleted_at: int | None = None
