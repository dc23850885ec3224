"""Error types shared by the service layer and the REST handlers."""
from __future__ import annotations


class DeviceKeyAuthError(Exception):
    """Base class for errors rendered as an API error body."""

    status_code: int = 500
    error_code: str = "internal-error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_api_error(self) -> dict[str, object]:
        return {
            "httpCode": self.status_code,
            "errorCode": self.error_code,
            "errorMessage": self.message,
        }


class ForbiddenError(DeviceKeyAuthError):
    """Credentials were rejected.

    Every authentication failure raises this same error so callers cannot tell
    which check failed. `reason` is for server-side logs only and is never part
    of the API error body.
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(self, reason: str = "") -> None:
        super().__init__("Access denied")
        self.reason = reason


class InvalidInputError(DeviceKeyAuthError):
    """A request field is malformed (bad encoding, unparseable key)."""

    status_code = 400

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.error_code = f"invalid-{field}"
