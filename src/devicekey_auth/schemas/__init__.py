# src/devicekey_auth/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .auth import (
    AuthResponse,
    InitRenewRequest,
    InitRenewResponse,
    LoginRequest,
    RenewTokenRequest,
    UserKeyResponse,
)
from .preferences import UserPreferences

__all__ = [
    "AuthResponse",
    "InitRenewRequest",
    "InitRenewResponse",
    "LoginRequest",
    "RenewTokenRequest",
    "UserKeyResponse",
    "UserPreferences",
]
