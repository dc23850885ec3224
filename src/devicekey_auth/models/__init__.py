# src/devicekey_auth/models/__init__.py
"""SQLAlchemy models for the device-key authentication service."""

from .device_key import DeviceKey
from .preferences import UserPreferencesRecord
from .user import User

__all__ = [
    "DeviceKey",
    "User",
    "UserPreferencesRecord",
]
