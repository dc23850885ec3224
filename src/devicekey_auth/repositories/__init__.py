"""Repositories wrapping database access."""

from .device_key_repo import DeviceKeyRepository
from .user_repo import UserRepository

__all__ = ["DeviceKeyRepository", "UserRepository"]
