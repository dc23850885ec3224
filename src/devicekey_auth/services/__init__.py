# src/devicekey_auth/services/__init__.py
"""Service layer for device-key authentication."""

from .auth_service import AuthService
from .challenge import ChallengeIssuer
from .signature import SignatureVerifier
from .tokens import TokenIssuer

__all__ = ["AuthService", "ChallengeIssuer", "SignatureVerifier", "TokenIssuer"]
