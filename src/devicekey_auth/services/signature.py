# src/devicekey_auth/services/signature.py
"""Public key parsing and signature verification for device keys."""

from __future__ import annotations

import logging

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

logger = logging.getLogger(__name__)

SupportedPublicKey = rsa.RSAPublicKey | ec.EllipticCurvePublicKey | Ed25519PublicKey


def renewal_message(email: str, challenge: str) -> bytes:
    """Return the exact bytes a device signs to renew its session."""
    return (email + challenge).encode("utf-8")


class SignatureVerifier:
    """Verify device signatures with the scheme matching the stored key type.

    RSA keys use PKCS#1 v1.5 with SHA-256, EC keys use ECDSA with SHA-256 and
    Ed25519 keys use plain Ed25519.
    """

    @staticmethod
    def load_public_key(der_bytes: bytes) -> SupportedPublicKey:
        """Parse an SPKI (X.509 DER) public key.

        Raises:
            ValueError: If the bytes are not a DER public key of a supported type.
        """
        try:
            key = serialization.load_der_public_key(der_bytes)
        except (ValueError, UnsupportedAlgorithm) as err:
            raise ValueError(f"Invalid public key: {err}") from err
        if not isinstance(key, (rsa.RSAPublicKey, ec.EllipticCurvePublicKey, Ed25519PublicKey)):
            raise ValueError(f"Unsupported public key type: {type(key).__name__}")
        return key

    @classmethod
    def is_supported_public_key(cls, der_bytes: bytes) -> bool:
        try:
            cls.load_public_key(der_bytes)
        except ValueError:
            return False
        return True

    @classmethod
    def verify(cls, public_key_der: bytes, message: bytes, signature: bytes) -> bool:
        """Return True if `signature` over `message` verifies under the key."""
        try:
            key = cls.load_public_key(public_key_der)
        except ValueError as err:
            logger.warning("Stored device key cannot be loaded: %s", err)
            return False
        try:
            if isinstance(key, rsa.RSAPublicKey):
                key.verify(signature, message, padding.PKCS1v15(), hashes.SHA256())
            elif isinstance(key, ec.EllipticCurvePublicKey):
                key.verify(signature, message, ec.ECDSA(hashes.SHA256()))
            else:
                key.verify(signature, message)
        except (InvalidSignature, ValueError):
            return False
        return True

    @classmethod
    def verify_renewal(
        cls,
        public_key_der: bytes,
        email: str,
        challenge: str,
        signature: bytes,
    ) -> bool:
        """Verify a signature over `email + challenge`."""
        return cls.verify(public_key_der, renewal_message(email, challenge), signature)
