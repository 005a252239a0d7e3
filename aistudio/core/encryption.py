"""
Encryption for tenant-supplied vendor API keys.

Keys are stored as "<nonce_b64>:<ciphertext_b64>" using AES-256-GCM.
Values without exactly one ":" are treated as legacy plain-text keys.
"""

import base64
import logging
import secrets
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from aistudio.core.config import settings
from aistudio.core.errors import ConfigurationError

logger = logging.getLogger("aistudio.core.encryption")

ENCRYPTION_HINT = "Set ENCRYPTION_KEY to 64 hex characters. Generate one with: openssl rand -hex 32"


class SecretBox:
    """AES-GCM helper bound to one 32-byte key."""

    def __init__(self, key_hex: Optional[str] = None):
        key_hex = key_hex if key_hex is not None else settings.ENCRYPTION_KEY
        if not key_hex:
            raise ConfigurationError(
                "Server encryption key is not configured.",
                error="Encryption not configured",
                hint=ENCRYPTION_HINT,
                status_code=500,
            )
        try:
            key = bytes.fromhex(key_hex)
        except ValueError:
            key = b""
        if len(key) != 32:
            raise ConfigurationError(
                "ENCRYPTION_KEY must decode to exactly 32 bytes.",
                error="Encryption not configured",
                hint=ENCRYPTION_HINT,
                status_code=500,
            )
        self._cipher = AESGCM(key)

    def encrypt(self, plaintext: str) -> str:
        nonce = secrets.token_bytes(12)
        ciphertext = self._cipher.encrypt(nonce, plaintext.encode("utf-8"), None)
        return (
            base64.b64encode(nonce).decode("ascii")
            + ":"
            + base64.b64encode(ciphertext).decode("ascii")
        )

    def decrypt(self, token: str) -> str:
        nonce_b64, ciphertext_b64 = token.split(":", 1)
        try:
            plaintext = self._cipher.decrypt(
                base64.b64decode(nonce_b64), base64.b64decode(ciphertext_b64), None
            )
        except (InvalidTag, ValueError) as e:
            logger.error(f"API key decryption failed: {type(e).__name__}")
            raise ConfigurationError(
                "Your API key could not be decrypted. The server encryption key may have changed.",
                error="API key decryption failed",
                hint="Remove and re-add your API key in Settings > AI Integrations.",
                status_code=500,
            )
        return plaintext.decode("utf-8")


def is_encrypted(value: str) -> bool:
    """True for values in the "<nonce>:<ciphertext>" storage format."""
    return value.count(":") == 1


def encrypt_secret(plaintext: str) -> str:
    return SecretBox().encrypt(plaintext)


def reveal_secret(stored: Optional[str]) -> Optional[str]:
    """Return the plaintext of a stored key, accepting legacy plain values."""
    if not stored:
        return None
    if is_encrypted(stored):
        return SecretBox().decrypt(stored)
    return stored
