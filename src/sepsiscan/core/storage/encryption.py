"""Fernet encryption for profile records at rest.

A profile (identity, clinical context and full check-in history) is stored
as one encrypted JSON document. Only the id, display name and timestamps
stay in plaintext so profiles can be listed without decrypting them.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

from sepsiscan.domains.sepsis.domain_logic.models import UserProfile

logger = logging.getLogger(__name__)


class EncryptionError(Exception):
    """Raised when encryption/decryption fails."""


class ProfileEncryptor:
    """Fernet encryption for profile documents and other JSON-serializable values.

    Usage::

        encryptor = ProfileEncryptor(key="...")
        token = encryptor.encrypt_profile(profile)
        profile = encryptor.decrypt_profile(token)
    """

    def __init__(self, key: str) -> None:
        """Initialize with a Fernet key.

        Args:
            key: A valid Fernet key string. Generate with
                 :meth:`generate_key`.

        Raises:
            EncryptionError: If the key is empty or invalid.
        """
        if not key or not key.strip():
            raise EncryptionError("Encryption key must not be empty")
        try:
            self._fernet = Fernet(key.encode())
        except ValueError as exc:
            raise EncryptionError(f"Invalid encryption key: {exc}") from exc

    def encrypt(self, data: Any) -> str:
        """Encrypt a JSON-serializable value to a Fernet token string.

        Raises:
            EncryptionError: If serialization fails.
        """
        if data is None:
            return ""
        try:
            plaintext = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise EncryptionError(f"Encryption failed: {exc}") from exc
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, token: str) -> Any:
        """Decrypt a Fernet token string back to a Python object.

        Raises:
            EncryptionError: If the token is invalid, was made with another key,
                or does not hold JSON.
        """
        if not token:
            return None
        try:
            plaintext = self._fernet.decrypt(token.encode("utf-8"))
        except InvalidToken as exc:
            raise EncryptionError("Decryption failed: invalid token or wrong key") from exc
        try:
            return json.loads(plaintext)
        except ValueError as exc:
            raise EncryptionError(f"Decryption failed: {exc}") from exc

    def encrypt_profile(self, profile: UserProfile) -> str:
        """Encrypt a whole profile, history included, as one token."""
        return self.encrypt(profile.to_dict())

    def decrypt_profile(self, token: str) -> UserProfile:
        """Decrypt a token written by :meth:`encrypt_profile`.

        Raises:
            EncryptionError: If the token cannot be decrypted or does not
                hold a profile document.
        """
        data = self.decrypt(token)
        if not isinstance(data, dict):
            raise EncryptionError("Decryption failed: token holds no profile document")
        try:
            return UserProfile.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Stored profile document could not be rebuilt: %s", exc)
            raise EncryptionError(f"Decryption failed: malformed profile: {exc}") from exc

    @staticmethod
    def generate_key() -> str:
        """Generate a new URL-safe base64-encoded 32-byte Fernet key."""
        return Fernet.generate_key().decode("utf-8")
