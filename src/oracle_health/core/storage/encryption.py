"""Fernet sealing of health payloads before they touch disk."""

from __future__ import annotations

import json
from typing import Any

from cryptography.fernet import Fernet, InvalidToken


class EncryptionError(Exception):
    """Raised when a payload cannot be sealed or opened."""


class PayloadCipher:
    """Seals JSON payloads into Fernet tokens and opens them again.

    Usage::

        cipher = PayloadCipher(PayloadCipher.generate_key())
        token = cipher.seal({"systolic_bp": 128})
        cipher.open(token)  # {"systolic_bp": 128}
    """

    def __init__(self, key: str) -> None:
        """
        Raises:
            EncryptionError: If the key is empty or not a valid Fernet key.
        """
        if not key or not key.strip():
            raise EncryptionError("Encryption key must not be empty")
        try:
            self._fernet = Fernet(key.strip().encode("utf-8"))
        except ValueError as exc:
            raise EncryptionError(f"Invalid encryption key: {exc}") from exc

    def seal(self, payload: dict[str, Any] | list[Any]) -> str:
        try:
            plaintext = json.dumps(payload, separators=(",", ":"), sort_keys=True)
        except (TypeError, ValueError) as exc:
            raise EncryptionError(f"Payload is not JSON-serializable: {exc}") from exc
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def open(self, token: str) -> Any:
        """
        Raises:
            EncryptionError: If the token was tampered with or sealed by another key.
        """
        try:
            plaintext = self._fernet.decrypt(token.encode("utf-8"))
        except InvalidToken as exc:
            raise EncryptionError("Cannot open payload: invalid token or wrong key") from exc
        return json.loads(plaintext)

    @staticmethod
    def generate_key() -> str:
        return Fernet.generate_key().decode("utf-8")
