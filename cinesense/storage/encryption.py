"""Encryption at rest for stored values.

Values are encrypted with Fernet symmetric encryption, which provides:
- AES-128-CBC encryption
- HMAC-SHA256 authentication

The Fernet key is derived from a configured secret with SHA-256 so any
non-empty string can be used as the secret.
"""

import base64
import hashlib
import secrets
from pathlib import Path
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from cinesense.exceptions import EncryptionError
from cinesense.storage.base import KeyValueStorage


class Encryptor:
    """Encrypts and decrypts strings with a key derived from a secret."""

    def __init__(self, secret: str) -> None:
        """Initialize the encryptor.

        Args:
            secret: Secret the Fernet key is derived from

        Raises:
            EncryptionError: If the secret is empty
        """
        if not secret:
            raise EncryptionError("An encryption secret is required")
        derived_key = hashlib.sha256(secret.encode()).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(derived_key))

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a string.

        Args:
            plaintext: The string to encrypt

        Returns:
            Fernet token as text

        Raises:
            EncryptionError: If encryption fails
        """
        try:
            return self._fernet.encrypt(plaintext.encode("utf-8")).decode("ascii")
        except Exception as e:
            raise EncryptionError(f"Encryption failed: {e}") from e

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a string produced by :meth:`encrypt`.

        Args:
            ciphertext: Fernet token as text

        Returns:
            Decrypted plaintext

        Raises:
            EncryptionError: If the key is wrong or the data is corrupted
        """
        try:
            return self._fernet.decrypt(ciphertext.encode("ascii")).decode("utf-8")
        except InvalidToken:
            raise EncryptionError(
                "Decryption failed: Invalid token. "
                "This may indicate a wrong encryption key or corrupted data."
            )
        except Exception as e:
            raise EncryptionError(f"Decryption failed: {e}") from e

    @staticmethod
    def generate_secret() -> str:
        """Generate a random secret suitable for ``CINESENSE_ENCRYPTION_KEY``."""
        return secrets.token_urlsafe(32)


def load_or_create_secret(path: Path) -> str:
    """Read the secret kept in ``path``, generating it on first use.

    The file is created readable by its owner only.

    Raises:
        EncryptionError: If the key file cannot be read or written
    """
    try:
        if path.exists():
            secret = path.read_text().strip()
            if secret:
                return secret
        path.parent.mkdir(parents=True, exist_ok=True)
        secret = Encryptor.generate_secret()
        path.write_text(secret)
        path.chmod(0o600)
    except OSError as e:
        raise EncryptionError(f"Cannot use key file {path}: {e}") from e
    return secret


class EncryptedStorage(KeyValueStorage):
    """Wraps another backend and encrypts every value before it is written.

    Keys are stored in clear text so listing and prefix filtering still work.
    """

    def __init__(self, inner: KeyValueStorage, secret: str) -> None:
        self.inner = inner
        self._encryptor = Encryptor(secret)

    def get(self, key: str) -> Optional[str]:
        ciphertext = self.inner.get(key)
        if ciphertext is None:
            return None
        return self._encryptor.decrypt(ciphertext)

    def set(self, key: str, value: str) -> None:
        self.inner.set(key, self._encryptor.encrypt(value))

    def delete(self, key: str) -> None:
        self.inner.delete(key)

    def delete_many(self, keys: list[str]) -> None:
        self.inner.delete_many(keys)

    def get_all_keys(self) -> list[str]:
        return self.inner.get_all_keys()

    def clear_all(self) -> None:
        self.inner.clear_all()

    def close(self) -> None:
        self.inner.close()
