"""Persistent key-value storage backends."""

from cinesense.storage.base import KeyValueStorage
from cinesense.storage.encryption import EncryptedStorage, Encryptor, load_or_create_secret
from cinesense.storage.memory import InMemoryStorage
from cinesense.storage.sqlite import SQLiteStorage

__all__ = [
    "KeyValueStorage",
    "InMemoryStorage",
    "SQLiteStorage",
    "EncryptedStorage",
    "Encryptor",
    "load_or_create_secret",
]
