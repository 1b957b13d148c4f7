"""Enumerations for secret backends and backend resolution."""

from enum import Enum


class BackendKind(str, Enum):
    """Concrete secret storage implementations the store can open.

    - keychain: OS-native secret manager (macOS Keychain, Secret Service,
      Windows Credential Locker) reached through the ``keyring`` library
    - file: Fernet-encrypted file under the keyring directory
    """

    KEYCHAIN = "keychain"
    FILE = "file"

    def __str__(self) -> str:
        return self.value


class BackendSource(str, Enum):
    """Which configuration layer produced the effective backend value."""

    DEFAULT = "default"
    CONFIG = "config"
    ENV = "env"

    def __str__(self) -> str:
        return self.value
