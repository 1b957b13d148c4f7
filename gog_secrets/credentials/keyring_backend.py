"""OS-level keyring backend using system credential stores.

Platform Support:
- Linux: Secret Service API (GNOME Keyring, KWallet)
- macOS: Keychain
- Windows: Windows Credential Locker

The ``keyring`` API cannot enumerate entries, so the backend keeps an index
of its key names in a reserved entry of the same service.
"""

import json
from typing import cast

import keyring
import structlog
from keyring.errors import KeyringError, PasswordDeleteError

from gog_secrets.exceptions import BackendUnavailableError, CredentialError

log = structlog.get_logger(__name__)

INDEX_KEY = "__gog_index__"


class KeyringBackend:
    """OS-level secret storage using the system keyring.

    Example:
        >>> backend = KeyringBackend(service_name="gogcli")
        >>> backend.set("token:a@b.com", '{"refresh_token": "rt"}')
        >>> backend.keys()
        ['token:a@b.com']
    """

    def __init__(self, service_name: str = "gogcli") -> None:
        self.service_name = service_name

    @property
    def name(self) -> str:
        """Get backend identifier.

        Returns:
            Backend name constant "keychain"
        """
        return "keychain"

    @property
    def available(self) -> bool:
        """Check if a native keyring backend is usable.

        Returns False if no backend is configured (headless systems), the
        only candidate is keyring's null/fail backend, or initialization
        raises.
        """
        try:
            backend = keyring.get_keyring()
        except Exception as e:
            log.debug("keyring_unavailable", error=str(e))
            return False

        priority = getattr(backend, "priority", None)
        if priority is not None and priority <= 0:
            log.debug("keyring_not_recommended", backend=type(backend).__name__)
            return False
        return True

    def _ensure_available(self) -> None:
        if not self.available:
            raise BackendUnavailableError(
                "Keyring backend is not available",
                suggestion="Set GOG_KEYRING_BACKEND=file to use the encrypted file backend",
            )

    def _read_index(self) -> list[str]:
        raw = cast(str | None, keyring.get_password(self.service_name, INDEX_KEY))
        if not raw:
            return []
        try:
            names = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CredentialError(
                "Keyring key index is corrupted",
                reference=f"{self.service_name}/{INDEX_KEY}",
                suggestion="Re-add your accounts to rebuild the index",
            ) from e
        return [str(n) for n in names]

    def _write_index(self, names: list[str]) -> None:
        keyring.set_password(self.service_name, INDEX_KEY, json.dumps(sorted(set(names))))

    def keys(self) -> list[str]:
        """List key names recorded in the index.

        Raises:
            BackendUnavailableError: If keyring is not available
            CredentialError: If keyring operation fails
        """
        self._ensure_available()
        try:
            return self._read_index()
        except KeyringError as e:
            raise CredentialError(
                f"Keyring operation failed: {e}", reference=f"{self.service_name}/{INDEX_KEY}"
            ) from e

    def get(self, key: str) -> str | None:
        """Retrieve secret from OS keyring.

        Args:
            key: Entry name (e.g., 'token:a@b.com')

        Returns:
            Secret value or None if not found

        Raises:
            BackendUnavailableError: If keyring is not available
            CredentialError: If keyring operation fails
        """
        self._ensure_available()
        try:
            value = cast(str | None, keyring.get_password(self.service_name, key))
        except KeyringError as e:
            raise CredentialError(f"Keyring operation failed: {e}", reference=f"{self.service_name}/{key}") from e

        if value is not None:
            log.debug("keyring_entry_read", key=key)
        return value

    def set(self, key: str, value: str) -> None:
        """Store secret in OS keyring.

        Args:
            key: Entry name
            value: Secret value

        Raises:
            BackendUnavailableError: If keyring is not available
            CredentialError: If keyring operation fails
        """
        if not value:
            raise ValueError("Secret value cannot be empty")
        self._ensure_available()

        try:
            keyring.set_password(self.service_name, key, value)
            names = self._read_index()
            if key not in names:
                self._write_index([*names, key])
        except KeyringError as e:
            raise CredentialError(f"Failed to store secret: {e}", reference=f"{self.service_name}/{key}") from e

        log.info("keyring_entry_stored", key=key)

    def delete(self, key: str) -> bool:
        """Delete secret from OS keyring.

        Args:
            key: Entry name

        Returns:
            True if deleted, False if not found

        Raises:
            BackendUnavailableError: If keyring is not available
            CredentialError: If keyring operation fails
        """
        self._ensure_available()

        try:
            keyring.delete_password(self.service_name, key)
            deleted = True
        except PasswordDeleteError:
            # Entry doesn't exist - not an error
            deleted = False
        except KeyringError as e:
            raise CredentialError(f"Failed to delete secret: {e}", reference=f"{self.service_name}/{key}") from e

        # The index entry is dropped only once the secret itself is gone
        try:
            names = self._read_index()
            if key in names:
                self._write_index([n for n in names if n != key])
        except KeyringError as e:
            raise CredentialError(
                f"Failed to update key index: {e}", reference=f"{self.service_name}/{INDEX_KEY}"
            ) from e

        if deleted:
            log.info("keyring_entry_deleted", key=key)
        return deleted
