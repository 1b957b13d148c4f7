"""Abstract backend protocol for secret storage."""

from typing import Protocol


class SecretBackend(Protocol):
    """Protocol defining the interface for secret storage backends.

    A backend is a flat key/value store of secret strings. All backends
    must implement these methods to be usable by CredentialStore.
    """

    @property
    def name(self) -> str:
        """Backend identifier (e.g., 'keychain', 'file')."""
        ...

    @property
    def available(self) -> bool:
        """Check if this backend is available on the current system."""
        ...

    def keys(self) -> list[str]:
        """List the names of all stored entries.

        Raises:
            CredentialError: If the backend cannot be read
        """
        ...

    def get(self, key: str) -> str | None:
        """Retrieve a secret.

        Args:
            key: Entry name (e.g., 'token:a@b.com')

        Returns:
            Secret value or None if not found

        Raises:
            CredentialError: If the backend cannot be read
        """
        ...

    def set(self, key: str, value: str) -> None:
        """Store a secret, overwriting any existing entry.

        Args:
            key: Entry name
            value: Secret value to store

        Raises:
            CredentialError: If the backend cannot be written
        """
        ...

    def delete(self, key: str) -> bool:
        """Delete a secret.

        Args:
            key: Entry name

        Returns:
            True if the entry was deleted, False if not found

        Raises:
            CredentialError: If the backend cannot be written
        """
        ...
