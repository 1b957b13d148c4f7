"""Custom exception hierarchy for the gog-secrets credential store.

This module defines a structured exception hierarchy so that CLI commands
and error formatters can tell apart malformed input, missing credentials,
unusable backends and a locked OS keychain without matching on strings.

Exception Hierarchy:
    GogSecretsError (base)
    ├── ConfigurationError
    └── CredentialError
        ├── ValidationError
        ├── InvalidBackendError
        ├── NotFoundError
        ├── BackendUnavailableError
        ├── EncryptionError
        ├── PasswordRequiredError
        └── KeychainError
            ├── PlatformLockedError
            ├── NoTTYError
            └── UnlockFailedError

Example Usage:
    >>> from gog_secrets.exceptions import NotFoundError
    >>> try:
    ...     store.get_token("a@b.com")
    ... except NotFoundError as e:
    ...     print(e.suggestion)
"""


class GogSecretsError(Exception):
    """Base exception for all gog-secrets errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(GogSecretsError):
    """Configuration file is unreadable or contains invalid values."""

    pass


class CredentialError(GogSecretsError):
    """Credential-related errors.

    Base class for every failure raised by the credential store, its
    backends and the platform recovery layer.

    Attributes:
        message: Human-readable error description
        reference: The storage key or account the error refers to
        suggestion: Optional suggestion for resolution
    """

    def __init__(
        self,
        message: str,
        reference: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            reference: The storage key or account that failed
            suggestion: Optional suggestion for resolution
        """
        self.reference = reference
        self.suggestion = suggestion

        full_message = message
        if reference:
            full_message = f"{message} (reference: {reference})"
        if suggestion:
            full_message = f"{full_message}\nSuggestion: {suggestion}"

        super().__init__(full_message)
        # Preserve original message (super sets self.message to full_message)
        self.message = message


class ValidationError(CredentialError, ValueError):
    """Caller input is malformed (missing email or refresh token).

    Never retried.
    """

    pass


class InvalidBackendError(CredentialError):
    """Keyring backend identifier is not one of auto, keychain or file."""

    pass


class NotFoundError(CredentialError):
    """No secret entry exists for the requested key."""

    pass


class BackendUnavailableError(CredentialError):
    """No secret backend could be opened, even after recovery."""

    pass


class EncryptionError(CredentialError):
    """Encrypted file backend failed to encrypt or decrypt its store."""

    pass


class PasswordRequiredError(CredentialError):
    """File backend needs a password and no source is available."""

    pass


class KeychainError(CredentialError):
    """Base class for native keychain recovery failures."""

    pass


class PlatformLockedError(KeychainError):
    """The OS keychain is locked and refused a non-interactive operation."""

    pass


class NoTTYError(KeychainError):
    """The keychain is locked and there is no terminal to prompt on."""

    pass


class UnlockFailedError(KeychainError):
    """Unlocking the keychain failed (wrong password or keychain error)."""

    pass
