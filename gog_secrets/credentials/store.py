"""Credential store facade over the secret backends.

The store persists one OAuth refresh token per normalized account email and
a single default-account pointer. Opening it resolves which backend to use
(environment, then config.json, then auto), unlocks a locked macOS keychain
when possible, and reports failures as the typed errors in
``gog_secrets.exceptions``.

Storage layout:
    token:<email>     JSON {refresh_token, services?, scopes?, created_at?}
    default_account   bare normalized email

Example:
    >>> store = CredentialStore.open()
    >>> store.set_token("Me@Example.com", Token(refresh_token="1//0g..."))
    >>> store.get_token("me@example.com").email
    'me@example.com'
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path
from typing import TypeVar

import structlog
from pydantic import ValidationError as PydanticValidationError

from gog_secrets.config.settings import Settings
from gog_secrets.credentials.backend import SecretBackend
from gog_secrets.credentials.classify import classify_error, is_keychain_locked_error
from gog_secrets.credentials.encrypted_backend import EncryptedFileBackend, PasswordFunc
from gog_secrets.credentials.keyring_backend import KeyringBackend
from gog_secrets.credentials.password import file_password_func
from gog_secrets.credentials.recovery import PlatformRecovery, get_platform_recovery
from gog_secrets.credentials.resolver import KeyringBackendInfo, allowed_backends, resolve_backend
from gog_secrets.enums import BackendKind
from gog_secrets.exceptions import (
    BackendUnavailableError,
    CredentialError,
    NotFoundError,
    ValidationError,
)
from gog_secrets.models import StoredToken, Token

log = structlog.get_logger(__name__)

T = TypeVar("T")

TOKEN_KEY_PREFIX = "token:"
DEFAULT_ACCOUNT_KEY = "default_account"

# Order tried when the backend is "auto"
AUTO_BACKEND_ORDER = (BackendKind.KEYCHAIN, BackendKind.FILE)


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def token_key(email: str) -> str:
    return f"{TOKEN_KEY_PREFIX}{email}"


def resolve_backend_info(settings: Settings) -> KeyringBackendInfo:
    """Resolve the effective backend from GOG_KEYRING_BACKEND and config.json.

    A non-empty environment override is used without reading config.json, so
    it still works when the file is malformed.
    """
    if (settings.keyring_backend or "").strip():
        return resolve_backend(settings.keyring_backend, None)
    return resolve_backend(None, settings.load_file_config().keyring_backend)


def parse_token_key(key: str) -> tuple[str, bool]:
    """Split a backend key into its email part.

    Returns:
        (email, True) for ``token:<email>``; ("", False) for any other key,
        including a prefix followed only by whitespace
    """
    if not key.startswith(TOKEN_KEY_PREFIX):
        return "", False
    rest = key[len(TOKEN_KEY_PREFIX) :]
    if not rest.strip():
        return "", False
    return rest, True


class CredentialStore:
    """Token and default-account storage on top of one secret backend.

    Secrets are read from the backend on every call and never cached here.

    Attributes:
        backend: The opened secret backend
    """

    def __init__(self, backend: SecretBackend) -> None:
        self.backend = backend

    @property
    def backend_name(self) -> str:
        return self.backend.name

    @classmethod
    def open(
        cls,
        settings: Settings | None = None,
        *,
        recovery: PlatformRecovery | None = None,
        password: str | None = None,
    ) -> CredentialStore:
        """Open the store on the configured backend.

        Args:
            settings: Environment settings (read from GOG_* when omitted)
            recovery: Keychain lock recovery (chosen by OS when omitted)
            password: Explicit file keyring password

        Raises:
            InvalidBackendError: If the configured backend name is unknown
            ConfigurationError: If config.json or the keyring dir is unusable
            KeychainError: If a locked keychain could not be unlocked
            BackendUnavailableError: If no backend could be opened
        """
        settings = settings or Settings()
        info = resolve_backend_info(settings)
        candidates = allowed_backends(info) or list(AUTO_BACKEND_ORDER)

        keyring_dir = settings.ensure_keyring_dir()
        recovery = recovery or get_platform_recovery()
        if BackendKind.KEYCHAIN in candidates:
            recovery.ensure_access()

        password_func = file_password_func(password or settings.password_value())

        backend: SecretBackend | None = None
        for attempt in range(2):
            try:
                backend = cls._open_backend(candidates, settings.service_name, keyring_dir, password_func)
                break
            except BackendUnavailableError:
                raise
            except (CredentialError, OSError) as e:
                if attempt == 0 and is_keychain_locked_error(str(e)):
                    log.info("keychain_locked_on_open_retrying")
                    recovery.ensure_access()
                    continue
                raise BackendUnavailableError(
                    f"Failed to open keyring: {e}",
                    suggestion="Set GOG_KEYRING_BACKEND=file to use the encrypted file backend",
                ) from classify_error(e)

        if backend is None:
            raise BackendUnavailableError("Failed to open keyring after unlocking the keychain")

        log.info(
            "credential_store_opened",
            backend=backend.name,
            configured=info.value,
            source=str(info.source),
        )
        return cls(backend)

    @staticmethod
    def _open_backend(
        candidates: list[BackendKind],
        service_name: str,
        keyring_dir: Path,
        password_func: PasswordFunc,
    ) -> SecretBackend:
        for kind in candidates:
            if kind is BackendKind.KEYCHAIN:
                keychain = KeyringBackend(service_name=service_name)
                if keychain.available:
                    return keychain
                log.debug("keychain_backend_skipped", reason="no native keyring")
            elif kind is BackendKind.FILE:
                return EncryptedFileBackend(directory=keyring_dir, password_func=password_func)

        raise BackendUnavailableError(
            "No keyring backend available",
            reference=", ".join(str(k) for k in candidates),
            suggestion="Set GOG_KEYRING_BACKEND=file to use the encrypted file backend",
        )

    def _call(self, operation: Callable[..., T], *args: str) -> T:
        """Run a backend operation, rewriting locked-keychain failures."""
        try:
            return operation(*args)
        except CredentialError as e:
            classified = classify_error(e)
            if classified is e:
                raise
            raise classified from e

    def keys(self) -> list[str]:
        """Raw names of every entry in the backend."""
        return self._call(self.backend.keys)

    def set_token(self, email: str, token: Token) -> None:
        """Store a token under the normalized email, overwriting any entry.

        Raises:
            ValidationError: If the email or refresh token is empty
        """
        email = normalize_email(email)
        if not email:
            raise ValidationError("Missing email")
        if not token.has_refresh_token:
            raise ValidationError("Missing refresh token", reference=email)

        if token.created_at is None:
            token = replace(token, created_at=datetime.now(UTC))

        payload = StoredToken.from_token(token).model_dump_json(exclude_none=True)
        self._call(self.backend.set, token_key(email), payload)
        log.info("token_stored", email=email, services=sorted(token.services))

    def get_token(self, email: str) -> Token:
        """Load the token for an account.

        Raises:
            ValidationError: If the email is empty
            NotFoundError: If no token is stored for the account
            CredentialError: If the stored record cannot be decoded
        """
        email = normalize_email(email)
        if not email:
            raise ValidationError("Missing email")

        key = token_key(email)
        payload = self._call(self.backend.get, key)
        if payload is None:
            raise NotFoundError(
                f"No token stored for {email}",
                reference=key,
                suggestion=f"Add the account with: gog auth add {email}",
            )

        try:
            record = StoredToken.model_validate_json(payload)
        except PydanticValidationError as e:
            raise CredentialError(
                "Stored token is corrupted",
                reference=key,
                suggestion=f"Remove and re-add the account: gog auth remove {email}",
            ) from e

        return record.to_token(email)

    def delete_token(self, email: str) -> bool:
        """Remove an account's token.

        Returns:
            True if a token was removed, False if none was stored

        Raises:
            ValidationError: If the email is empty
        """
        email = normalize_email(email)
        if not email:
            raise ValidationError("Missing email")

        deleted = self._call(self.backend.delete, token_key(email))
        if deleted:
            log.info("token_deleted", email=email)
        else:
            log.info("token_delete_missing", email=email)
        return deleted

    def list_tokens(self) -> list[Token]:
        """Load every stored token, sorted by email.

        A failure reading any single entry fails the whole listing.
        """
        tokens = []
        for key in self.keys():
            email, ok = parse_token_key(key)
            if not ok:
                continue
            tokens.append(self.get_token(email))
        return sorted(tokens, key=lambda t: t.email)

    def set_default_account(self, email: str) -> None:
        """Point the default account at ``email``.

        Raises:
            ValidationError: If the email is empty
        """
        email = normalize_email(email)
        if not email:
            raise ValidationError("Missing email")
        self._call(self.backend.set, DEFAULT_ACCOUNT_KEY, email)
        log.info("default_account_set", email=email)

    def get_default_account(self) -> str:
        """Return the default account email, or "" when none is set."""
        return normalize_email(self._call(self.backend.get, DEFAULT_ACCOUNT_KEY))

    def clear_default_account(self) -> bool:
        """Remove the default-account pointer; False if it was not set."""
        return self._call(self.backend.delete, DEFAULT_ACCOUNT_KEY)
