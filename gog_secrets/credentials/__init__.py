"""Credential storage for gogcli accounts.

This package provides:
- A credential store keyed by normalized account email, with a default-account pointer
- Backend selection (auto, keychain, file) from environment and config.json
- OS keyring and encrypted file backends
- macOS keychain lock detection and interactive unlock
- Classification of locked-keychain errors into actionable guidance

Example usage:

    from gog_secrets.credentials import CredentialStore
    from gog_secrets.models import Token

    store = CredentialStore.open()
    store.set_token("me@example.com", Token(refresh_token="1//0g...", services=["gmail"]))
    token = store.get_token("me@example.com")
"""

from .backend import SecretBackend
from .classify import caused_by, classify_error, error_chain, is_keychain_locked_error
from .encrypted_backend import EncryptedFileBackend
from .keyring_backend import KeyringBackend
from .memory_backend import MemoryBackend
from .password import file_password_func
from .recovery import (
    MacKeychainRecovery,
    NoopRecovery,
    PlatformRecovery,
    get_platform_recovery,
    register_platform_recovery,
)
from .resolver import KeyringBackendInfo, allowed_backends, resolve_backend
from .store import (
    DEFAULT_ACCOUNT_KEY,
    TOKEN_KEY_PREFIX,
    CredentialStore,
    normalize_email,
    parse_token_key,
    resolve_backend_info,
    token_key,
)

__all__ = [
    # Store
    "CredentialStore",
    "DEFAULT_ACCOUNT_KEY",
    "TOKEN_KEY_PREFIX",
    "normalize_email",
    "parse_token_key",
    "token_key",
    # Backends
    "SecretBackend",
    "KeyringBackend",
    "EncryptedFileBackend",
    "MemoryBackend",
    "file_password_func",
    # Resolution
    "KeyringBackendInfo",
    "resolve_backend",
    "resolve_backend_info",
    "allowed_backends",
    # Platform recovery
    "PlatformRecovery",
    "MacKeychainRecovery",
    "NoopRecovery",
    "get_platform_recovery",
    "register_platform_recovery",
    # Error classification
    "classify_error",
    "is_keychain_locked_error",
    "error_chain",
    "caused_by",
]
