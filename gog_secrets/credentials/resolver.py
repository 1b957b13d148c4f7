"""Keyring backend selection and validation.

Both functions are pure: the caller reads the environment and the config
file and passes plain strings in.

Precedence for the effective backend, highest wins:
    1. GOG_KEYRING_BACKEND environment value (source "env")
    2. keyring_backend from config.json (source "config")
    3. "auto" (source "default")
"""

from dataclasses import dataclass

from gog_secrets.enums import BackendKind, BackendSource
from gog_secrets.exceptions import InvalidBackendError

AUTO = "auto"
VALID_BACKENDS = ("", AUTO, BackendKind.KEYCHAIN.value, BackendKind.FILE.value)


@dataclass(frozen=True)
class KeyringBackendInfo:
    """Resolved backend value and the layer it came from."""

    value: str
    source: BackendSource


def _normalize(value: str | None) -> str:
    return (value or "").strip().lower()


def resolve_backend(env_value: str | None, config_value: str | None) -> KeyringBackendInfo:
    """Pick the effective backend from already-read env and config values.

    Args:
        env_value: Raw GOG_KEYRING_BACKEND value (None or "" when unset)
        config_value: Raw keyring_backend value from the config file

    Returns:
        KeyringBackendInfo with a lowercased value

    Example:
        >>> resolve_backend("", "File")
        KeyringBackendInfo(value='file', source=<BackendSource.CONFIG: 'config'>)
    """
    env = _normalize(env_value)
    if env:
        return KeyringBackendInfo(value=env, source=BackendSource.ENV)

    config = _normalize(config_value)
    if config:
        return KeyringBackendInfo(value=config, source=BackendSource.CONFIG)

    return KeyringBackendInfo(value=AUTO, source=BackendSource.DEFAULT)


def allowed_backends(value: str | KeyringBackendInfo | None) -> list[BackendKind]:
    """Map a backend identifier to the backends the store may open.

    An empty list means unrestricted: try the native keychain first and
    fall back to the encrypted file.

    Raises:
        InvalidBackendError: If the value is not "", auto, keychain or file
    """
    raw = value.value if isinstance(value, KeyringBackendInfo) else value
    normalized = _normalize(raw)

    if normalized in ("", AUTO):
        return []
    if normalized == BackendKind.KEYCHAIN.value:
        return [BackendKind.KEYCHAIN]
    if normalized == BackendKind.FILE.value:
        return [BackendKind.FILE]

    raise InvalidBackendError(
        f"Invalid keyring backend: {raw!r}",
        suggestion="Use one of: auto, keychain, file (GOG_KEYRING_BACKEND or keyring_backend in config.json)",
    )
