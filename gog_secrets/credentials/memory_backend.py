"""In-memory backend for tests and short-lived embedding."""

import structlog

log = structlog.get_logger(__name__)


class MemoryBackend:
    """Dictionary-backed secret storage that lives as long as the object.

    Example:
        >>> store = CredentialStore(MemoryBackend())
    """

    def __init__(self, entries: dict[str, str] | None = None) -> None:
        self._entries: dict[str, str] = dict(entries or {})

    @property
    def name(self) -> str:
        return "memory"

    @property
    def available(self) -> bool:
        return True

    def keys(self) -> list[str]:
        return list(self._entries)

    def get(self, key: str) -> str | None:
        return self._entries.get(key)

    def set(self, key: str, value: str) -> None:
        if not value:
            raise ValueError("Secret value cannot be empty")
        self._entries[key] = value
        log.debug("memory_entry_stored", key=key)

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None
