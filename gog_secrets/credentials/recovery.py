"""Platform-specific keychain lock detection and recovery.

On macOS the login keychain can be locked (after sleep, over SSH, in a
fresh session). Keychain calls then fail instead of prompting, so the store
checks the lock state before opening and offers an interactive unlock.

Other platforms either never need an explicit unlock here or report lock
state through the normal read/write errors, so they get a no-op
implementation. The implementation is picked at runtime from
``platform.system()`` through a small registry, which keeps every variant
importable and testable on every OS.

Example:
    >>> recovery = get_platform_recovery()
    >>> recovery.ensure_access()
"""

import platform
import subprocess  # nosec B404
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

import click
import structlog

from gog_secrets.credentials.classify import UNLOCK_COMMAND
from gog_secrets.exceptions import NoTTYError, UnlockFailedError
from gog_secrets.utils.terminal import stdin_is_tty

log = structlog.get_logger(__name__)


class PlatformRecovery(Protocol):
    """Capability for detecting and clearing a locked OS secret manager."""

    def is_locked(self) -> bool:
        """Return True if the secret manager needs an interactive unlock."""
        ...

    def unlock(self) -> None:
        """Unlock the secret manager, prompting the user if needed.

        Raises:
            KeychainError: If the unlock cannot be performed
        """
        ...

    def ensure_access(self) -> None:
        """Unlock once if locked; no-op otherwise."""
        ...


class NoopRecovery:
    """Recovery for platforms without a lockable keychain."""

    def is_locked(self) -> bool:
        return False

    def unlock(self) -> None:
        return None

    def ensure_access(self) -> None:
        return None


def login_keychain_path() -> Path | None:
    """Return the path to the user's macOS login keychain, if known."""
    try:
        home = Path.home()
    except RuntimeError:
        return None
    return home / "Library" / "Keychains" / "login.keychain-db"


class MacKeychainRecovery:
    """Detect and unlock a locked macOS login keychain via ``security``.

    The password is sent to ``security unlock-keychain`` on its standard
    input, never as an argument, so it does not show up in process
    listings. No timeout is applied to the child processes.
    """

    def __init__(self, keychain_path: Path | None = None) -> None:
        self.keychain_path = keychain_path or login_keychain_path()

    def is_locked(self) -> bool:
        """Query ``security show-keychain-info``.

        Exit code 0 means unlocked. Any other result, including failure to
        run the command, counts as locked.
        """
        if self.keychain_path is None:
            return False

        try:
            result = subprocess.run(  # nosec B603 B607
                ["security", "show-keychain-info", str(self.keychain_path)],
                capture_output=True,
                check=False,
            )
        except OSError as e:
            log.debug("keychain_status_query_failed", error=str(e))
            return True

        locked = result.returncode != 0
        log.debug("keychain_status", locked=locked)
        return locked

    def unlock(self) -> None:
        """Prompt for the login password and unlock the keychain.

        Raises:
            NoTTYError: If stdin is not a terminal
            UnlockFailedError: If the password is wrong or unlock fails
        """
        if self.keychain_path is None:
            raise UnlockFailedError("Cannot determine login keychain path")

        if not stdin_is_tty():
            raise NoTTYError(
                "Keychain is locked and no TTY available for password prompt",
                suggestion=f"To unlock manually, run:\n  {UNLOCK_COMMAND}",
            )

        try:
            password = click.prompt(
                "Keychain is locked. Enter your macOS login password to unlock",
                hide_input=True,
                err=True,
            )
        except click.Abort as e:
            raise UnlockFailedError("Password entry aborted") from e

        try:
            result = subprocess.run(  # nosec B603 B607
                ["security", "unlock-keychain", str(self.keychain_path)],
                input=f"{password}\n",
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise UnlockFailedError(f"Could not run security unlock-keychain: {e}") from e
        finally:
            del password

        if result.returncode != 0:
            raise UnlockFailedError(
                "Unlock keychain: incorrect password or keychain error",
                suggestion=f"Retry, or unlock manually:\n  {UNLOCK_COMMAND}",
            )

        log.info("keychain_unlocked")

    def ensure_access(self) -> None:
        if not self.is_locked():
            return
        log.info("keychain_locked_attempting_unlock")
        self.unlock()


RecoveryFactory = Callable[[], PlatformRecovery]

_RECOVERY_FACTORIES: dict[str, RecoveryFactory] = {
    "darwin": MacKeychainRecovery,
}


def register_platform_recovery(system: str, factory: RecoveryFactory) -> None:
    """Register a recovery implementation for a ``platform.system()`` name."""
    _RECOVERY_FACTORIES[system.lower()] = factory


def get_platform_recovery(system: str | None = None) -> PlatformRecovery:
    """Return the recovery implementation for ``system`` (default: this OS)."""
    name = (system or platform.system()).lower()
    factory = _RECOVERY_FACTORIES.get(name)
    if factory is None:
        return NoopRecovery()
    return factory()
