"""Turn raw backend failures into actionable errors.

A locked macOS login keychain makes every non-interactive Security
framework call fail with errSecInteractionNotAllowed (-25308). Those
failures are rewritten into a PlatformLockedError that tells the user how
to unlock; every other error passes through untouched.
"""

from collections.abc import Iterator

from gog_secrets.exceptions import PlatformLockedError

# errSecInteractionNotAllowed from the macOS Security framework
KEYCHAIN_LOCKED_CODE = "-25308"

UNLOCK_COMMAND = "security unlock-keychain ~/Library/Keychains/login.keychain-db"


def is_keychain_locked_error(text: str) -> bool:
    """Return True if the error text carries the locked-keychain code."""
    return KEYCHAIN_LOCKED_CODE in text


def classify_error(err: BaseException | None) -> BaseException | None:
    """Attach unlock guidance to locked-keychain errors.

    Args:
        err: Error raised by a secret backend, or None

    Returns:
        None for None, a PlatformLockedError caused by ``err`` when the
        lock signature is present, otherwise ``err`` itself
    """
    if err is None:
        return None
    if isinstance(err, PlatformLockedError) or not is_keychain_locked_error(str(err)):
        return err

    classified = PlatformLockedError(
        "Keychain is locked",
        suggestion=f"Unlock it manually, then retry:\n  {UNLOCK_COMMAND}",
    )
    classified.__cause__ = err
    return classified


def error_chain(err: BaseException) -> Iterator[BaseException]:
    """Yield ``err`` and each error it was raised from, outermost first."""
    seen: set[int] = set()
    current: BaseException | None = err
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def caused_by(err: BaseException, target: BaseException | type[BaseException]) -> bool:
    """Check whether ``target`` appears anywhere in the chain of ``err``.

    ``target`` may be an exception instance (matched by identity) or an
    exception class (matched with isinstance).
    """
    for link in error_chain(err):
        if isinstance(target, type):
            if isinstance(link, target):
                return True
        elif link is target:
            return True
    return False
