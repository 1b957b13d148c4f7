"""Password source for the encrypted file backend.

Precedence:
    1. A password passed in explicitly
    2. GOG_KEYRING_PASSWORD, when set and non-empty
    3. A hidden terminal prompt, only when stdin is a TTY

With none of these the returned function raises PasswordRequiredError
instead of blocking on input that can never arrive.
"""

import os
from collections.abc import Mapping

import click

from gog_secrets.credentials.encrypted_backend import PasswordFunc
from gog_secrets.exceptions import PasswordRequiredError
from gog_secrets.utils.terminal import stdin_is_tty

KEYRING_PASSWORD_ENV = "GOG_KEYRING_PASSWORD"


def terminal_prompt(prompt: str) -> str:
    """Read a password from the terminal with echo disabled."""
    try:
        return str(click.prompt(prompt.rstrip(": "), hide_input=True, err=True))
    except click.Abort as e:
        raise PasswordRequiredError("Password entry aborted") from e


def password_func_from(password: str | None, is_tty: bool) -> PasswordFunc:
    """Build a password function from an already-known password and TTY state."""
    if password:

        def fixed(_prompt: str) -> str:
            return password

        return fixed

    if is_tty:
        return terminal_prompt

    def unavailable(_prompt: str) -> str:
        raise PasswordRequiredError(
            "File keyring needs a password but no TTY is available",
            suggestion=f"Set {KEYRING_PASSWORD_ENV} or run the command from an interactive terminal",
        )

    return unavailable


def file_password_func(
    password: str | None = None,
    environ: Mapping[str, str] | None = None,
    is_tty: bool | None = None,
) -> PasswordFunc:
    """Resolve the password function used by EncryptedFileBackend.

    Args:
        password: Explicit password; wins over everything else
        environ: Environment to read GOG_KEYRING_PASSWORD from (default os.environ)
        is_tty: Override TTY detection (default: check stdin)
    """
    if not password:
        env = os.environ if environ is None else environ
        password = env.get(KEYRING_PASSWORD_ENV) or None

    if is_tty is None:
        is_tty = stdin_is_tty()

    return password_func_from(password, is_tty)
