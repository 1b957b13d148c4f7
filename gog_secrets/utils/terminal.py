"""Terminal detection shared by the password and keychain unlock prompts."""

import sys


def stdin_is_tty() -> bool:
    """Whether stdin is an interactive terminal that can answer a prompt."""
    try:
        return sys.stdin is not None and sys.stdin.isatty()
    except ValueError:
        # stdin closed
        return False
