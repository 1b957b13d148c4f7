"""CLI commands for inspecting and managing stored accounts.

This module provides the ``gog-secrets auth`` command group. Adding an
account needs the OAuth flow and lives in the main gogcli tool; these
commands cover what can be done with the credential store alone.

Commands:
    - keyring: Show which backend is in effect and where the choice came from
    - list: List stored accounts (refresh tokens are never printed)
    - remove: Delete an account's stored token
    - default: Show, set or clear the default account

Example:
    $ GOG_KEYRING_BACKEND=file gog-secrets auth keyring
    $ gog-secrets auth default me@example.com
    $ gog-secrets auth list --json
"""

import json
import sys
from typing import NoReturn

import click

from gog_secrets.config.settings import Settings
from gog_secrets.credentials import CredentialStore, allowed_backends, resolve_backend_info
from gog_secrets.exceptions import ConfigurationError, CredentialError


def _fail(error: CredentialError | ConfigurationError) -> NoReturn:
    click.echo(click.style(f"Error: {error.message}", fg="red"), err=True)
    suggestion = getattr(error, "suggestion", None)
    if suggestion:
        click.echo(click.style(f"Suggestion: {suggestion}", fg="yellow"), err=True)
    sys.exit(1)


def _open_store() -> CredentialStore:
    try:
        return CredentialStore.open(Settings())
    except (CredentialError, ConfigurationError) as e:
        _fail(e)


@click.group(name="auth")
def auth_group():
    """Manage stored gogcli account credentials.

    Examples:

        # Show the effective keyring backend
        gog-secrets auth keyring

        # List stored accounts
        gog-secrets auth list

        # Make an account the default
        gog-secrets auth default me@example.com
    """
    pass


@auth_group.command(name="keyring")
def keyring_info():
    """Show the effective keyring backend and its source.

    The backend comes from GOG_KEYRING_BACKEND, then keyring_backend in
    config.json, then defaults to auto.
    """
    settings = Settings()
    try:
        info = resolve_backend_info(settings)
        allowed = allowed_backends(info)
    except (CredentialError, ConfigurationError) as e:
        _fail(e)

    click.echo(f"Backend: {info.value}")
    click.echo(f"Source: {info.source}")
    if allowed:
        click.echo(f"Allowed: {', '.join(str(kind) for kind in allowed)}")
    else:
        click.echo("Allowed: keychain, file (first available)")
    click.echo(f"Keyring dir: {settings.keyring_dir}")


@auth_group.command(name="list")
@click.option("--json", "as_json", is_flag=True, help="Print accounts as JSON")
def list_accounts(as_json: bool):
    """List stored accounts."""
    store = _open_store()
    try:
        tokens = store.list_tokens()
        default = store.get_default_account()
    except CredentialError as e:
        _fail(e)

    if as_json:
        payload = [dict(token.to_public_dict(), default=token.email == default) for token in tokens]
        click.echo(json.dumps(payload, indent=2))
        return

    if not tokens:
        click.echo(click.style("No accounts stored", fg="yellow"))
        return

    for token in tokens:
        marker = "*" if token.email == default else " "
        services = ",".join(sorted(token.services)) or "-"
        created = token.created_at.isoformat() if token.created_at else "-"
        click.echo(f"{marker} {token.email}\t{services}\t{created}")


@auth_group.command(name="remove")
@click.argument("email")
@click.confirmation_option(prompt="Are you sure you want to remove this account?")
def remove_account(email: str):
    """Remove an account's stored token."""
    store = _open_store()
    try:
        deleted = store.delete_token(email)
    except CredentialError as e:
        _fail(e)

    if deleted:
        click.echo(click.style("Account removed", fg="green"))
    else:
        click.echo(click.style("Account not found", fg="yellow"))


@auth_group.command(name="default")
@click.argument("email", required=False)
@click.option("--clear", is_flag=True, help="Remove the default account")
def default_account(email: str | None, clear: bool):
    """Show, set or clear the default account.

    Without arguments prints the current default.
    """
    store = _open_store()
    try:
        if clear:
            store.clear_default_account()
            click.echo(click.style("Default account cleared", fg="green"))
            return

        if email is None:
            current = store.get_default_account()
            if current:
                click.echo(current)
            else:
                click.echo(click.style("No default account set", fg="yellow"))
            return

        # Only accounts with a stored token can become the default
        token = store.get_token(email)
        store.set_default_account(token.email)
    except CredentialError as e:
        _fail(e)

    click.echo(click.style(f"Default account: {token.email}", fg="green"))
