"""CLI entry point for gog-secrets."""

import click

from gog_secrets.cli.accounts import auth_group
from gog_secrets.utils.logging_config import configure_logging


@click.group()
@click.option("--log-level", envvar="GOG_LOG_LEVEL", default="WARNING", help="Logging level")
def cli(log_level: str) -> None:
    """gog-secrets: credential storage for gogcli accounts."""
    configure_logging(log_level)


cli.add_command(auth_group)


if __name__ == "__main__":
    cli()
