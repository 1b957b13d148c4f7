"""gog-secrets: OAuth refresh token storage for gogcli accounts."""

__version__ = "0.1.0"
