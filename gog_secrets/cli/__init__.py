"""Command-line interface for the credential store."""
