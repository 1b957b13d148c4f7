"""Settings for the credential store."""

from gog_secrets.config.settings import FileConfig, Settings, load_file_config

__all__ = ["FileConfig", "Settings", "load_file_config"]
