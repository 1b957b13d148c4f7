"""
Configuration for the credential store using Pydantic settings.

Two layers feed the store:

- ``Settings`` reads ``GOG_*`` environment variables (backend override,
  file keyring password, config directory, log level).
- ``FileConfig`` is the user's ``config.json``. The file is relaxed JSON
  (unquoted keys, trailing commas are tolerated by YAML flow syntax), so it
  is parsed with PyYAML.
"""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from platformdirs import user_config_dir
from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from gog_secrets.exceptions import ConfigurationError

APP_NAME = "gogcli"
CONFIG_FILENAME = "config.json"
KEYRING_DIRNAME = "keyring"


class FileConfig(BaseModel):
    """Subset of config.json the credential store consumes."""

    model_config = ConfigDict(extra="allow")

    keyring_backend: str = Field(default="", description="auto, keychain or file")


def load_file_config(path: Path) -> FileConfig:
    """Load config.json, returning defaults when the file does not exist.

    Raises:
        ConfigurationError: If the file cannot be read or is malformed
    """
    if not path.exists():
        return FileConfig()

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file: {path}") from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid syntax in {path}: {e}") from e

    if data is None:
        return FileConfig()
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration must be an object, not a list or scalar: {path}")

    try:
        return FileConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration values in {path}: {e}") from e


class Settings(BaseSettings):
    """Environment-driven settings for the credential store."""

    model_config = SettingsConfigDict(
        env_prefix="GOG_",
        case_sensitive=False,
    )

    keyring_backend: str = Field(default="", description="Backend override: auto, keychain or file")
    keyring_password: SecretStr | None = Field(default=None, description="File keyring password")
    config_dir: Path | None = Field(default=None, description="Override for the configuration directory")
    log_level: str = Field(default="WARNING", description="Minimum log level")
    service_name: str = Field(default=APP_NAME, description="Keyring service name")

    @property
    def resolved_config_dir(self) -> Path:
        if self.config_dir is not None:
            return self.config_dir.expanduser()
        return Path(user_config_dir(APP_NAME, appauthor=False))

    @property
    def config_path(self) -> Path:
        return self.resolved_config_dir / CONFIG_FILENAME

    @property
    def keyring_dir(self) -> Path:
        return self.resolved_config_dir / KEYRING_DIRNAME

    def ensure_keyring_dir(self) -> Path:
        """Create the file keyring directory with owner-only permissions.

        Raises:
            ConfigurationError: If the directory cannot be created
        """
        path = self.keyring_dir
        try:
            path.mkdir(mode=0o700, parents=True, exist_ok=True)
            if os.name != "nt":
                path.chmod(0o700)
        except OSError as e:
            raise ConfigurationError(f"Cannot create keyring directory: {path}") from e
        return path

    def load_file_config(self) -> FileConfig:
        return load_file_config(self.config_path)

    def password_value(self) -> str | None:
        if self.keyring_password is None:
            return None
        return self.keyring_password.get_secret_value() or None
