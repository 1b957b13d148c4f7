"""Pytest configuration and shared fixtures."""

import logging
from datetime import UTC, datetime
from pathlib import Path

import pytest
import structlog
from pydantic import SecretStr

from gog_secrets.config.settings import Settings
from gog_secrets.credentials import CredentialStore, MemoryBackend
from gog_secrets.models import Token

GOG_ENV_VARS = (
    "GOG_KEYRING_BACKEND",
    "GOG_KEYRING_PASSWORD",
    "GOG_CONFIG_DIR",
    "GOG_LOG_LEVEL",
    "GOG_SERVICE_NAME",
)


@pytest.fixture(autouse=True)
def quiet_logging():
    """Drop log output so it never mixes with captured CLI output."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's GOG_* variables out of tests."""
    for name in GOG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Temporary configuration directory."""
    path = tmp_path / "gogcli"
    path.mkdir()
    return path


@pytest.fixture
def file_settings(config_dir: Path) -> Settings:
    """Settings selecting the encrypted file backend with a known password."""
    return Settings(
        config_dir=config_dir,
        keyring_backend="file",
        keyring_password=SecretStr("test-password-123"),
    )


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def store(memory_backend: MemoryBackend) -> CredentialStore:
    """CredentialStore on an in-memory backend."""
    return CredentialStore(memory_backend)


@pytest.fixture
def sample_token() -> Token:
    """Sample token for testing."""
    return Token(
        refresh_token=SecretStr("rt"),
        services=["gmail"],
        scopes=["scope1"],
        created_at=datetime(2025, 12, 12, tzinfo=UTC),
    )
