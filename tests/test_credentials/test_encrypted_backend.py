"""Tests for encrypted file backend."""

import sys
from unittest.mock import Mock

import pytest

from gog_secrets.credentials import EncryptedFileBackend
from gog_secrets.exceptions import EncryptionError, PasswordRequiredError


class TestEncryptedFileBackend:
    """Test EncryptedFileBackend functionality."""

    @pytest.fixture
    def keyring_dir(self, tmp_path):
        return tmp_path / "keyring"

    @pytest.fixture
    def backend(self, keyring_dir):
        """Create EncryptedFileBackend instance."""
        return EncryptedFileBackend(keyring_dir, password_func=lambda prompt: "test-password-123")

    def test_backend_name(self, backend):
        assert backend.name == "file"
        assert backend.available is True

    def test_salt_generation(self, keyring_dir, backend):
        salt_file = keyring_dir / "credentials.salt"

        assert salt_file.exists()
        assert len(salt_file.read_bytes()) == 16

    def test_salt_reuse(self, keyring_dir, backend):
        other = EncryptedFileBackend(keyring_dir, password_func=lambda prompt: "x")

        assert other.salt == backend.salt

    def test_empty_store_does_not_ask_for_password(self, keyring_dir):
        password_func = Mock(return_value="pw")
        backend = EncryptedFileBackend(keyring_dir, password_func=password_func)

        assert backend.keys() == []
        assert backend.get("token:a@b.com") is None
        password_func.assert_not_called()

    def test_set_and_get(self, backend):
        backend.set("token:a@b.com", '{"refresh_token": "rt"}')

        assert backend.get("token:a@b.com") == '{"refresh_token": "rt"}'
        assert backend.keys() == ["token:a@b.com"]

    def test_password_asked_once(self, keyring_dir):
        password_func = Mock(return_value="pw")
        backend = EncryptedFileBackend(keyring_dir, password_func=password_func)

        backend.set("a", "1")
        backend.set("b", "2")
        backend.get("a")

        password_func.assert_called_once()

    def test_persistence_across_instances(self, keyring_dir, backend):
        backend.set("default_account", "a@b.com")

        reopened = EncryptedFileBackend(keyring_dir, password_func=lambda prompt: "test-password-123")

        assert reopened.get("default_account") == "a@b.com"

    def test_data_is_encrypted_on_disk(self, keyring_dir, backend):
        backend.set("token:a@b.com", "super-secret-refresh-token")

        raw = (keyring_dir / "credentials.enc").read_bytes()

        assert b"super-secret-refresh-token" not in raw
        assert b"a@b.com" not in raw

    def test_wrong_password(self, keyring_dir, backend):
        backend.set("a", "1")

        wrong = EncryptedFileBackend(keyring_dir, password_func=lambda prompt: "wrong")

        with pytest.raises(EncryptionError, match="Invalid password"):
            wrong.get("a")

    def test_corrupted_file(self, keyring_dir, backend):
        backend.set("a", "1")
        (keyring_dir / "credentials.enc").write_bytes(b"garbage")

        fresh = EncryptedFileBackend(keyring_dir, password_func=lambda prompt: "test-password-123")

        with pytest.raises(EncryptionError):
            fresh.keys()

    def test_empty_password_rejected(self, keyring_dir):
        backend = EncryptedFileBackend(keyring_dir, password_func=lambda prompt: "")

        with pytest.raises(EncryptionError):
            backend.set("a", "1")

    def test_password_required_propagates(self, keyring_dir):
        def no_password(prompt):
            raise PasswordRequiredError("no tty")

        backend = EncryptedFileBackend(keyring_dir, password_func=no_password)

        with pytest.raises(PasswordRequiredError):
            backend.set("a", "1")

    def test_set_empty_value_raises_error(self, backend):
        with pytest.raises(ValueError, match="cannot be empty"):
            backend.set("a", "")

    def test_delete(self, backend):
        backend.set("a", "1")

        assert backend.delete("a") is True
        assert backend.get("a") is None
        assert backend.delete("a") is False

    @pytest.mark.skipif(sys.platform == "win32", reason="Permission test only for Unix")
    def test_file_permissions_unix(self, keyring_dir, backend):
        backend.set("a", "1")

        assert (keyring_dir / "credentials.enc").stat().st_mode & 0o777 == 0o600
        assert (keyring_dir / "credentials.salt").stat().st_mode & 0o777 == 0o600
