"""Encrypted file backend using Fernet symmetric encryption.

Security Model:
- Encryption key derived from a user password (PBKDF2-HMAC-SHA256)
- Entries encrypted with Fernet (AES-128-CBC + HMAC)
- Store kept at <keyring dir>/credentials.enc, salt beside it
- Fallback for headless systems without an OS keyring
"""

import base64
import json
import secrets
from collections.abc import Callable
from pathlib import Path
from typing import cast

import structlog
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from gog_secrets.exceptions import EncryptionError

log = structlog.get_logger(__name__)

PasswordFunc = Callable[[str], str]

STORE_FILENAME = "credentials.enc"
SALT_FILENAME = "credentials.salt"
PASSWORD_PROMPT = "Password to unlock the gogcli file keyring: "


class EncryptedFileBackend:
    """Encrypted file-based secret storage.

    The password function is only called the first time the store has to
    be decrypted or encrypted, so opening the backend and listing an empty
    store never prompts. Decrypted entries are not kept between calls; only
    the derived cipher is.

    Security Considerations:
    - Files are written with mode 600 (user read/write only)
    - Writes go through a temporary file and an atomic rename
    - No cross-process locking: concurrent writers race

    Example:
        >>> backend = EncryptedFileBackend(
        ...     directory=Path("~/.config/gogcli/keyring").expanduser(),
        ...     password_func=lambda prompt: "secure-password",
        ... )
        >>> backend.set("token:a@b.com", '{"refresh_token": "rt"}')
        >>> backend.get("token:a@b.com")
        '{"refresh_token": "rt"}'
    """

    def __init__(
        self,
        directory: Path,
        password_func: PasswordFunc,
        salt: bytes | None = None,
    ) -> None:
        """Initialize encrypted file backend.

        Args:
            directory: Directory holding the encrypted store and its salt
            password_func: Called with a prompt string, returns the password
            salt: Cryptographic salt (loaded or generated if not provided)
        """
        self.directory = directory
        self.file_path = directory / STORE_FILENAME
        self.password_func = password_func
        self.salt = salt or self._load_or_generate_salt()
        self.fernet: Fernet | None = None

    @property
    def name(self) -> str:
        """Get backend identifier.

        Returns:
            Backend name constant "file"
        """
        return "file"

    @property
    def available(self) -> bool:
        """The file backend only needs a writable directory."""
        return True

    @staticmethod
    def _create_fernet(password: str, salt: bytes) -> Fernet:
        """Derive encryption key from password.

        Uses PBKDF2-HMAC-SHA256 with 480,000 iterations (OWASP 2023 recommendation).

        Args:
            password: File keyring password
            salt: Cryptographic salt

        Returns:
            Fernet cipher instance
        """
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=480_000,
        )
        key = kdf.derive(password.encode("utf-8"))
        return Fernet(base64.urlsafe_b64encode(key))

    def _load_or_generate_salt(self) -> bytes:
        """Load salt from file or generate new one.

        Returns:
            16-byte cryptographic salt
        """
        salt_file = self.directory / SALT_FILENAME

        if salt_file.exists():
            return salt_file.read_bytes()

        salt = secrets.token_bytes(16)
        salt_file.parent.mkdir(parents=True, exist_ok=True)
        salt_file.write_bytes(salt)

        try:
            salt_file.chmod(0o600)
        except OSError as e:
            log.warning("salt_permissions_not_set", path=str(salt_file), error=str(e))

        return salt

    def _get_fernet(self) -> Fernet:
        if self.fernet is None:
            password = self.password_func(PASSWORD_PROMPT)
            if not password:
                raise EncryptionError(
                    "File keyring password is empty",
                    suggestion="Set GOG_KEYRING_PASSWORD or enter a non-empty password",
                )
            self.fernet = self._create_fernet(password, self.salt)
        return self.fernet

    def _load_entries(self) -> dict[str, str]:
        """Load and decrypt entries from file.

        Raises:
            EncryptionError: If decryption fails
        """
        if not self.file_path.exists():
            return {}

        fernet = self._get_fernet()

        try:
            encrypted_data = self.file_path.read_bytes()
            decrypted_data = fernet.decrypt(encrypted_data)
            return cast(dict[str, str], json.loads(decrypted_data.decode("utf-8")))
        except InvalidToken as e:
            # Wrong password: forget the derived key so the next call asks again
            self.fernet = None
            raise EncryptionError(
                "Invalid password or corrupted credentials file",
                reference=str(self.file_path),
                suggestion="Verify your file keyring password (GOG_KEYRING_PASSWORD)",
            ) from e
        except json.JSONDecodeError as e:
            raise EncryptionError(
                "Credentials file is corrupted",
                reference=str(self.file_path),
                suggestion="Restore from backup or delete and recreate",
            ) from e
        except OSError as e:
            raise EncryptionError(f"Failed to read credentials: {e}", reference=str(self.file_path)) from e

    def _save_entries(self, entries: dict[str, str]) -> None:
        """Encrypt and save entries to file.

        Raises:
            EncryptionError: If encryption or the write fails
        """
        fernet = self._get_fernet()

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            encrypted_data = fernet.encrypt(json.dumps(entries, indent=2).encode("utf-8"))

            temp_file = self.file_path.with_suffix(".tmp")
            temp_file.write_bytes(encrypted_data)
            try:
                temp_file.chmod(0o600)
            except OSError as e:
                log.warning("store_permissions_not_set", path=str(temp_file), error=str(e))

            temp_file.replace(self.file_path)
        except OSError as e:
            raise EncryptionError(f"Failed to save credentials: {e}", reference=str(self.file_path)) from e

        log.debug("file_keyring_saved", path=str(self.file_path))

    def keys(self) -> list[str]:
        """List entry names in the encrypted store."""
        return list(self._load_entries())

    def get(self, key: str) -> str | None:
        """Retrieve secret from encrypted file.

        Raises:
            EncryptionError: If decryption fails
        """
        value = self._load_entries().get(key)
        if value is not None:
            log.debug("file_keyring_entry_read", key=key)
        return value

    def set(self, key: str, value: str) -> None:
        """Store secret in encrypted file.

        Raises:
            EncryptionError: If encryption fails
        """
        if not value:
            raise ValueError("Secret value cannot be empty")

        entries = self._load_entries()
        entries[key] = value
        self._save_entries(entries)
        log.info("file_keyring_entry_stored", key=key)

    def delete(self, key: str) -> bool:
        """Delete secret from encrypted file.

        Returns:
            True if deleted, False if not found

        Raises:
            EncryptionError: If file operations fail
        """
        entries = self._load_entries()
        if key not in entries:
            return False

        del entries[key]
        self._save_entries(entries)
        log.info("file_keyring_entry_deleted", key=key)
        return True
