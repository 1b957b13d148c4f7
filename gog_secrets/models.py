"""
Data models for stored OAuth credentials.

Two shapes describe one stored credential:

- ``Token`` is what callers see. Its refresh token is a ``SecretStr`` that
  is masked in ``repr`` and left out of ``to_public_dict()``.
- ``StoredToken`` is the record written to the secret backend. It is the
  only type that serializes the plaintext refresh token, and it never
  leaves ``CredentialStore``.

Example:
    Converting at the store boundary::

        record = StoredToken.from_token(token)
        payload = record.model_dump_json(exclude_none=True)
        token = StoredToken.model_validate_json(payload).to_token("a@b.com")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, SecretStr, field_validator


@dataclass(eq=False)
class Token:
    """One account's stored OAuth credential.

    Attributes:
        email: Normalized (trimmed, lowercased) account email
        services: Service identifiers the token was granted for
        scopes: Granted OAuth scopes, in grant order
        created_at: When the credential was first stored
        refresh_token: The OAuth refresh token
    """

    email: str = ""
    services: list[str] = field(default_factory=list)
    scopes: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    refresh_token: SecretStr = field(default_factory=lambda: SecretStr(""), repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.refresh_token, SecretStr):
            self.refresh_token = SecretStr(self.refresh_token or "")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Token):
            return NotImplemented
        return (
            self.email == other.email
            and sorted(self.services) == sorted(other.services)
            and self.scopes == other.scopes
            and self.created_at == other.created_at
            and self.refresh_token.get_secret_value() == other.refresh_token.get_secret_value()
        )

    @property
    def has_refresh_token(self) -> bool:
        return bool(self.refresh_token.get_secret_value())

    def to_public_dict(self) -> dict[str, Any]:
        """Display representation without the refresh token."""
        data: dict[str, Any] = {"email": self.email}
        if self.services:
            data["services"] = list(self.services)
        if self.scopes:
            data["scopes"] = list(self.scopes)
        if self.created_at is not None:
            data["created_at"] = self.created_at.isoformat()
        return data


class StoredToken(BaseModel):
    """Internal storage record written under ``token:<email>``."""

    refresh_token: str = Field(..., min_length=1)
    services: list[str] | None = None
    scopes: list[str] | None = None
    created_at: datetime | None = None

    @field_validator("created_at")
    @classmethod
    def _drop_zero_time(cls, value: datetime | None) -> datetime | None:
        # Records written by older clients carry 0001-01-01T00:00:00Z for "unset"
        if value is not None and value.year <= 1:
            return None
        return value

    @classmethod
    def from_token(cls, token: Token) -> StoredToken:
        return cls(
            refresh_token=token.refresh_token.get_secret_value(),
            services=list(token.services) or None,
            scopes=list(token.scopes) or None,
            created_at=token.created_at,
        )

    def to_token(self, email: str) -> Token:
        created_at = self.created_at
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return Token(
            email=email,
            services=list(self.services or []),
            scopes=list(self.scopes or []),
            created_at=created_at,
            refresh_token=SecretStr(self.refresh_token),
        )
