"""Data model for arti-objectstore."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class ConnectionDescriptor(BaseModel):
    """Resolved connection details for the repository service.

    Several credential sources may be present at once. Only one of them is
    authoritative: the first non-empty of password, API key and access token.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str = Field(..., description="Repository service base URL")
    user: str = Field(..., description="Repository user name")
    password: Optional[SecretStr] = Field(None, description="User password")
    api_key: Optional[SecretStr] = Field(None, description="API key")
    access_token: Optional[SecretStr] = Field(None, description="Access token")
    ssh_key_path: Optional[str] = Field(None, description="Path to SSH private key")
    client_cert_path: Optional[str] = Field(
        None, description="Path to client certificate"
    )
    client_cert_key_path: Optional[str] = Field(
        None, description="Path to client certificate key"
    )

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"url must be an absolute http(s) URL, got: {value!r}")
        if not value.endswith("/"):
            value += "/"
        return value

    @property
    def credential(self) -> Optional[str]:
        """Return the authoritative credential, or None for anonymous access."""
        for secret in (self.password, self.api_key, self.access_token):
            if secret is not None and secret.get_secret_value():
                return secret.get_secret_value()
        return None

    @property
    def credential_kind(self) -> Optional[str]:
        """Name of the field holding the authoritative credential."""
        for kind in ("password", "api_key", "access_token"):
            secret = getattr(self, kind)
            if secret is not None and secret.get_secret_value():
                return kind
        return None


class ResilienceSettings(BaseModel):
    """Transport behaviour handed to the repository client."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    dry_run: bool = Field(False, description="Skip mutating calls")
    threads: int = Field(3, ge=1, description="Parallel transfers per operation")
    dial_timeout: timedelta = Field(
        timedelta(seconds=30), description="Connection establishment timeout"
    )
    request_timeout: timedelta = Field(
        timedelta(minutes=10), description="Overall request timeout"
    )
    retries: int = Field(3, ge=0, description="HTTP retry count")

    @field_validator("dial_timeout", "request_timeout")
    @classmethod
    def _positive(cls, value: timedelta) -> timedelta:
        if value <= timedelta(0):
            raise ValueError("timeout must be positive")
        return value


@dataclass(frozen=True)
class SearchResult:
    """A single file entry returned by a repository search."""

    repo: str
    path: str
    name: str


@dataclass(frozen=True)
class TransferResult:
    """Outcome of a bulk upload, download or delete.

    Partial failure is reported here rather than raised, so callers decide
    whether a non-zero ``failed`` count matters to them.
    """

    succeeded: int
    failed: int = 0

