"""
Connection settings.

ServerSettings gathers everything needed to open an authenticated session
in one validated, immutable object. It is consumed by open_session().

Example:
    >>> settings = ServerSettings(
    ...     host="news.example.com",
    ...     secure=True,
    ...     username="reader",
    ...     password="secret",
    ... )
    >>> settings.port
    563
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator

from nntplink.protocol.constants import ProtocolConstants, resolve_service


class ServerSettings(BaseModel):
    """
    Settings for one news server connection.

    ``service`` defaults to "nntps" for secure connections and "nntp"
    otherwise. The password is held as a SecretStr so it never shows up in
    reprs or logs.
    """

    model_config = ConfigDict(frozen=True)

    host: str = Field(min_length=1, description="Server hostname or address")
    service: str | int | None = Field(default=None, description="Service name or port")
    secure: bool = Field(default=False, description="Connect over TLS")
    username: str | None = Field(default=None, description="AUTHINFO user")
    password: SecretStr | None = Field(default=None, description="AUTHINFO password")
    max_buffer_size: int = Field(
        default=ProtocolConstants.DEFAULT_MAX_BUFFER_SIZE,
        gt=0,
        description="Largest protocol unit held in memory",
    )
    read_size: int = Field(
        default=ProtocolConstants.DEFAULT_READ_SIZE,
        gt=0,
        description="Upper bound for one transport read",
    )

    @field_validator("service")
    @classmethod
    def _check_service(cls, value: str | int | None) -> str | int | None:
        if value is not None:
            resolve_service(value)
        return value

    @model_validator(mode="after")
    def _check_consistency(self) -> ServerSettings:
        if self.read_size > self.max_buffer_size:
            raise ValueError("read_size must not exceed max_buffer_size")
        if self.password is not None and self.username is None:
            raise ValueError("password given without username")
        return self

    @property
    def effective_service(self) -> str | int:
        """Service to connect to, applying the secure/plain default."""
        if self.service is not None:
            return self.service
        return "nntps" if self.secure else "nntp"

    @property
    def port(self) -> int:
        """Resolved TCP port."""
        return resolve_service(self.effective_service)

    @property
    def has_credentials(self) -> bool:
        """Check if a login should be performed."""
        return self.username is not None
