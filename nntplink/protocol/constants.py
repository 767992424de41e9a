"""
NNTP status codes and protocol constants.

Only the codes this library acts on are named here. Servers send many more;
unknown codes are still returned to the caller as plain integers.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Final


class StatusCode(IntEnum):
    """
    NNTP response codes used by the session and article layers.

    The first digit carries the meaning:
    - 1xx: informative
    - 2xx: command completed
    - 3xx: command accepted, send the rest
    - 4xx: command correct but could not be performed
    - 5xx: command not recognised or failed
    """

    # ===== Connection =====

    SERVICE_AVAILABLE = 200
    """Greeting: service available, posting allowed."""

    SERVICE_AVAILABLE_NO_POSTING = 201
    """Greeting: service available, posting prohibited."""

    CLOSING_CONNECTION = 205
    """Reply to QUIT."""

    # ===== Group / article selection =====

    GROUP_SELECTED = 211
    """GROUP succeeded: count low high name."""

    ARTICLE_FOLLOWS = 220
    """ARTICLE succeeded, headers and body follow."""

    HEAD_FOLLOWS = 221
    """HEAD succeeded, header block follows."""

    BODY_FOLLOWS = 222
    """BODY succeeded, body block follows."""

    ARTICLE_EXISTS = 223
    """STAT succeeded: number message-id."""

    # ===== Authentication =====

    AUTH_ACCEPTED = 281
    """AUTHINFO PASS accepted."""

    PASSWORD_REQUIRED = 381
    """AUTHINFO USER accepted, password required."""

    # ===== Failures =====

    NO_SUCH_GROUP = 411
    """GROUP named a group the server does not carry."""

    NO_GROUP_SELECTED = 412
    """Article command issued before any GROUP."""

    NO_SUCH_ARTICLE_NUMBER = 423
    """No article with that number in the current group."""

    NO_SUCH_ARTICLE_ID = 430
    """No article with that message-id."""

    AUTH_REQUIRED = 480
    """Command requires authentication."""

    AUTH_REJECTED = 481
    """Credentials rejected."""

    COMMAND_UNKNOWN = 500
    """Command not recognised."""


class ProtocolConstants:
    """
    Wire-level constants and defaults.

    Values are class attributes so they can be referenced as defaults in
    signatures, e.g. ``max_buffer_size=ProtocolConstants.DEFAULT_MAX_BUFFER_SIZE``.
    """

    CRLF: Final[bytes] = b"\r\n"
    """Line terminator for every command and response line."""

    BLOCK_TERMINATOR: Final[bytes] = b"\r\n.\r\n"
    """Marker ending a raw data block."""

    EMPTY_BLOCK: Final[bytes] = b".\r\n"
    """A block that ends before any content line."""

    MULTILINE_TERMINATOR: Final[str] = "."
    """Line content that ends a multi-line response."""

    STATUS_CODE_LENGTH: Final[int] = 3
    """Digits in a status code."""

    TEXT_ENCODING: Final[str] = "utf-8"
    """Encoding used for status and multi-line response text."""

    DEFAULT_MAX_BUFFER_SIZE: Final[int] = 1024 * 1024
    """Largest single protocol unit held in the receive buffer (1 MiB)."""

    DEFAULT_READ_SIZE: Final[int] = 64 * 1024
    """Upper bound for one transport read."""

    THROUGHPUT_SLOTS: Final[int] = 30
    """Number of slices kept by the throughput meter."""

    THROUGHPUT_SLOT_SECONDS: Final[float] = 0.1
    """Width of one throughput slice in seconds."""


SERVICE_PORTS: Final[dict[str, int]] = {
    "nntp": 119,
    "nntps": 563,
}
"""Well-known service names accepted wherever a port is expected."""


def resolve_service(service: str | int) -> int:
    """
    Resolve a service name or port string to a TCP port.

    Args:
        service: ``"nntp"``, ``"nntps"``, a numeric string or an int.

    Returns:
        Port number.

    Raises:
        ValueError: If the service is unknown or out of range.
    """
    if isinstance(service, int):
        port = service
    elif service.lower() in SERVICE_PORTS:
        port = SERVICE_PORTS[service.lower()]
    elif service.isdigit():
        port = int(service)
    else:
        raise ValueError(f"Unknown service: {service!r}")

    if not 0 < port < 65536:
        raise ValueError(f"Port out of range: {port}")
    return port
