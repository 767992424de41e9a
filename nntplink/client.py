"""
NNTP session client.

This module provides the main client interface: connection setup with
greeting check, authentication, newsgroup selection and tracking of the
group the server currently has selected.

The client implements a small state machine:
    DISCONNECTED -> connect() -> CONNECTING -> CONNECTED
    CONNECTED -> disconnect() -> DISCONNECTING -> DISCONNECTED
    any state -> NetworkError or BufferExceededError -> DISCONNECTED

Example:
    >>> from nntplink import NNTPClient
    >>>
    >>> async def main():
    ...     async with NNTPClient() as client:
    ...         if not await client.secure_connect("news.example.com"):
    ...             return
    ...         await client.login("reader", "secret")
    ...         group = await client.open_group("alt.binaries.test")
    ...         article = await group.fetch_article(group.high)
    ...         decoded = await article.decode()
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import TYPE_CHECKING, Awaitable, TypeVar

from nntplink.exceptions import (
    BufferExceededError,
    NetworkError,
    NNTPError,
    ProtocolError,
    ServerError,
)
from nntplink.group import Group
from nntplink.parsers.headers import parse_group_reply
from nntplink.protocol.constants import ProtocolConstants, StatusCode
from nntplink.protocol.engine import ProtocolEngine, StatusResponse
from nntplink.transport.tcp import TCPTransport

if TYPE_CHECKING:
    from nntplink.config import ServerSettings
    from nntplink.transport.abc import AbstractTransport
    from nntplink.transport.throughput import ThroughputMeter

# Module logger
logger = logging.getLogger(__name__)

T = TypeVar("T")


class ClientState(Enum):
    """NNTP client connection states."""

    DISCONNECTED = auto()
    """No connection to a server."""

    CONNECTING = auto()
    """Transport opened, waiting for the greeting."""

    CONNECTED = auto()
    """Greeting accepted; ready for commands."""

    DISCONNECTING = auto()
    """QUIT sent, closing the transport."""


class NNTPClient:
    """
    Client for one NNTP connection.

    Commands on one client run strictly one after another; use one client
    per concurrent connection.

    Attributes:
        state: Current connection state.
        host: Host of the current connection (if connected).
        current_group: Group the server currently has selected.
        transport: The underlying transport layer.
        engine: The protocol engine driving the transport.

    Example:
        >>> client = NNTPClient()
        >>> await client.connect("news.example.com")
        >>> group = await client.open_group("alt.test")
        >>> await client.disconnect()
    """

    def __init__(
        self,
        transport: AbstractTransport | None = None,
        max_buffer_size: int = ProtocolConstants.DEFAULT_MAX_BUFFER_SIZE,
        read_size: int = ProtocolConstants.DEFAULT_READ_SIZE,
        meter: ThroughputMeter | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            transport: Transport to use (a new TCPTransport if omitted).
            max_buffer_size: Largest single response held in memory.
            read_size: Upper bound for one transport read.
            meter: Throughput meter (created by the engine if omitted).
        """
        self._transport = transport if transport is not None else TCPTransport()
        self._engine = ProtocolEngine(
            self._transport,
            max_buffer_size=max_buffer_size,
            read_size=read_size,
            meter=meter,
        )
        self._state = ClientState.DISCONNECTED
        self._host: str | None = None
        self._current_group: Group | None = None
        self._authenticated = False

    @property
    def state(self) -> ClientState:
        """Get the current connection state."""
        return self._state

    @property
    def host(self) -> str | None:
        """Get the host of the current connection."""
        return self._host

    @property
    def is_connected(self) -> bool:
        """Check if the client is connected and the transport is open."""
        return self._state == ClientState.CONNECTED and self._transport.is_open

    @property
    def is_authenticated(self) -> bool:
        """Check if login() succeeded on this connection."""
        return self._authenticated

    @property
    def current_group(self) -> Group | None:
        """Get the group last selected on the server."""
        return self._current_group

    @property
    def transport(self) -> AbstractTransport:
        """Get the underlying transport."""
        return self._transport

    @property
    def engine(self) -> ProtocolEngine:
        """Get the protocol engine."""
        return self._engine

    # ===== Connection =====

    async def connect(self, host: str, service: str | int = "nntp") -> bool:
        """
        Connect to a server over plain TCP.

        Args:
            host: Server hostname.
            service: Service name or port.

        Returns:
            True if connected and the server greeted with 200.

        Raises:
            NetworkError: If the client is already connected.
        """
        return await self._open(host, service, secure=False)

    async def secure_connect(self, host: str, service: str | int = "nntps") -> bool:
        """
        Connect to a server over TLS.

        Args:
            host: Server hostname.
            service: Service name or port.

        Returns:
            True if connected and the server greeted with 200.

        Raises:
            NetworkError: If the client is already connected.
        """
        return await self._open(host, service, secure=True)

    async def _open(self, host: str, service: str | int, secure: bool) -> bool:
        if self.is_connected:
            raise NetworkError(
                f"Cannot connect: client is in {self._state.name} state",
                host=self._host,
            )

        self._state = ClientState.CONNECTING
        self._engine.reset()
        self._engine.meter.reset()
        self._current_group = None
        self._authenticated = False
        logger.info("Connecting to %s (%s, tls=%s)", host, service, secure)

        opener = self._transport.secure_connect if secure else self._transport.connect
        if not await opener(host, service):
            logger.warning("Could not open connection to %s", host)
            self._state = ClientState.DISCONNECTED
            return False

        try:
            greeting = await self._engine.read_status_line()
        except (NetworkError, ProtocolError) as e:
            logger.warning("No valid greeting from %s: %s", host, e)
            await self._close_transport()
            return False

        if greeting.code != StatusCode.SERVICE_AVAILABLE:
            logger.warning("Server %s refused service: %d %s", host, greeting.code, greeting.message)
            await self._close_transport()
            return False

        self._state = ClientState.CONNECTED
        self._host = host
        logger.info("Connected to %s", host)
        return True

    async def login(self, user: str, password: str) -> bool:
        """
        Authenticate with AUTHINFO USER/PASS.

        Args:
            user: Username.
            password: Password.

        Returns:
            True if the server answered 381 then 281.

        Raises:
            NetworkError: If not connected or the transport fails.
        """
        self._ensure_connected()

        status = await self._guard(self._engine.send_command(f"AUTHINFO USER {user}"))
        if status.code != StatusCode.PASSWORD_REQUIRED:
            logger.warning("AUTHINFO USER rejected: %d %s", status.code, status.message)
            return False

        status = await self._guard(self._engine.send_command(f"AUTHINFO PASS {password}"))
        if status.code != StatusCode.AUTH_ACCEPTED:
            logger.warning("AUTHINFO PASS rejected: %d %s", status.code, status.message)
            return False

        self._authenticated = True
        logger.info("Logged in to %s as %s", self._host, user)
        return True

    async def disconnect(self) -> None:
        """
        Send QUIT and close the connection.

        Never raises: a server that does not answer QUIT is ignored.
        Safe to call when not connected.
        """
        if self._state == ClientState.DISCONNECTED and not self._transport.is_open:
            return

        logger.info("Disconnecting from %s", self._host)
        self._state = ClientState.DISCONNECTING

        try:
            if self._transport.is_open:
                await self._engine.send_command("QUIT")
        except NNTPError as e:
            logger.debug("QUIT failed (ignored): %s", e)
        finally:
            await self._close_transport()
            logger.debug("Disconnected")

    # ===== Groups =====

    async def open_group(self, name: str) -> Group | None:
        """
        Select a newsgroup and read its watermarks.

        Args:
            name: Newsgroup name.

        Returns:
            Group descriptor (now the current group), or None if the
            server does not carry the group.

        Raises:
            ProtocolError: If the 211 reply is missing watermark fields.
            NetworkError: If not connected or the transport fails.
        """
        self._ensure_connected()

        status = await self._guard(self._engine.send_command(f"GROUP {name}"))
        if status.code != StatusCode.GROUP_SELECTED:
            logger.debug("Group %s not available: %d %s", name, status.code, status.message)
            return None

        group = Group(self, parse_group_reply(name, status.message))
        self._current_group = group
        logger.debug("Opened group %s", group.info)
        return group

    async def activate_group(self, group: Group) -> None:
        """
        Make sure ``group`` is the group selected on the server.

        Article commands act on whichever group was selected last, so this
        is called before each of them. No command is sent when ``group``
        is already current.

        Raises:
            ServerError: If the server no longer accepts the group.
            NetworkError: If not connected or the transport fails.
        """
        if group is self._current_group:
            return

        self._ensure_connected()
        await self._guard(
            self._engine.send_command_expect(f"GROUP {group.name}", StatusCode.GROUP_SELECTED)
        )
        self._current_group = group

    # ===== Engine pass-throughs =====

    async def send_command(self, line: str) -> StatusResponse:
        """Send a command and return its status line."""
        self._ensure_connected()
        return await self._guard(self._engine.send_command(line))

    async def send_block_command(self, line: str, expected_code: int = -1) -> bytes:
        """Send a command and return its raw data block."""
        self._ensure_connected()
        return await self._guard(self._engine.send_block_command(line, expected_code))

    async def send_multiline_command(self, line: str, expected_code: int) -> list[str]:
        """Send a command and return its multi-line response."""
        self._ensure_connected()
        return await self._guard(self._engine.send_multiline_command(line, expected_code))

    # ===== Throughput =====

    def download_speed(self) -> int:
        """Incoming bytes per second over the last few seconds."""
        return self._engine.download_speed()

    def upload_speed(self) -> int:
        """Outgoing bytes per second over the last few seconds."""
        return self._engine.upload_speed()

    # ===== Internals =====

    def _ensure_connected(self) -> None:
        """Verify client is in connected state."""
        if not self.is_connected:
            raise NetworkError(f"Not connected (state: {self._state.name})", host=self._host)

    async def _guard(self, operation: Awaitable[T]) -> T:
        """Await an engine operation, dropping to DISCONNECTED when the engine closed the transport."""
        try:
            return await operation
        except (NetworkError, BufferExceededError):
            self._mark_disconnected()
            raise

    async def _close_transport(self) -> None:
        try:
            await self._transport.close()
        finally:
            self._engine.reset()
            self._engine.meter.reset()
            self._mark_disconnected()

    def _mark_disconnected(self) -> None:
        self._state = ClientState.DISCONNECTED
        self._current_group = None
        self._authenticated = False

    async def __aenter__(self) -> NNTPClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - QUIT and close transport."""
        await self.disconnect()

    def __repr__(self) -> str:
        host = self._host or "None"
        return f"NNTPClient(state={self._state.name}, host={host})"


async def open_session(
    settings: ServerSettings,
    transport: AbstractTransport | None = None,
) -> NNTPClient:
    """
    Connect and authenticate according to ``settings``.

    Unlike NNTPClient.connect(), failures raise instead of returning False.

    Args:
        settings: Server settings.
        transport: Transport to use (a new TCPTransport if omitted).

    Returns:
        A connected (and, if credentials were given, logged-in) client.

    Raises:
        NetworkError: If the connection could not be established.
        ServerError: If the credentials were rejected.
    """
    client = NNTPClient(
        transport,
        max_buffer_size=settings.max_buffer_size,
        read_size=settings.read_size,
    )

    opener = client.secure_connect if settings.secure else client.connect
    if not await opener(settings.host, settings.effective_service):
        raise NetworkError("Could not connect to server", host=settings.host)

    if settings.has_credentials:
        password = settings.password.get_secret_value() if settings.password is not None else ""
        if not await client.login(settings.username, password):
            await client.disconnect()
            raise ServerError("Authentication rejected")

    return client
