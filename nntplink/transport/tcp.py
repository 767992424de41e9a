"""
TCP transport using asyncio streams.

Provides the transport used against real servers. A single class covers
both flavours: connect() opens a plain socket, secure_connect() wraps it
in TLS using an ssl context (system defaults unless one is supplied).

Example:
    >>> transport = TCPTransport()
    >>> if await transport.secure_connect("news.example.com", "nntps"):
    ...     greeting = await transport.read_some(512)
"""

from __future__ import annotations

import asyncio
import logging
import ssl

from nntplink.exceptions import NetworkError
from nntplink.protocol.constants import resolve_service
from nntplink.transport.abc import AbstractTransport

logger = logging.getLogger(__name__)


class TCPTransport(AbstractTransport):
    """
    Async TCP/TLS transport.

    Attributes:
        name: "host:port" of the current or last connection.
        is_open: Whether the stream is currently open.
        is_secure: Whether the current connection uses TLS.

    Example:
        >>> transport = TCPTransport()
        >>> await transport.connect("news.example.com")
        >>> try:
        ...     await transport.write_some(b"QUIT\\r\\n")
        ... finally:
        ...     await transport.close()
    """

    def __init__(self, ssl_context: ssl.SSLContext | None = None) -> None:
        """
        Initialize the transport.

        Args:
            ssl_context: Context used by secure_connect(). Defaults to
                ssl.create_default_context() at connect time.
        """
        self._ssl_context = ssl_context
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._host: str | None = None
        self._port: int | None = None
        self._secure = False

    @property
    def is_open(self) -> bool:
        """Check if the stream is currently open."""
        return (
            self._writer is not None
            and not self._writer.is_closing()
            and self._reader is not None
        )

    @property
    def name(self) -> str:
        """Get "host:port" for the connection."""
        if self._host is None:
            return "tcp://unconnected"
        return f"{self._host}:{self._port}"

    @property
    def is_secure(self) -> bool:
        """Check if the connection uses TLS."""
        return self._secure

    async def connect(self, host: str, service: str | int = "nntp") -> bool:
        """Open a plain TCP connection."""
        return await self._open(host, service, None)

    async def secure_connect(self, host: str, service: str | int = "nntps") -> bool:
        """Open a TLS connection."""
        context = self._ssl_context or ssl.create_default_context()
        return await self._open(host, service, context)

    async def _open(
        self,
        host: str,
        service: str | int,
        context: ssl.SSLContext | None,
    ) -> bool:
        if self.is_open:
            logger.warning("Transport already open to %s", self.name)
            return False

        try:
            port = resolve_service(service)
        except ValueError as e:
            logger.warning("Cannot resolve service %r: %s", service, e)
            return False

        try:
            self._reader, self._writer = await asyncio.open_connection(
                host,
                port,
                ssl=context,
                server_hostname=host if context is not None else None,
            )
        except (OSError, ssl.SSLError) as e:
            logger.warning("Failed to connect to %s:%d: %s", host, port, e)
            self._reader = None
            self._writer = None
            return False

        self._host = host
        self._port = port
        self._secure = context is not None
        logger.debug("Connected to %s (tls=%s)", self.name, self._secure)
        return True

    async def close(self) -> None:
        """
        Close the stream.

        Safe to call multiple times.
        """
        writer = self._writer
        self._reader = None
        self._writer = None
        self._secure = False

        if writer is not None:
            writer.close()
            try:
                await writer.wait_closed()
            except (OSError, ssl.SSLError) as e:
                logger.debug("Error while closing %s: %s", self.name, e)

    async def read_some(self, max_len: int) -> bytes:
        """Read up to max_len bytes."""
        if not self.is_open:
            raise NetworkError("Unable to read from non-connected socket", host=self._host)

        try:
            data = await self._reader.read(max_len)
        except (OSError, ssl.SSLError) as e:
            await self.close()
            raise NetworkError(f"Read failed: {e}", host=self._host) from e

        if not data:
            await self.close()
            raise NetworkError("The network connection was unexpectedly closed", host=self._host)
        return data

    async def write_some(self, data: bytes) -> int:
        """Write data; asyncio buffers everything, so all bytes are accepted."""
        if not self.is_open:
            raise NetworkError("Unable to write to non-connected socket", host=self._host)

        try:
            self._writer.write(data)
            await self._writer.drain()
        except (OSError, ssl.SSLError) as e:
            await self.close()
            raise NetworkError(f"Write failed: {e}", host=self._host) from e
        return len(data)

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"TCPTransport({self.name!r}, tls={self._secure}, {status})"
