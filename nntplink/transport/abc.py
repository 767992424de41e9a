"""
Abstract transport interface for NNTP connections.

The transport layer is responsible for:
- Resolving and connecting to a server, optionally over TLS
- Reading whatever bytes are available (at most a given amount)
- Writing bytes and reporting how many were accepted
- Closing the connection

Everything above this layer (line assembly, dot-stuffing, status codes)
lives in the protocol engine.

Implementations:
- TCPTransport: asyncio streams, plain or TLS
- MockTransport: For testing without a server
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types import TracebackType


class AbstractTransport(ABC):
    """
    Abstract base class for NNTP transports.

    Plain and TLS flavours are interchangeable behind this contract.
    Transports support the async context manager protocol, which only
    guarantees the connection is closed on exit:

        async with TCPTransport() as transport:
            await transport.secure_connect("news.example.com", "nntps")
            data = await transport.read_some(4096)

    Attributes:
        is_open: Whether the connection is currently open.
        name: Identifier for the connection (e.g., "host:port").
    """

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """
        Check if the transport connection is currently open.

        Returns:
            True if connected and ready for I/O, False otherwise.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Get the transport identifier.

        Returns:
            Identifier string such as "news.example.com:119".
        """
        ...

    @abstractmethod
    async def connect(self, host: str, service: str | int = "nntp") -> bool:
        """
        Open a plain connection.

        Args:
            host: Server hostname or address.
            service: Service name ("nntp") or port.

        Returns:
            True if connected; False if resolution or connection failed
            or the transport is already open.
        """
        ...

    @abstractmethod
    async def secure_connect(self, host: str, service: str | int = "nntps") -> bool:
        """
        Open a TLS connection and complete the handshake.

        Args:
            host: Server hostname or address.
            service: Service name ("nntps") or port.

        Returns:
            True if connected and the handshake succeeded, False otherwise.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """
        Close the connection.

        Safe to call multiple times (idempotent).
        """
        ...

    @abstractmethod
    async def read_some(self, max_len: int) -> bytes:
        """
        Read the bytes that are available, up to max_len.

        Waits until at least one byte arrives.

        Args:
            max_len: Upper bound on the number of bytes returned.

        Returns:
            Between 1 and max_len bytes.

        Raises:
            NetworkError: If the transport is not open, the read fails or
                the peer closed the connection. The transport is closed.
        """
        ...

    @abstractmethod
    async def write_some(self, data: bytes) -> int:
        """
        Write bytes to the connection.

        Args:
            data: Bytes to send.

        Returns:
            Number of bytes accepted (may be fewer than len(data)).

        Raises:
            NetworkError: If the transport is not open or the write fails.
                The transport is closed.
        """
        ...

    async def __aenter__(self) -> AbstractTransport:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - closes the transport."""
        await self.close()
