"""
Mock transport for testing.

This module provides a mock transport implementation that allows testing
the protocol engine and client without a news server. Responses can be
pre-configured or generated from the written commands, and reads can be
fragmented to arbitrary chunk sizes to exercise reassembly.

Example:
    >>> from nntplink.transport import MockTransport
    >>> from nntplink import NNTPClient
    >>>
    >>> mock = MockTransport()
    >>> mock.add_response(b"200 news.example.com ready\\r\\n")
    >>>
    >>> async with NNTPClient(mock) as client:
    ...     await client.connect("news.example.com")
"""

from __future__ import annotations

from collections import deque
from typing import Callable

from nntplink.exceptions import NetworkError
from nntplink.transport.abc import AbstractTransport


class MockTransport(AbstractTransport):
    """
    Mock transport for testing without a server.

    Queued responses are concatenated into one incoming byte stream; each
    read_some() returns at most ``chunk_size`` bytes of it, so the same
    responses can be replayed under any fragmentation. All written data is
    recorded for verification.

    Attributes:
        written_data: List of all bytes written to the transport.
        connected_host: Host passed to the last successful connect.
        secure: Whether the last connect was a secure one.

    Example:
        >>> mock = MockTransport(chunk_size=3)
        >>> mock.add_response(b"200 ready\\r\\n")
        >>>
        >>> await mock.connect("localhost")
        >>> await mock.read_some(100)
        b'200'
    """

    def __init__(
        self,
        name: str = "mock://test",
        chunk_size: int | None = None,
        max_write: int | None = None,
        accept_connections: bool = True,
    ) -> None:
        """
        Initialize the mock transport.

        Args:
            name: Identifier for the mock transport.
            chunk_size: Largest piece returned by one read (None = unlimited).
            max_write: Largest piece accepted by one write (None = unlimited).
            accept_connections: Whether connect()/secure_connect() succeed.
        """
        self._name = name
        self._chunk_size = chunk_size
        self._max_write = max_write
        self._accept_connections = accept_connections
        self._is_open = False
        self._responses: deque[bytes] = deque()
        self._written_data: list[bytes] = []
        self._read_buffer = bytearray()
        self._response_callback: Callable[[bytes], bytes | None] | None = None
        self._read_error: NetworkError | None = None
        self._write_error: NetworkError | None = None
        self.connected_host: str | None = None
        self.connected_service: str | int | None = None
        self.secure = False
        self.read_calls = 0

    @property
    def is_open(self) -> bool:
        """Check if the mock transport is open."""
        return self._is_open

    @property
    def name(self) -> str:
        """Get the mock name."""
        return self._name

    @property
    def written_data(self) -> list[bytes]:
        """Get all data written to the transport."""
        return self._written_data.copy()

    @property
    def last_written(self) -> bytes | None:
        """Get the most recently written data."""
        return self._written_data[-1] if self._written_data else None

    @property
    def written_lines(self) -> list[str]:
        """All written data joined and split into CRLF-terminated lines."""
        text = b"".join(self._written_data).decode("utf-8")
        return text.split("\r\n")[:-1]

    def add_response(self, response: bytes) -> None:
        """
        Add a response to the incoming stream.

        Args:
            response: Bytes the server "sends" next.
        """
        self._responses.append(response)

    def add_responses(self, *responses: bytes) -> None:
        """
        Add multiple responses to the incoming stream.

        Args:
            *responses: Multiple byte responses to add.
        """
        for response in responses:
            self._responses.append(response)

    def set_response_callback(
        self,
        callback: Callable[[bytes], bytes | None] | None,
    ) -> None:
        """
        Set a callback to dynamically generate responses.

        The callback receives the written data and returns bytes to append
        to the incoming stream, or None for no reply.

        Args:
            callback: Function that takes written bytes and returns response.
        """
        self._response_callback = callback

    def fail_next_read(self, message: str = "Connection reset by peer") -> None:
        """Make the next read_some() fail with a NetworkError."""
        self._read_error = NetworkError(message, host=self.connected_host)

    def fail_next_write(self, message: str = "Broken pipe") -> None:
        """Make the next write_some() fail with a NetworkError."""
        self._write_error = NetworkError(message, host=self.connected_host)

    def clear(self) -> None:
        """Clear all written data and pending responses."""
        self._written_data.clear()
        self._responses.clear()
        self._read_buffer.clear()

    def clear_written(self) -> None:
        """Clear only the written data history."""
        self._written_data.clear()

    async def connect(self, host: str, service: str | int = "nntp") -> bool:
        """Pretend to open a plain connection."""
        return self._open(host, service, secure=False)

    async def secure_connect(self, host: str, service: str | int = "nntps") -> bool:
        """Pretend to open a TLS connection."""
        return self._open(host, service, secure=True)

    def _open(self, host: str, service: str | int, secure: bool) -> bool:
        if self._is_open or not self._accept_connections:
            return False
        self._is_open = True
        self.connected_host = host
        self.connected_service = service
        self.secure = secure
        return True

    async def close(self) -> None:
        """Close the mock transport."""
        self._is_open = False

    async def read_some(self, max_len: int) -> bytes:
        """
        Return the next piece of the incoming stream.

        Raises:
            NetworkError: If the transport is not open, an error was
                injected, or no data is left to deliver.
        """
        if not self._is_open:
            raise NetworkError("Unable to read from non-connected socket", host=self.connected_host)

        self.read_calls += 1

        if self._read_error is not None:
            error, self._read_error = self._read_error, None
            self._is_open = False
            raise error

        if not self._read_buffer and self._responses:
            self._read_buffer.extend(self._responses.popleft())

        if not self._read_buffer:
            self._is_open = False
            raise NetworkError("No mock response available", host=self.connected_host)

        size = max_len
        if self._chunk_size is not None:
            size = min(size, self._chunk_size)

        result = bytes(self._read_buffer[:size])
        del self._read_buffer[:size]
        return result

    async def write_some(self, data: bytes) -> int:
        """
        Record written data and optionally trigger the response callback.

        Raises:
            NetworkError: If the transport is not open or an error was injected.
        """
        if not self._is_open:
            raise NetworkError("Unable to write to non-connected socket", host=self.connected_host)

        if self._write_error is not None:
            error, self._write_error = self._write_error, None
            self._is_open = False
            raise error

        accepted = bytes(data)
        if self._max_write is not None:
            accepted = accepted[: self._max_write]

        self._written_data.append(accepted)

        if self._response_callback:
            response = self._response_callback(accepted)
            if response is not None:
                self._read_buffer.extend(response)

        return len(accepted)

    def assert_written(self, expected: bytes, index: int = -1) -> None:
        """
        Assert that specific data was written.

        Args:
            expected: Expected bytes.
            index: Index in written_data list (-1 for last).

        Raises:
            AssertionError: If data doesn't match.
        """
        if not self._written_data:
            raise AssertionError("No data written to mock transport")

        actual = self._written_data[index]
        if actual != expected:
            raise AssertionError(f"Written data mismatch: expected {expected!r}, got {actual!r}")

    def assert_write_count(self, expected: int) -> None:
        """
        Assert number of write operations.

        Args:
            expected: Expected number of writes.

        Raises:
            AssertionError: If count doesn't match.
        """
        actual = len(self._written_data)
        if actual != expected:
            raise AssertionError(f"Write count mismatch: expected {expected}, got {actual}")


class ScriptedMockTransport(MockTransport):
    """
    Mock transport with scripted request/response pairs.

    Each write consumes the next script step: the written command is checked
    against the expected one (if given) and the scripted reply is queued.

    Example:
        >>> mock = ScriptedMockTransport()
        >>> mock.add_response(b"200 ready\\r\\n")
        >>> mock.expect(request=b"GROUP alt.test\\r\\n", response=b"211 3 1 3 alt.test\\r\\n")
    """

    def __init__(self, name: str = "mock://scripted", chunk_size: int | None = None) -> None:
        super().__init__(name, chunk_size=chunk_size)
        self._script: list[tuple[bytes | None, bytes]] = []
        self._script_index = 0

    def expect(
        self,
        response: bytes,
        request: bytes | None = None,
    ) -> None:
        """
        Add an expected request/response pair.

        Args:
            response: Response to return.
            request: Expected request (None to match any).
        """
        self._script.append((request, response))

    async def write_some(self, data: bytes) -> int:
        """Write with script validation."""
        written = await super().write_some(data)

        if self._script_index < len(self._script):
            expected_request, response = self._script[self._script_index]

            if expected_request is not None and bytes(data) != expected_request:
                raise AssertionError(
                    f"Script mismatch at step {self._script_index}: "
                    f"expected {expected_request!r}, got {bytes(data)!r}"
                )

            self._responses.append(response)
            self._script_index += 1

        return written

    @property
    def script_complete(self) -> bool:
        """Check whether every scripted step was consumed."""
        return self._script_index == len(self._script)

    def reset_script(self) -> None:
        """Reset script to beginning."""
        self._script_index = 0
        self._read_buffer.clear()

    def clear_script(self) -> None:
        """Clear all scripted expectations."""
        self._script.clear()
        self._script_index = 0
