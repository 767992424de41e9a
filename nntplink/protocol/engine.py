"""
Buffered NNTP protocol reader/writer.

The transport delivers bytes in arbitrary fragments. This module assembles
them into the three kinds of protocol unit NNTP uses:

1. **Status lines**: ``NNN text CRLF``
   - Reply to every command
   - Code is exactly 3 ASCII digits

2. **Multi-line responses**: lines of text ended by a line holding only ``.``
   - Used for: HEAD, LIST, OVER
   - Lines starting with ``.`` are dot-stuffed; the extra dot is removed here

3. **Raw data blocks**: opaque bytes ended by ``CRLF.CRLF``
   - Used for: BODY / ARTICLE of binary posts
   - No dot-unstuffing; the yEnc decoder handles it

Buffer Notes:
- One bytearray per connection, reused for every command
- A cursor marks the first unconsumed byte; consumed bytes are compacted
  away before the next transport read
- Bytes past the end of the current unit stay buffered for the next read
- A unit that would outgrow ``max_buffer_size`` raises BufferExceededError
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nntplink.exceptions import BufferExceededError, NetworkError, ProtocolError, ServerError
from nntplink.protocol.constants import ProtocolConstants
from nntplink.transport.throughput import ThroughputMeter

if TYPE_CHECKING:
    from nntplink.transport.abc import AbstractTransport

# Module logger
logger = logging.getLogger(__name__)

_CRLF = ProtocolConstants.CRLF
_BLOCK_TERMINATOR = ProtocolConstants.BLOCK_TERMINATOR
_EMPTY_BLOCK = ProtocolConstants.EMPTY_BLOCK


@dataclass(frozen=True)
class StatusResponse:
    """
    A parsed NNTP status line.

    Attributes:
        code: 3-digit status code.
        message: Text after the code and its separating space.
        raw: The complete line without CRLF.
    """

    code: int
    message: str
    raw: str

    @property
    def is_success(self) -> bool:
        """Check for a 2xx completion code."""
        return 200 <= self.code < 300

    @property
    def is_continue(self) -> bool:
        """Check for a 3xx "send more" code."""
        return 300 <= self.code < 400

    @property
    def is_error(self) -> bool:
        """Check for a 4xx or 5xx failure code."""
        return self.code >= 400

    def __repr__(self) -> str:
        return f"StatusResponse({self.code}, {self.message!r})"


def parse_status_line(line: str) -> StatusResponse:
    """
    Split a status line into code and message.

    Args:
        line: Status line without CRLF.

    Returns:
        Parsed StatusResponse.

    Raises:
        ProtocolError: If the line does not start with a 3-digit code.

    Example:
        >>> parse_status_line("211 3 1 3 alt.test")
        StatusResponse(211, '3 1 3 alt.test')
    """
    length = ProtocolConstants.STATUS_CODE_LENGTH
    digits = line[:length]
    if len(digits) != length or not (digits.isascii() and digits.isdigit()):
        raise ProtocolError("Status line does not start with a 3-digit code", line=line)
    if len(line) > length and line[length] != " ":
        raise ProtocolError("Status code is not followed by a space", line=line)

    return StatusResponse(code=int(digits), message=line[length + 1 :], raw=line)


def _mask_command(text: str) -> str:
    """Hide credentials before a command is logged."""
    if text.upper().startswith("AUTHINFO PASS"):
        return "AUTHINFO PASS ****"
    return text


class ProtocolEngine:
    """
    NNTP protocol engine for one connection.

    Owns the receive buffer and drives the transport. Not safe for
    concurrent use: exactly one command may be in flight at a time.

    Attributes:
        transport: The underlying transport.
        meter: Throughput meter fed by every read and write.
        max_buffer_size: Largest protocol unit that may be buffered.
        buffered: Number of received but unconsumed bytes.

    Example:
        >>> engine = ProtocolEngine(transport)
        >>> status = await engine.send_command("GROUP alt.binaries.test")
        >>> if status.code == 211:
        ...     body = await engine.send_block_command("BODY 42", 222)
    """

    def __init__(
        self,
        transport: AbstractTransport,
        max_buffer_size: int = ProtocolConstants.DEFAULT_MAX_BUFFER_SIZE,
        read_size: int = ProtocolConstants.DEFAULT_READ_SIZE,
        meter: ThroughputMeter | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            transport: Transport to read from and write to.
            max_buffer_size: Cap on buffered, unconsumed bytes.
            read_size: Upper bound for a single transport read.
            meter: Throughput meter (a new one is created if omitted).
        """
        if max_buffer_size <= 0:
            raise ValueError(f"max_buffer_size must be positive, got {max_buffer_size}")
        if read_size <= 0:
            raise ValueError(f"read_size must be positive, got {read_size}")

        self._transport = transport
        self._max_buffer_size = max_buffer_size
        self._read_size = read_size
        self._meter = meter if meter is not None else ThroughputMeter()
        self._buffer = bytearray()
        self._cursor = 0

    @property
    def transport(self) -> AbstractTransport:
        """Get the underlying transport."""
        return self._transport

    @property
    def meter(self) -> ThroughputMeter:
        """Get the throughput meter."""
        return self._meter

    @property
    def max_buffer_size(self) -> int:
        """Get the buffer cap in bytes."""
        return self._max_buffer_size

    @property
    def buffered(self) -> int:
        """Number of received bytes not yet consumed."""
        return len(self._buffer) - self._cursor

    def reset(self) -> None:
        """Drop all buffered data (used on connect and close)."""
        self._buffer.clear()
        self._cursor = 0

    # ===== Writing =====

    async def write_command(self, text: str) -> None:
        """
        Send one command line.

        The line terminator is added here; any trailing CR/LF in ``text``
        is replaced by a single CRLF. Partial writes are retried until all
        bytes are sent.

        Args:
            text: Command without terminator, e.g. ``"GROUP alt.test"``.

        Raises:
            NetworkError: If the transport fails. The transport is closed.
        """
        command = text.rstrip("\r\n")
        logger.debug("> %s", _mask_command(command))

        data = memoryview((command + "\r\n").encode(ProtocolConstants.TEXT_ENCODING))
        while data:
            try:
                sent = await self._transport.write_some(bytes(data))
            except NetworkError:
                logger.error("Write to %s failed", self._transport.name)
                await self._abort()
                raise

            if sent <= 0:
                await self._abort()
                raise NetworkError("Transport accepted no data", host=self._transport.name)

            self._meter.log_io(sent=sent)
            data = data[sent:]

    # ===== Reading =====

    async def read_status_line(self) -> StatusResponse:
        """
        Read one status line.

        Returns:
            StatusResponse with code and message.

        Raises:
            ProtocolError: If the line has no leading 3-digit code.
            NetworkError: If the transport fails.
            BufferExceededError: If the line outgrows the buffer cap.
        """
        line = self._decode(await self._read_line())
        status = parse_status_line(line)
        logger.debug("< %d %s", status.code, status.message)
        return status

    async def read_multiline_entry(self) -> str | None:
        """
        Read one line of a multi-line response.

        Returns:
            The line with any dot-stuffing removed, or None when the
            terminating ``.`` line was read.

        Raises:
            NetworkError: If the transport fails.
            BufferExceededError: If the line outgrows the buffer cap.
        """
        line = self._decode(await self._read_line())
        if line == ProtocolConstants.MULTILINE_TERMINATOR:
            return None
        if line.startswith("."):
            return line[1:]
        return line

    async def read_multiline(self) -> list[str]:
        """
        Read a complete multi-line response.

        Returns:
            All lines up to (not including) the terminator.
        """
        lines: list[str] = []
        while True:
            line = await self.read_multiline_entry()
            if line is None:
                return lines
            lines.append(line)

    async def read_block(self) -> bytes:
        """
        Read a raw data block.

        Collects bytes until ``CRLF.CRLF`` and returns everything before
        the marker. Dot-stuffing is left intact. After each transport read
        only the tail that could hold a split marker is searched again.

        Returns:
            Block content without the terminating marker.

        Raises:
            NetworkError: If the transport fails.
            BufferExceededError: If the block outgrows the buffer cap.
        """
        scanned = 0
        while True:
            if self._buffer.startswith(_EMPTY_BLOCK, self._cursor):
                self._cursor += len(_EMPTY_BLOCK)
                return b""

            end = self._buffer.find(_BLOCK_TERMINATOR, self._cursor + scanned)
            if end >= 0:
                block = bytes(self._buffer[self._cursor : end])
                self._cursor = end + len(_BLOCK_TERMINATOR)
                logger.debug("< block of %d bytes", len(block))
                return block

            scanned = max(0, self.buffered - (len(_BLOCK_TERMINATOR) - 1))
            await self._fill()

    # ===== Command helpers =====

    async def send_command(self, line: str) -> StatusResponse:
        """
        Write a command and read its status line.

        Args:
            line: Command without terminator.

        Returns:
            The server's StatusResponse.
        """
        await self.write_command(line)
        return await self.read_status_line()

    async def send_command_expect(self, line: str, expected_code: int) -> StatusResponse:
        """
        Write a command and require a specific status code.

        Raises:
            ServerError: If the returned code differs from expected_code.
        """
        status = await self.send_command(line)
        self._check_status(line, status, expected_code)
        return status

    async def send_block_command(self, line: str, expected_code: int = -1) -> bytes:
        """
        Write a command, check its status and read the data block.

        Args:
            line: Command without terminator, e.g. ``"BODY <id@host>"``.
            expected_code: Required status code, or -1 to accept any.

        Returns:
            Raw block content.

        Raises:
            ServerError: If expected_code is set and does not match.
        """
        status = await self.send_command(line)
        if expected_code != -1:
            self._check_status(line, status, expected_code)
        return await self.read_block()

    async def send_multiline_command(self, line: str, expected_code: int) -> list[str]:
        """
        Write a command, check its status and read the multi-line reply.

        Raises:
            ServerError: If the returned code differs from expected_code.
        """
        await self.send_command_expect(line, expected_code)
        return await self.read_multiline()

    # ===== Throughput =====

    def download_speed(self) -> int:
        """Incoming bytes per second."""
        return self._meter.download_speed()

    def upload_speed(self) -> int:
        """Outgoing bytes per second."""
        return self._meter.upload_speed()

    # ===== Internals =====

    def _check_status(self, line: str, status: StatusResponse, expected_code: int) -> None:
        if status.code != expected_code:
            command = _mask_command(line).split(" ", 1)[0]
            raise ServerError(
                f"Unexpected reply to {command}",
                code=status.code,
                expected=expected_code,
                reply=status.message,
            )

    async def _read_line(self) -> bytes:
        scanned = 0
        while True:
            end = self._buffer.find(_CRLF, self._cursor + scanned)
            if end >= 0:
                line = bytes(self._buffer[self._cursor : end])
                self._cursor = end + len(_CRLF)
                return line

            scanned = max(0, self.buffered - (len(_CRLF) - 1))
            await self._fill()

    async def _fill(self) -> None:
        """Compact consumed bytes away, then append one transport read."""
        if self._cursor:
            del self._buffer[: self._cursor]
            self._cursor = 0

        pending = len(self._buffer)
        if pending >= self._max_buffer_size:
            logger.error("Buffer limit of %d bytes exceeded", self._max_buffer_size)
            await self._abort()
            raise BufferExceededError(self._max_buffer_size, pending)

        try:
            data = await self._transport.read_some(
                min(self._read_size, self._max_buffer_size - pending)
            )
        except NetworkError:
            logger.error("Read from %s failed", self._transport.name)
            await self._abort()
            raise

        self._meter.log_io(received=len(data))
        self._buffer.extend(data)

    async def _abort(self) -> None:
        self.reset()
        if self._transport.is_open:
            await self._transport.close()

    def _decode(self, line: bytes) -> str:
        return line.decode(ProtocolConstants.TEXT_ENCODING, errors="replace")

    def __repr__(self) -> str:
        return f"ProtocolEngine({self._transport.name!r}, buffered={self.buffered})"
