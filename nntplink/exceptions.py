"""
Exception hierarchy for nntplink.

All exceptions inherit from NNTPError. The split matters to callers because
it tells them whether the connection survived the failure:

1. NetworkError means the transport is gone and must be re-established
2. ServerError means the server answered, just not with the expected code
3. ProtocolError means the server answered with text we cannot interpret
4. DecodeError is raised by the yEnc decoder and never touches the connection
"""

from __future__ import annotations


class NNTPError(Exception):
    """
    Base exception for all nntplink errors.

    Catch this to handle every library-specific failure with one clause.
    """

    pass


class NetworkError(NNTPError):
    """
    Transport-level failure.

    Raised when a read or write on the transport fails, the peer closes the
    connection, or I/O is attempted on a transport that is not open. The
    transport is always closed by the time this propagates.
    """

    def __init__(self, message: str = "Network failure", *, host: str | None = None) -> None:
        super().__init__(message)
        self.host = host

    def __str__(self) -> str:
        base = super().__str__()
        if self.host:
            return f"{base} (host={self.host})"
        return base


class ServerError(NNTPError):
    """
    Unexpected status code from the server.

    The connection remains usable after this error.
    """

    def __init__(
        self,
        message: str = "Unexpected reply from server",
        *,
        code: int | None = None,
        expected: int | None = None,
        reply: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.expected = expected
        self.reply = reply

    def __str__(self) -> str:
        base = super().__str__()
        if self.code is not None and self.expected is not None:
            return f"{base} (expected {self.expected}, got {self.code})"
        if self.code is not None:
            return f"{base} (got {self.code})"
        return base


class ProtocolError(NNTPError):
    """
    Malformed response text.

    Raised when:
    - A status line does not start with a 3-digit code
    - A GROUP reply is missing its watermark tokens
    - A header line has no name/value separator
    """

    def __init__(self, message: str, *, line: str | None = None) -> None:
        super().__init__(message)
        self.line = line

    def __str__(self) -> str:
        base = super().__str__()
        if self.line:
            display = self.line[:60] + "..." if len(self.line) > 60 else self.line
            return f"{base} line={display!r}"
        return base


class BufferExceededError(ProtocolError):
    """
    A single protocol unit does not fit in the receive buffer.

    The buffered data is discarded and the connection closed, since the
    stream position can no longer be trusted.
    """

    def __init__(self, limit: int, size: int) -> None:
        super().__init__(f"Response exceeds buffer limit of {limit} bytes")
        self.limit = limit
        self.size = size

    def __str__(self) -> str:
        return f"{super().__str__()} ({self.size} bytes buffered)"


class DecodeError(NNTPError):
    """
    Malformed or inconsistent yEnc data.

    Raised for missing header fields, missing part boundaries and byte
    count mismatches. No partial output is ever returned alongside it.
    """

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        super().__init__(message)
        self.offset = offset

    def __str__(self) -> str:
        base = super().__str__()
        if self.offset is not None:
            return f"{base} (offset={self.offset})"
        return base
