"""
Transport layer for NNTP communication.

This package provides transport implementations plus the throughput meter
that accounts every byte moved through them.

Available transports:
- TCPTransport: asyncio streams, plain (connect) or TLS (secure_connect)
- MockTransport: Mock transport for testing without a server

Example:
    >>> from nntplink.transport import TCPTransport
    >>> transport = TCPTransport()
    >>> await transport.secure_connect("news.example.com", "nntps")

Testing Example:
    >>> from nntplink.transport import MockTransport
    >>> mock = MockTransport(chunk_size=1)
    >>> mock.add_response(b"200 ready\\r\\n")
"""

from nntplink.transport.abc import AbstractTransport
from nntplink.transport.mock import MockTransport, ScriptedMockTransport
from nntplink.transport.tcp import TCPTransport
from nntplink.transport.throughput import ThroughputMeter

__all__ = [
    "AbstractTransport",
    "TCPTransport",
    "MockTransport",
    "ScriptedMockTransport",
    "ThroughputMeter",
]
