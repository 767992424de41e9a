"""
nntplink - async NNTP client library for binary Usenet downloads.

This library provides buffered NNTP protocol handling over asyncio
streams, newsgroup and article lookup, and yEnc decoding of article
bodies, with a rolling throughput meter on every connection.

Example:
    >>> from nntplink import ServerSettings, open_session
    >>>
    >>> async def main():
    ...     settings = ServerSettings(host="news.example.com", secure=True,
    ...                               username="reader", password="secret")
    ...     client = await open_session(settings)
    ...     async with client:
    ...         group = await client.open_group("alt.binaries.test")
    ...         article = await group.fetch_article(group.high)
    ...         decoded = await article.decode()
    ...         print(decoded.filename, len(decoded.decoded_bytes))
"""

from nntplink.article import Article
from nntplink.client import ClientState, NNTPClient, open_session
from nntplink.config import ServerSettings
from nntplink.exceptions import (
    BufferExceededError,
    DecodeError,
    NetworkError,
    NNTPError,
    ProtocolError,
    ServerError,
)
from nntplink.group import Group
from nntplink.models.records import DecodedArticle, GroupInfo
from nntplink.parsers.yenc import YencDecoder, decode_yenc
from nntplink.protocol.engine import ProtocolEngine, StatusResponse
from nntplink.transport import AbstractTransport, TCPTransport, ThroughputMeter

__version__ = "0.1.0"
__all__ = [
    # Client
    "NNTPClient",
    "ClientState",
    "open_session",
    "ServerSettings",
    "Group",
    "Article",
    # Protocol
    "ProtocolEngine",
    "StatusResponse",
    # Models
    "GroupInfo",
    "DecodedArticle",
    # yEnc
    "YencDecoder",
    "decode_yenc",
    # Exceptions
    "NNTPError",
    "NetworkError",
    "ServerError",
    "ProtocolError",
    "BufferExceededError",
    "DecodeError",
    # Transport
    "AbstractTransport",
    "TCPTransport",
    "ThroughputMeter",
    # Version
    "__version__",
]
