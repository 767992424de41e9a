"""
Article handle with lazily fetched headers and body.

Each piece is fetched at most once: repeated calls return the cached
result without touching the connection.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from nntplink.parsers.headers import parse_header_lines
from nntplink.parsers.yenc import DEFAULT_YENC_DECODER
from nntplink.protocol.constants import StatusCode

if TYPE_CHECKING:
    from nntplink.client import NNTPClient
    from nntplink.group import Group
    from nntplink.models.records import DecodedArticle


class Article:
    """
    One article located with STAT.

    Attributes:
        group: Group the article was looked up in.
        number: Article number (0 when the server did not report one).
        message_id: Message id including angle brackets.
    """

    def __init__(self, client: NNTPClient, group: Group, number: int, message_id: str) -> None:
        self._client = client
        self._group = group
        self._number = number
        self._message_id = message_id
        self._headers: dict[str, str] | None = None
        self._body: bytes | None = None
        self._decoded: DecodedArticle | None = None

    @property
    def group(self) -> Group:
        """Get the group the article was looked up in."""
        return self._group

    @property
    def number(self) -> int:
        """Get the article number (0 if the server gave none)."""
        return self._number

    @property
    def message_id(self) -> str:
        """Get the message id, angle brackets included."""
        return self._message_id

    @property
    def is_loaded(self) -> bool:
        """Check if the body has been fetched."""
        return self._body is not None

    async def headers(self) -> dict[str, str]:
        """
        Fetch the article headers with HEAD.

        Returns:
            Mapping of header name to (unfolded) value.

        Raises:
            ServerError: If the server does not answer 221.
            ProtocolError: If a header line is malformed.
        """
        if self._headers is None:
            await self._group.activate()
            lines = await self._client.send_multiline_command(
                f"HEAD {self._message_id}", StatusCode.HEAD_FOLLOWS
            )
            self._headers = parse_header_lines(lines)
        return self._headers

    async def header(self, name: str) -> str | None:
        """Look up one header, ignoring case. None if absent."""
        wanted = name.lower()
        for key, value in (await self.headers()).items():
            if key.lower() == wanted:
                return value
        return None

    async def load_content(self) -> bytes:
        """
        Fetch the raw body with BODY.

        The body is returned exactly as sent, with dot-stuffing intact; the
        yEnc decoder undoes it.

        Raises:
            ServerError: If the server does not answer 222.
        """
        if self._body is None:
            await self._group.activate()
            self._body = await self._client.send_block_command(
                f"BODY {self._message_id}", StatusCode.BODY_FOLLOWS
            )
        return self._body

    async def body(self) -> bytes:
        """Alias for load_content()."""
        return await self.load_content()

    async def decode(self) -> DecodedArticle:
        """
        Fetch the body if needed and yEnc-decode it.

        Raises:
            DecodeError: If the body is not a valid yEnc unit.
        """
        if self._decoded is None:
            self._decoded = DEFAULT_YENC_DECODER.decode(await self.load_content())
        return self._decoded

    def __repr__(self) -> str:
        return f"Article(number={self._number}, message_id={self._message_id!r})"
