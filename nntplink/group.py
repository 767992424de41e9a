"""
Newsgroup descriptor.

A Group is handed out by NNTPClient.open_group() and stays bound to the
client that created it. Article lookups re-select the group on the server
first when some other group was selected in between.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from nntplink.article import Article
from nntplink.parsers.headers import normalize_message_id, parse_stat_reply
from nntplink.protocol.constants import StatusCode

if TYPE_CHECKING:
    from nntplink.client import NNTPClient
    from nntplink.models.records import GroupInfo

logger = logging.getLogger(__name__)


class Group:
    """
    A newsgroup selected on a server.

    Attributes:
        info: Watermarks reported when the group was opened.
        name: Newsgroup name.
        count: Estimated article count.
        low: Lowest available article number.
        high: Highest available article number.
    """

    def __init__(self, client: NNTPClient, info: GroupInfo) -> None:
        self._client = client
        self._info = info

    @property
    def client(self) -> NNTPClient:
        """Get the client this group was opened on."""
        return self._client

    @property
    def info(self) -> GroupInfo:
        """Get the parsed GROUP reply."""
        return self._info

    @property
    def name(self) -> str:
        """Get the newsgroup name."""
        return self._info.name

    @property
    def count(self) -> int:
        """Get the estimated article count."""
        return self._info.count

    @property
    def low(self) -> int:
        """Get the low watermark."""
        return self._info.low

    @property
    def high(self) -> int:
        """Get the high watermark."""
        return self._info.high

    async def activate(self) -> None:
        """Make this the group selected on the server."""
        await self._client.activate_group(self)

    async def fetch_article(self, key: int | str) -> Article | None:
        """
        Look up an article with STAT.

        Args:
            key: Article number within this group, or a message id (with
                or without angle brackets).

        Returns:
            Article handle, or None if the number lies outside the
            watermarks or the server does not have the article.

        Raises:
            ProtocolError: If a 223 reply carries no message id.
            ServerError: If the group can no longer be selected.
            NetworkError: If the connection fails.

        Example:
            >>> article = await group.fetch_article(group.high)
            >>> article = await group.fetch_article("part1of3@poster")
        """
        if isinstance(key, int):
            return await self._fetch_by_number(key)
        return await self._fetch_by_id(key)

    async def _fetch_by_number(self, number: int) -> Article | None:
        if not self._info.contains(number):
            logger.debug("Article %d outside %s", number, self._info)
            return None

        await self.activate()
        status = await self._client.send_command(f"STAT {number}")
        if status.code != StatusCode.ARTICLE_EXISTS:
            return None

        _, message_id = parse_stat_reply(status.message)
        return Article(self._client, self, number, message_id)

    async def _fetch_by_id(self, message_id: str) -> Article | None:
        message_id = normalize_message_id(message_id)

        await self.activate()
        status = await self._client.send_command(f"STAT {message_id}")
        if status.code != StatusCode.ARTICLE_EXISTS:
            return None

        number, _ = parse_stat_reply(status.message)
        return Article(self._client, self, number, message_id)

    def __repr__(self) -> str:
        return f"Group(name={self.name!r}, low={self.low}, high={self.high}, count={self.count})"
