"""Tests for Group article lookup and Article caching."""

import pytest

from nntplink import NNTPClient
from nntplink.exceptions import DecodeError, ProtocolError, ServerError
from nntplink.transport.mock import MockTransport

GREETING = b"200 news.example.com ready\r\n"

YENC_BODY = b"=ybegin line=128 size=5 name=a.bin\r\nAB=mDE\r\n=yend size=5\r\n.\r\n"


@pytest.fixture
def mock_transport():
    """Create a MockTransport with a greeting queued."""
    transport = MockTransport()
    transport.add_response(GREETING)
    return transport


async def open_group(transport, reply=b"211 3 1 3 alt.test\r\n", name="alt.test"):
    """Connect a client and select a group."""
    client = NNTPClient(transport)
    transport.add_response(reply)
    await client.connect("news.example.com")
    group = await client.open_group(name)
    transport.clear_written()
    return client, group


class TestFetchByNumber:
    """Tests for STAT by article number."""

    @pytest.mark.asyncio
    async def test_article_found(self, mock_transport):
        """Test a 223 reply yields an article handle."""
        _, group = await open_group(mock_transport)
        mock_transport.add_response(b"223 2 <part2@poster> article exists\r\n")

        article = await group.fetch_article(2)

        assert article.number == 2
        assert article.message_id == "<part2@poster>"
        assert article.group is group
        assert mock_transport.written_lines == ["STAT 2"]

    @pytest.mark.asyncio
    async def test_requested_number_is_kept(self, mock_transport):
        """Test the article number comes from the request, not the reply."""
        reply = b"211 100 1 100 alt.test\r\n"
        _, group = await open_group(mock_transport, reply=reply)
        mock_transport.add_response(b"223 0 <id@host>\r\n")

        article = await group.fetch_article(42)

        assert article.number == 42
        assert article.message_id == "<id@host>"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("number", [0, 4, -1])
    async def test_outside_watermarks(self, mock_transport, number):
        """Test numbers outside low..high return None without I/O."""
        _, group = await open_group(mock_transport)

        assert await group.fetch_article(number) is None
        assert mock_transport.written_data == []

    @pytest.mark.asyncio
    async def test_article_missing(self, mock_transport):
        """Test a 423 reply yields None."""
        _, group = await open_group(mock_transport)
        mock_transport.add_response(b"423 no such article number\r\n")

        assert await group.fetch_article(3) is None

    @pytest.mark.asyncio
    async def test_reply_without_message_id(self, mock_transport):
        """Test 223 must carry a message id."""
        _, group = await open_group(mock_transport)
        mock_transport.add_response(b"223 2\r\n")

        with pytest.raises(ProtocolError):
            await group.fetch_article(2)

    @pytest.mark.asyncio
    async def test_reselects_group(self, mock_transport):
        """Test the group is reselected when another one is current."""
        client, first = await open_group(mock_transport, name="alt.one")
        mock_transport.add_responses(
            b"211 9 1 9 alt.two\r\n",
            b"211 3 1 3 alt.one\r\n",
            b"223 2 <x@y>\r\n",
        )
        await client.open_group("alt.two")

        article = await first.fetch_article(2)

        assert article is not None
        assert mock_transport.written_lines == ["GROUP alt.two", "GROUP alt.one", "STAT 2"]
        assert client.current_group is first


class TestFetchById:
    """Tests for STAT by message id."""

    @pytest.mark.asyncio
    async def test_bare_id_is_wrapped(self, mock_transport):
        """Test angle brackets are added and the number parsed."""
        _, group = await open_group(mock_transport)
        mock_transport.add_response(b"223 7 <part1@poster>\r\n")

        article = await group.fetch_article("part1@poster")

        assert mock_transport.written_lines == ["STAT <part1@poster>"]
        assert article.number == 7
        assert article.message_id == "<part1@poster>"

    @pytest.mark.asyncio
    async def test_non_numeric_number(self, mock_transport):
        """Test servers that answer without an article number."""
        _, group = await open_group(mock_transport)
        mock_transport.add_response(b"223 - <part1@poster>\r\n")

        article = await group.fetch_article("<part1@poster>")

        assert article.number == 0

    @pytest.mark.asyncio
    async def test_unknown_id(self, mock_transport):
        """Test a 430 reply yields None."""
        _, group = await open_group(mock_transport)
        mock_transport.add_response(b"430 no such article\r\n")

        assert await group.fetch_article("gone@poster") is None


class TestArticle:
    """Tests for Article content access."""

    async def fetch(self, transport):
        _, group = await open_group(transport)
        transport.add_response(b"223 1 <a@b>\r\n")
        article = await group.fetch_article(1)
        transport.clear_written()
        return article

    @pytest.mark.asyncio
    async def test_headers(self, mock_transport):
        """Test HEAD lines are parsed and unfolded."""
        article = await self.fetch(mock_transport)
        mock_transport.add_response(
            b"221 1 <a@b>\r\n"
            b"From: poster@example.com\r\n"
            b"Subject: holiday [1/3] - \"a.bin\"\r\n"
            b"\tyEnc (1/1)\r\n"
            b"..Dotted: value\r\n"
            b".\r\n"
        )

        headers = await article.headers()

        assert headers["From"] == "poster@example.com"
        assert headers["Subject"] == 'holiday [1/3] - "a.bin" yEnc (1/1)'
        assert headers[".Dotted"] == "value"
        assert mock_transport.written_lines == ["HEAD <a@b>"]

    @pytest.mark.asyncio
    async def test_headers_cached(self, mock_transport):
        """Test HEAD is sent only once."""
        article = await self.fetch(mock_transport)
        mock_transport.add_response(b"221 1 <a@b>\r\nSubject: x\r\n.\r\n")

        await article.headers()
        assert await article.header("SUBJECT") == "x"
        assert await article.header("subject") == "x"
        assert await article.header("X-Missing") is None
        assert mock_transport.written_lines == ["HEAD <a@b>"]

    @pytest.mark.asyncio
    async def test_headers_rejected(self, mock_transport):
        """Test a non-221 reply raises ServerError."""
        article = await self.fetch(mock_transport)
        mock_transport.add_response(b"430 no such article\r\n")

        with pytest.raises(ServerError):
            await article.headers()

    @pytest.mark.asyncio
    async def test_body(self, mock_transport):
        """Test BODY returns the raw block and caches it."""
        article = await self.fetch(mock_transport)
        mock_transport.add_response(b"222 1 <a@b>\r\nline one\r\n..dotted\r\n.\r\n")

        assert not article.is_loaded
        assert await article.load_content() == b"line one\r\n..dotted"
        assert await article.body() == b"line one\r\n..dotted"
        assert article.is_loaded
        assert mock_transport.written_lines == ["BODY <a@b>"]

    @pytest.mark.asyncio
    async def test_body_rejected(self, mock_transport):
        """Test a missing body raises ServerError and keeps the connection."""
        article = await self.fetch(mock_transport)
        mock_transport.add_response(b"430 no such article\r\n")

        with pytest.raises(ServerError) as exc_info:
            await article.body()
        assert exc_info.value.expected == 222
        assert article.group.client.is_connected

    @pytest.mark.asyncio
    async def test_decode(self, mock_transport):
        """Test the body is fetched and yEnc-decoded once."""
        article = await self.fetch(mock_transport)
        mock_transport.add_response(b"222 1 <a@b>\r\n" + YENC_BODY)

        decoded = await article.decode()

        assert decoded.filename == "a.bin"
        assert decoded.decoded_bytes == bytes([23, 24, 3, 26, 27])
        assert await article.decode() is decoded
        assert mock_transport.written_lines == ["BODY <a@b>"]

    @pytest.mark.asyncio
    async def test_decode_error(self, mock_transport):
        """Test a non-yEnc body raises DecodeError."""
        article = await self.fetch(mock_transport)
        mock_transport.add_response(b"222 1 <a@b>\r\nplain text\r\n.\r\n")

        with pytest.raises(DecodeError):
            await article.decode()

    @pytest.mark.asyncio
    async def test_content_reselects_group(self, mock_transport):
        """Test BODY is preceded by GROUP when another group was selected."""
        article = await self.fetch(mock_transport)
        client = article.group.client
        mock_transport.add_responses(
            b"211 9 1 9 alt.other\r\n",
            b"211 3 1 3 alt.test\r\n",
            b"222 1 <a@b>\r\nx\r\n.\r\n",
        )
        await client.open_group("alt.other")

        await article.body()

        assert mock_transport.written_lines == ["GROUP alt.other", "GROUP alt.test", "BODY <a@b>"]

    def test_repr(self):
        """Test string representations."""
        from nntplink.article import Article
        from nntplink.group import Group
        from nntplink.models.records import GroupInfo

        client = NNTPClient(MockTransport())
        group = Group(client, GroupInfo(name="alt.test", count=3, low=1, high=3))
        assert repr(group) == "Group(name='alt.test', low=1, high=3, count=3)"
        assert repr(Article(client, group, 2, "<a@b>")) == "Article(number=2, message_id='<a@b>')"

    def test_accessors(self):
        """Test group and article accessors expose the reply fields."""
        from nntplink.article import Article
        from nntplink.group import Group
        from nntplink.models.records import GroupInfo

        client = NNTPClient(MockTransport())
        info = GroupInfo(name="alt.test", count=3, low=1, high=3)
        group = Group(client, info)
        article = Article(client, group, 2, "<a@b>")

        assert group.client is client
        assert group.info is info
        assert (group.name, group.count, group.low, group.high) == ("alt.test", 3, 1, 3)
        assert (article.group, article.number, article.message_id) == (group, 2, "<a@b>")
        assert Group.high.__doc__ and Article.message_id.__doc__
