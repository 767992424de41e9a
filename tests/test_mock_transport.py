"""Tests for MockTransport."""

import pytest

from nntplink.exceptions import NetworkError
from nntplink.transport.mock import MockTransport, ScriptedMockTransport


class TestMockTransport:
    """Tests for MockTransport class."""

    @pytest.fixture
    def transport(self):
        """Create a MockTransport instance."""
        return MockTransport()

    @pytest.mark.asyncio
    async def test_connect_close(self, transport):
        """Test opening and closing transport."""
        assert not transport.is_open
        assert await transport.connect("news.example.com") is True
        assert transport.is_open
        assert transport.connected_host == "news.example.com"
        assert transport.connected_service == "nntp"
        assert transport.secure is False
        await transport.close()
        assert not transport.is_open

    @pytest.mark.asyncio
    async def test_secure_connect(self, transport):
        """Test secure connect records TLS and default service."""
        assert await transport.secure_connect("news.example.com") is True
        assert transport.secure is True
        assert transport.connected_service == "nntps"

    @pytest.mark.asyncio
    async def test_double_connect_fails(self, transport):
        """Test that connecting twice returns False."""
        await transport.connect("a")
        assert await transport.connect("b") is False
        assert transport.connected_host == "a"

    @pytest.mark.asyncio
    async def test_refused_connection(self):
        """Test transport configured to refuse connections."""
        transport = MockTransport(accept_connections=False)
        assert await transport.connect("a") is False
        assert not transport.is_open

    @pytest.mark.asyncio
    async def test_write_records_data(self, transport):
        """Test that write records data."""
        await transport.connect("a")
        assert await transport.write_some(b"hello") == 5
        await transport.write_some(b"world")
        assert transport.written_data == [b"hello", b"world"]
        assert transport.last_written == b"world"

    @pytest.mark.asyncio
    async def test_written_lines(self, transport):
        """Test written data is split into CRLF lines."""
        await transport.connect("a")
        await transport.write_some(b"GROUP al")
        await transport.write_some(b"t.test\r\nQUIT\r\n")
        assert transport.written_lines == ["GROUP alt.test", "QUIT"]

    @pytest.mark.asyncio
    async def test_max_write_truncates(self):
        """Test partial writes accept at most max_write bytes."""
        transport = MockTransport(max_write=3)
        await transport.connect("a")
        assert await transport.write_some(b"abcdef") == 3
        assert transport.written_data == [b"abc"]

    @pytest.mark.asyncio
    async def test_write_when_closed_raises(self, transport):
        """Test that writing to closed transport raises."""
        with pytest.raises(NetworkError):
            await transport.write_some(b"test")

    @pytest.mark.asyncio
    async def test_read_when_closed_raises(self, transport):
        """Test that reading from closed transport raises."""
        transport.add_response(b"200 ready\r\n")
        with pytest.raises(NetworkError):
            await transport.read_some(100)

    @pytest.mark.asyncio
    async def test_read_respects_max_len(self, transport):
        """Test reading at most max_len bytes."""
        await transport.connect("a")
        transport.add_response(b"hello world")
        assert await transport.read_some(5) == b"hello"
        assert await transport.read_some(100) == b" world"

    @pytest.mark.asyncio
    async def test_chunk_size_fragments_reads(self):
        """Test chunk_size caps every read."""
        transport = MockTransport(chunk_size=2)
        await transport.connect("a")
        transport.add_response(b"abcde")
        assert await transport.read_some(100) == b"ab"
        assert await transport.read_some(100) == b"cd"
        assert await transport.read_some(100) == b"e"
        assert transport.read_calls == 3

    @pytest.mark.asyncio
    async def test_responses_delivered_in_order(self, transport):
        """Test adding multiple responses at once."""
        await transport.connect("a")
        transport.add_responses(b"one", b"two")
        assert await transport.read_some(100) == b"one"
        assert await transport.read_some(100) == b"two"

    @pytest.mark.asyncio
    async def test_read_no_data_raises_and_closes(self, transport):
        """Test that running out of data looks like a dropped connection."""
        await transport.connect("a")
        with pytest.raises(NetworkError):
            await transport.read_some(10)
        assert not transport.is_open

    @pytest.mark.asyncio
    async def test_fail_next_read(self, transport):
        """Test injected read failure."""
        await transport.connect("a")
        transport.add_response(b"data")
        transport.fail_next_read("reset")
        with pytest.raises(NetworkError, match="reset"):
            await transport.read_some(10)
        assert not transport.is_open

    @pytest.mark.asyncio
    async def test_fail_next_write(self, transport):
        """Test injected write failure."""
        await transport.connect("a")
        transport.fail_next_write()
        with pytest.raises(NetworkError, match="Broken pipe"):
            await transport.write_some(b"QUIT\r\n")
        assert not transport.is_open

    @pytest.mark.asyncio
    async def test_clear(self, transport):
        """Test clearing transport state."""
        await transport.connect("a")
        await transport.write_some(b"test")
        transport.add_response(b"data")
        transport.clear()
        assert transport.written_data == []
        with pytest.raises(NetworkError):
            await transport.read_some(10)

    @pytest.mark.asyncio
    async def test_response_callback(self, transport):
        """Test dynamic response callback."""
        await transport.connect("a")

        def reply(data: bytes) -> bytes | None:
            if data.startswith(b"DATE"):
                return b"111 20240101000000\r\n"
            return None

        transport.set_response_callback(reply)
        await transport.write_some(b"DATE\r\n")
        assert await transport.read_some(100) == b"111 20240101000000\r\n"

    @pytest.mark.asyncio
    async def test_context_manager(self):
        """Test async context manager closes the transport."""
        async with MockTransport() as transport:
            await transport.connect("a")
            assert transport.is_open
        assert not transport.is_open

    @pytest.mark.asyncio
    async def test_assert_written(self, transport):
        """Test assert_written helper."""
        await transport.connect("a")
        await transport.write_some(b"test")
        transport.assert_written(b"test")
        transport.assert_written(b"test", 0)
        with pytest.raises(AssertionError):
            transport.assert_written(b"wrong")

    @pytest.mark.asyncio
    async def test_assert_write_count(self, transport):
        """Test assert_write_count helper."""
        await transport.connect("a")
        await transport.write_some(b"a")
        await transport.write_some(b"b")
        transport.assert_write_count(2)
        with pytest.raises(AssertionError):
            transport.assert_write_count(3)


class TestScriptedMockTransport:
    """Tests for ScriptedMockTransport class."""

    @pytest.fixture
    def transport(self):
        """Create a ScriptedMockTransport instance."""
        return ScriptedMockTransport()

    @pytest.mark.asyncio
    async def test_scripted_responses(self, transport):
        """Test scripted request/response pairs."""
        await transport.connect("a")
        transport.expect(response=b"211 3 1 3 alt.test\r\n", request=b"GROUP alt.test\r\n")
        transport.expect(response=b"205 bye\r\n", request=b"QUIT\r\n")

        await transport.write_some(b"GROUP alt.test\r\n")
        assert await transport.read_some(100) == b"211 3 1 3 alt.test\r\n"

        await transport.write_some(b"QUIT\r\n")
        assert await transport.read_some(100) == b"205 bye\r\n"
        assert transport.script_complete

    @pytest.mark.asyncio
    async def test_scripted_any_request(self, transport):
        """Test scripted response for any request."""
        await transport.connect("a")
        transport.expect(response=b"500 what?\r\n")

        await transport.write_some(b"anything\r\n")
        assert await transport.read_some(100) == b"500 what?\r\n"

    @pytest.mark.asyncio
    async def test_script_mismatch(self, transport):
        """Test script mismatch raises AssertionError."""
        await transport.connect("a")
        transport.expect(response=b"205 bye\r\n", request=b"QUIT\r\n")

        with pytest.raises(AssertionError, match="Script mismatch"):
            await transport.write_some(b"HELP\r\n")

    @pytest.mark.asyncio
    async def test_reset_script(self, transport):
        """Test resetting script replays it from the start."""
        await transport.connect("a")
        transport.expect(response=b"205 bye\r\n")

        await transport.write_some(b"QUIT\r\n")
        assert transport.script_complete
        transport.reset_script()
        assert not transport.script_complete

    @pytest.mark.asyncio
    async def test_clear_script(self, transport):
        """Test clearing the script lets writes pass unchecked."""
        await transport.connect("a")
        transport.expect(response=b"205 bye\r\n", request=b"QUIT\r\n")
        transport.clear_script()

        await transport.write_some(b"HELP\r\n")
        assert transport.script_complete
