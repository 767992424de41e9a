"""
yEnc decoding of article bodies.

A yEnc-encoded body looks like this on the wire (after the NNTP layer has
removed the terminating ``CRLF.CRLF``)::

    =ybegin part=2 total=3 line=128 size=1500 name=file.bin
    =ypart begin=501 end=1000
    <escaped payload lines>
    =yend size=500 part=2 pcrc32=...

Header Notes:
- ``=ybegin`` is found at the start of the block or right after a CRLF
- ``size`` and ``name`` are required; ``name`` runs to the end of the line
- ``part`` marks a multipart unit, which must be followed by ``=ypart``
- Some posters declare "part 1 of 1" covering the whole file; such units
  are treated as single-part

Payload Notes:
- CRLF line breaks are skipped
- A ``.`` directly after a line break is NNTP dot-stuffing and skipped
- ``=`` escapes the next byte: output = (byte + 150) mod 256
- Any other byte: output = (byte + 214) mod 256
- ``CRLF=yend `` ends the payload
- Length overflow is checked after each decoded line
- An ``=`` with no byte after it on the same line is a DecodeError rather
  than escaping the line break

The ``=yend`` trailer is not parsed: no size or CRC32 verification is done.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from nntplink.exceptions import DecodeError
from nntplink.models.records import DecodedArticle

_CRLF: Final[bytes] = b"\r\n"
_HEADER_MARKER: Final[bytes] = b"=ybegin "
_PART_MARKER: Final[bytes] = b"=ypart "
_END_MARKER: Final[bytes] = b"=yend "
_ESCAPE: Final[int] = 0x3D  # '='
_DOT: Final[int] = 0x2E  # '.'
_NAME_KEY: Final[bytes] = b" name="

# Translation tables for the two byte transforms
_PLAIN_TABLE: Final[bytes] = bytes((value + 214) % 256 for value in range(256))
_ESCAPED_TABLE: Final[bytes] = bytes((value + 150) % 256 for value in range(256))

_PARAM_PATTERNS: Final[dict[str, re.Pattern[bytes]]] = {
    key: re.compile(rb"\s" + key.encode("ascii") + rb"=(\d+)")
    for key in ("size", "part", "total", "begin", "end")
}


def _read_param(line: bytes, key: str) -> int:
    """Return the integer value of ``key=`` in the line, 0 if absent."""
    match = _PARAM_PATTERNS[key].search(line)
    if match is None:
        return 0
    return int(match.group(1))


def _decode_name(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


@dataclass(frozen=True)
class YencHeader:
    """
    Placement metadata parsed from ``=ybegin`` / ``=ypart``.

    Attributes:
        name: Original filename.
        size: Size of the complete file.
        part: Part number (0 = not multipart).
        parts: Total parts (0 = unknown or single-part).
        part_size: Bytes carried by this part.
        begin: 1-based offset of the first byte of this part.
        end: 1-based offset of the last byte of this part.
        payload_offset: Offset of the CRLF ending the last header line.
    """

    name: str
    size: int
    part: int = 0
    parts: int = 0
    part_size: int = 0
    begin: int = 0
    end: int = 0
    payload_offset: int = 0

    @property
    def is_multipart(self) -> bool:
        """Check if the header describes one part of a multipart file."""
        return self.parts > 0

    @property
    def expected_length(self) -> int:
        """Number of bytes the payload must decode to."""
        return self.part_size if self.is_multipart else self.size


class YencDecoder:
    """
    yEnc body decoder.

    Stateless; one instance can decode any number of blocks. All
    structural problems raise DecodeError and no partial output is
    returned.

    Example:
        >>> decoder = YencDecoder()
        >>> article = decoder.decode(body)
        >>> article.filename, len(article.decoded_bytes)
        ('file.bin', 1500)
    """

    def decode(self, block: bytes | bytearray | memoryview) -> DecodedArticle:
        """
        Decode a complete article body.

        Args:
            block: Raw body as returned by the protocol engine.

        Returns:
            Immutable DecodedArticle.

        Raises:
            DecodeError: If the header is missing or incomplete, the part
                header is missing, or the payload length is wrong.
        """
        data = bytes(block)
        header = self.parse_header(data)
        payload = self.decode_payload(data, header.payload_offset, header.expected_length)
        self.parse_footer(data)

        return DecodedArticle(
            name=header.name,
            size=header.size,
            part=header.part,
            parts=header.parts,
            part_size=header.part_size,
            begin=header.begin,
            end=header.end,
            data=payload,
        )

    def parse_header(self, block: bytes) -> YencHeader:
        """
        Parse the ``=ybegin`` line and, for multipart units, ``=ypart``.

        Args:
            block: Raw article body.

        Returns:
            YencHeader whose payload_offset points at the CRLF that ends
            the last header line.

        Raises:
            DecodeError: On a missing header or missing required fields.
        """
        if block.startswith(_HEADER_MARKER):
            line_begin = 0
        else:
            found = block.find(_CRLF + _HEADER_MARKER)
            if found < 0:
                raise DecodeError("yEnc header not found, is this really a yEnc-encoded article")
            line_begin = found + len(_CRLF)

        line_end = block.find(_CRLF, line_begin)
        if line_end < 0:
            raise DecodeError("yEnc header line not correctly closed", offset=line_begin)
        line = block[line_begin:line_end]

        size = _read_param(line, "size")
        if size == 0:
            raise DecodeError("Required parameter 'size' not found in yEnc header line", offset=line_begin)

        name_at = line.find(_NAME_KEY)
        if name_at < 0:
            raise DecodeError("Required parameter 'name' not found in yEnc header line", offset=line_begin)
        name = _decode_name(line[name_at + len(_NAME_KEY) :]).rstrip()
        if not name:
            raise DecodeError("Empty 'name' in yEnc header line", offset=line_begin)

        part = _read_param(line, "part")
        if part == 0:
            return YencHeader(name=name, size=size, payload_offset=line_end)

        return self._parse_part_header(block, line_end, name, size, part, _read_param(line, "total"))

    def _parse_part_header(
        self,
        block: bytes,
        previous_end: int,
        name: str,
        size: int,
        part: int,
        total: int,
    ) -> YencHeader:
        line_begin = previous_end + len(_CRLF)
        line_end = block.find(_CRLF, line_begin)
        if line_end < 0:
            raise DecodeError("yEnc part line not found", offset=line_begin)

        line = block[line_begin:line_end]
        if not line.startswith(_PART_MARKER):
            raise DecodeError("Required =ypart line not found", offset=line_begin)

        begin = _read_param(line, "begin")
        end = _read_param(line, "end")
        if begin == 0 or end == 0:
            raise DecodeError("Required parameter 'begin' or 'end' not found in =ypart line", offset=line_begin)
        if end < begin:
            raise DecodeError(f"Part end {end} lies before part begin {begin}", offset=line_begin)

        if total == 0:
            total = _read_param(line, "total")

        part_size = end - begin + 1

        # "part 1 of 1" covering the whole file is a single-part file
        if part_size == size:
            return YencHeader(name=name, size=size, payload_offset=line_end)

        if total == 0:
            total = (size - 1) // part_size + 1

        return YencHeader(
            name=name,
            size=size,
            part=part,
            parts=total,
            part_size=part_size,
            begin=begin,
            end=end,
            payload_offset=line_end,
        )

    def decode_payload(self, block: bytes, offset: int, expected: int) -> bytes:
        """
        Run the escape decode over the payload lines.

        Args:
            block: Raw article body.
            offset: Position of the CRLF that ends the header.
            expected: Exact number of bytes the payload must produce.

        Returns:
            Decoded bytes, exactly ``expected`` long.

        Raises:
            DecodeError: If the output outgrows ``expected`` (checked
                after each decoded line) or falls short of it when the
                payload ends.
        """
        output = bytearray()
        position = offset
        length = len(block)

        while position < length:
            if block.startswith(_CRLF, position):
                if block.startswith(_END_MARKER, position + len(_CRLF)):
                    break
                position += len(_CRLF)
                if position < length and block[position] == _DOT:
                    position += 1
                continue

            line_end = block.find(_CRLF, position)
            if line_end < 0:
                line_end = length

            self._decode_line(block, position, line_end, output)
            if len(output) > expected:
                raise DecodeError(
                    f"Too many characters in input buffer (expected {expected})",
                    offset=position,
                )
            position = line_end

        if len(output) != expected:
            raise DecodeError(
                f"Not enough characters in input buffer (expected {expected}, got {len(output)})",
                offset=position,
            )
        return bytes(output)

    def _decode_line(self, block: bytes, start: int, end: int, output: bytearray) -> None:
        position = start
        while True:
            escape = block.find(_ESCAPE, position, end)
            if escape < 0:
                output += block[position:end].translate(_PLAIN_TABLE)
                return

            output += block[position:escape].translate(_PLAIN_TABLE)
            if escape + 1 >= end:
                raise DecodeError("Escape character at end of line", offset=escape)
            output.append(_ESCAPED_TABLE[block[escape + 1]])
            position = escape + 2

    def parse_footer(self, block: bytes) -> None:
        """
        Accept the ``=yend`` trailer without inspecting it.

        The payload loop already stops at the trailer. Its size and CRC32
        fields are not verified.
        """
        return None


# Module-level convenience instance
DEFAULT_YENC_DECODER: YencDecoder = YencDecoder()
"""Default YencDecoder instance for convenience."""


def decode_yenc(block: bytes | bytearray | memoryview) -> DecodedArticle:
    """
    Decode a yEnc body using the default decoder.

    Args:
        block: Raw article body.

    Returns:
        DecodedArticle.
    """
    return DEFAULT_YENC_DECODER.decode(block)
