"""
Parsers for textual NNTP replies.

- GROUP reply text: ``count low high [name]``
- STAT reply text: ``number <message-id>``
- HEAD multi-line response: ``Name: value`` lines with folded continuations
"""

from __future__ import annotations

from nntplink.exceptions import ProtocolError
from nntplink.models.records import GroupInfo


def parse_group_reply(name: str, text: str) -> GroupInfo:
    """
    Parse the text of a 211 reply into watermarks.

    Args:
        name: Group name the command was issued for.
        text: Reply text after the status code.

    Returns:
        GroupInfo with count, low and high watermark.

    Raises:
        ProtocolError: If any of the three numbers is missing or not numeric.

    Example:
        >>> parse_group_reply("alt.test", "3 1 3 alt.test")
        GroupInfo(name='alt.test', count=3, low=1, high=3)
    """
    tokens = text.split()
    if len(tokens) < 3:
        raise ProtocolError("GROUP reply is missing watermark fields", line=text)

    try:
        count, low, high = (int(token) for token in tokens[:3])
    except ValueError as e:
        raise ProtocolError("GROUP reply has non-numeric watermark fields", line=text) from e

    if min(count, low, high) < 0:
        raise ProtocolError("GROUP reply has negative watermark fields", line=text)

    return GroupInfo(name=name, count=count, low=low, high=high)


def parse_stat_reply(text: str) -> tuple[int, str]:
    """
    Parse the text of a 223 reply.

    Args:
        text: Reply text after the status code, e.g. ``"42 <id@host>"``.

    Returns:
        Tuple of (article number, message id including angle brackets).
        The number is 0 if the server did not send a numeric one.

    Raises:
        ProtocolError: If no message id is present.
    """
    start = text.find("<")
    if start < 0:
        raise ProtocolError("STAT reply carries no message id", line=text)

    end = text.find(">", start)
    message_id = text[start:] if end < 0 else text[start : end + 1]

    tokens = text[:start].split()
    number = int(tokens[0]) if tokens and tokens[0].isdigit() else 0
    return number, message_id


def normalize_message_id(message_id: str) -> str:
    """Wrap a message id in angle brackets unless it already has them."""
    message_id = message_id.strip()
    if not message_id:
        raise ValueError("Empty message id")
    if message_id.startswith("<"):
        return message_id
    return f"<{message_id}>"


def parse_header_lines(lines: list[str]) -> dict[str, str]:
    """
    Turn the lines of a HEAD response into a header mapping.

    Continuation lines (starting with a space or tab) are folded into the
    previous header. When a header occurs more than once, the first value
    wins.

    Args:
        lines: Lines as returned by the multi-line reader.

    Returns:
        Mapping of header name to value, in order of appearance.

    Raises:
        ProtocolError: If a line is neither a header nor a continuation.
    """
    headers: dict[str, str] = {}
    current: str | None = None
    seen_header = False

    for line in lines:
        if not line:
            continue

        if line[0] in " \t":
            if not seen_header:
                raise ProtocolError("Continuation line before any header", line=line)
            if current is not None:
                headers[current] = f"{headers[current]} {line.strip()}"
            continue

        name, separator, value = line.partition(":")
        name = name.strip()
        if not separator or not name:
            raise ProtocolError("Header line has no name/value separator", line=line)

        seen_header = True
        if name in headers:
            # Keep the first occurrence; ignore folds of the duplicate.
            current = None
            continue

        headers[name] = value.strip()
        current = name

    return headers
