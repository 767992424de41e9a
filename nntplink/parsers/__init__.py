"""
Parsers for NNTP reply text and yEnc article bodies.

Example:
    >>> from nntplink.parsers import decode_yenc
    >>> article = decode_yenc(body)
    >>> article.filename
    'file.bin'
"""

from nntplink.parsers.headers import (
    normalize_message_id,
    parse_group_reply,
    parse_header_lines,
    parse_stat_reply,
)
from nntplink.parsers.yenc import DEFAULT_YENC_DECODER, YencDecoder, YencHeader, decode_yenc

__all__ = [
    # Reply text
    "parse_group_reply",
    "parse_stat_reply",
    "parse_header_lines",
    "normalize_message_id",
    # yEnc
    "YencDecoder",
    "YencHeader",
    "decode_yenc",
    "DEFAULT_YENC_DECODER",
]
