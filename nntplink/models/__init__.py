"""
Data models for NNTP records.

This module contains Pydantic models representing:

- Newsgroup watermark metadata (GroupInfo)
- Decoded yEnc units (DecodedArticle)
"""

from nntplink.models.records import DecodedArticle, GroupInfo

__all__ = [
    "GroupInfo",
    "DecodedArticle",
]
