"""
Pydantic models for NNTP records.

This module defines the immutable value objects produced by the protocol
and decoder layers.

Design principles:
- All models are frozen (immutable) once constructed
- Field constraints mirror what the wire format allows
- A decoded article owns its bytes; nothing recomputes them lazily
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GroupInfo(BaseModel):
    """
    Newsgroup watermarks as reported by a GROUP command.

    The server reports an estimated article count plus the lowest and
    highest article numbers currently available.

    Example:
        >>> info = GroupInfo(name="alt.binaries.test", count=3, low=1, high=3)
        >>> info.contains(2)
        True
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Newsgroup name")
    count: int = Field(ge=0, description="Estimated number of articles")
    low: int = Field(ge=0, description="Low watermark")
    high: int = Field(ge=0, description="High watermark")

    @property
    def is_empty(self) -> bool:
        """Check if the group reports no articles."""
        return self.count == 0 or self.high < self.low

    def contains(self, number: int) -> bool:
        """Check if an article number lies within the watermarks."""
        return self.low <= number <= self.high

    def __str__(self) -> str:
        return f"{self.name} ({self.low}-{self.high}, ~{self.count} articles)"


class DecodedArticle(BaseModel):
    """
    A yEnc unit decoded from one article body.

    Part fields are all zero for a single-part file. ``begin`` and ``end``
    are 1-based inclusive offsets into the full file.

    Example:
        >>> article = decode_yenc(block)
        >>> if article.is_multipart:
        ...     output.seek(article.part_begin - 1)
        >>> output.write(article.decoded_bytes)
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Original filename")
    size: int = Field(gt=0, description="Total size of the full file")
    part: int = Field(default=0, ge=0, description="Part number, 0 if not multipart")
    parts: int = Field(default=0, ge=0, description="Total number of parts, 0 if unknown/single")
    part_size: int = Field(default=0, ge=0, description="Size of this part")
    begin: int = Field(default=0, ge=0, description="First byte of this part in the file")
    end: int = Field(default=0, ge=0, description="Last byte of this part in the file")
    data: bytes = Field(repr=False, description="Decoded bytes")

    @model_validator(mode="after")
    def _check_lengths(self) -> DecodedArticle:
        expected = self.part_size if self.parts > 0 else self.size
        if len(self.data) != expected:
            raise ValueError(f"decoded length {len(self.data)} does not match expected {expected}")
        return self

    @property
    def is_multipart(self) -> bool:
        """Check if this is one part of a multipart binary."""
        return self.parts > 0

    @property
    def part_number(self) -> int:
        """Part number (0 when not multipart)."""
        return self.part

    @property
    def part_begin(self) -> int:
        """1-based offset of this part's first byte in the file."""
        return self.begin

    @property
    def decoded_bytes(self) -> bytes:
        """The decoded content."""
        return self.data

    @property
    def filename(self) -> str:
        """Original filename from the yEnc header."""
        return self.name

    def __repr__(self) -> str:
        if self.is_multipart:
            return (
                f"DecodedArticle({self.name!r}, part {self.part}/{self.parts}, "
                f"bytes {self.begin}-{self.end} of {self.size})"
            )
        return f"DecodedArticle({self.name!r}, {self.size} bytes)"
