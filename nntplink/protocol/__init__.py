"""
Protocol layer for NNTP communication.

This module contains the low-level protocol handling:
- Status codes and protocol constants
- The buffered protocol engine (status lines, multi-line responses,
  raw data blocks, command helpers)
"""

from nntplink.protocol.constants import (
    SERVICE_PORTS,
    ProtocolConstants,
    StatusCode,
    resolve_service,
)
from nntplink.protocol.engine import ProtocolEngine, StatusResponse, parse_status_line

__all__ = [
    # Constants
    "StatusCode",
    "ProtocolConstants",
    "SERVICE_PORTS",
    "resolve_service",
    # Engine
    "ProtocolEngine",
    "StatusResponse",
    "parse_status_line",
]
