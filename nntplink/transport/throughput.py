"""
Sliding-window throughput meter.

Byte counts are collected into 100ms slices. The last 30 closed slices are
kept per direction, so the reported rate covers roughly the last 3 seconds.
Slices are closed lazily whenever the meter is touched; an idle connection
therefore decays towards zero instead of reporting its last burst forever.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Callable

from nntplink.protocol.constants import ProtocolConstants


class ThroughputMeter:
    """
    Bytes-per-second meter for one connection.

    Not thread-safe; owned by a single protocol engine.

    Example:
        >>> meter = ThroughputMeter()
        >>> meter.log_io(received=4096, sent=0)
        >>> meter.download_speed()  # 0 until the first slice closes
        0
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        slots: int = ProtocolConstants.THROUGHPUT_SLOTS,
        slot_seconds: float = ProtocolConstants.THROUGHPUT_SLOT_SECONDS,
    ) -> None:
        """
        Initialize the meter.

        Args:
            clock: Monotonic time source in seconds (injectable for tests).
            slots: Number of closed slices kept per direction.
            slot_seconds: Width of one slice.
        """
        if slots < 1:
            raise ValueError(f"slots must be positive, got {slots}")
        if slot_seconds <= 0:
            raise ValueError(f"slot_seconds must be positive, got {slot_seconds}")

        self._clock = clock
        self._slots = slots
        self._slot_seconds = slot_seconds
        self._incoming: deque[int] = deque()
        self._outgoing: deque[int] = deque()
        self._inc_total = 0
        self._out_total = 0
        self._slice_inc = 0
        self._slice_out = 0
        self._slice_end = 0.0
        self.reset()

    @property
    def slot_count(self) -> int:
        """Number of closed slices currently held (1..slots)."""
        return len(self._incoming)

    def reset(self) -> None:
        """Forget all history; start over with a single empty slice."""
        self._incoming.clear()
        self._outgoing.clear()
        self._incoming.append(0)
        self._outgoing.append(0)
        self._inc_total = 0
        self._out_total = 0
        self._slice_inc = 0
        self._slice_out = 0
        self._slice_end = self._clock() + self._slot_seconds

    def log_io(self, received: int = 0, sent: int = 0) -> None:
        """
        Account transferred bytes to the current slice.

        Args:
            received: Bytes read from the transport.
            sent: Bytes written to the transport.
        """
        self._update_slices()
        self._slice_inc += received
        self._slice_out += sent

    def download_speed(self) -> int:
        """Incoming bytes per second over the window."""
        self._update_slices()
        return round(self._inc_total / self._slot_seconds) // len(self._incoming)

    def upload_speed(self) -> int:
        """Outgoing bytes per second over the window."""
        self._update_slices()
        return round(self._out_total / self._slot_seconds) // len(self._outgoing)

    def _update_slices(self) -> None:
        now = self._clock()
        if now < self._slice_end:
            return

        elapsed = int((now - self._slice_end) / self._slot_seconds) + 1
        if elapsed > self._slots:
            # The whole window went idle; skip straight to a zero-filled window.
            self._incoming = deque([0] * self._slots)
            self._outgoing = deque([0] * self._slots)
            self._inc_total = 0
            self._out_total = 0
            self._slice_inc = 0
            self._slice_out = 0
            self._slice_end += elapsed * self._slot_seconds
            return

        while now >= self._slice_end:
            self._push(self._slice_inc, self._slice_out)
            self._slice_inc = 0
            self._slice_out = 0
            self._slice_end += self._slot_seconds

    def _push(self, inc: int, out: int) -> None:
        self._inc_total += inc
        self._out_total += out
        self._incoming.append(inc)
        self._outgoing.append(out)

        if len(self._incoming) > self._slots:
            self._inc_total -= self._incoming.popleft()
            self._out_total -= self._outgoing.popleft()

    def __repr__(self) -> str:
        return (
            f"ThroughputMeter(down={self.download_speed()}B/s, "
            f"up={self.upload_speed()}B/s, slots={self.slot_count})"
        )
