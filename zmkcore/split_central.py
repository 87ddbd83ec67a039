"""Central side of the split keyboard link: turns peripheral state into events."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from .events import EventManager, PositionStateChanged
from .split_service import POSITION_STATE_LEN, SERVICE_UUID

log = logging.getLogger(__name__)

_UUID128_LEN = 16


def _uptime_ms() -> int:
    return int(time.monotonic() * 1000)


class PositionStateTracker:
    """Remembers the peripheral's position bitmap and reports what changed."""

    def __init__(self) -> None:
        self.state = bytes(POSITION_STATE_LEN)

    def update(self, data: bytes) -> list[tuple[int, bool]]:
        """Take a new bitmap; returns ``(position, pressed)`` for each changed bit."""
        if len(data) < POSITION_STATE_LEN:
            raise ValueError(
                f"position state needs {POSITION_STATE_LEN} bytes, got {len(data)}"
            )
        new = bytes(data[:POSITION_STATE_LEN])
        changes = [
            (byte_index * 8 + bit, bool(now & (1 << bit)))
            for byte_index, (old, now) in enumerate(zip(self.state, new))
            for bit in range(8)
            if (old ^ now) & (1 << bit)
        ]
        self.state = new
        return changes


class SplitCentral:
    """Raises position events for key changes reported by the split peripheral."""

    def __init__(
        self, manager: EventManager, clock: Callable[[], int] = _uptime_ms
    ) -> None:
        self.manager = manager
        self.clock = clock
        self.tracker = PositionStateTracker()

    def notify(self, data: bytes | None) -> bool:
        """Handle a position state notification; returns False once unsubscribed."""
        if data is None:
            log.debug("[UNSUBSCRIBED]")
            return False
        log.debug("[NOTIFICATION] length %u", len(data))
        for position, pressed in self.tracker.update(data):
            log.debug("Trigger key position state change for %d", position)
            self.manager.raise_event(
                PositionStateChanged(position=position, state=pressed, timestamp=self.clock())
            )
        return True

    def advertisement_has_split_service(self, uuids: bytes) -> bool:
        """Whether a 128-bit UUID list advertisement payload names the split service.

        UUIDs are little-endian, as carried in advertising data. A payload
        whose length is not a multiple of 16 is malformed and never matches.
        """
        if len(uuids) % _UUID128_LEN:
            log.error("AD malformed")
            return False
        for start in range(0, len(uuids), _UUID128_LEN):
            chunk = bytes(uuids[start:start + _UUID128_LEN])
            if uuid.UUID(bytes=chunk[::-1]) == SERVICE_UUID:
                log.debug("Found the split service")
                return True
        return False