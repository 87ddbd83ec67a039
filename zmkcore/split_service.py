"""Peripheral side of the split keyboard link: shared key position state."""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Optional

from .events import EventManager, PositionStateChanged

log = logging.getLogger(__name__)

#: Bytes in the position state bitmap; one bit per key position.
POSITION_STATE_LEN = 16

#: 16-bit UUID of the "number of digitals" descriptor.
NUM_OF_DIGITALS_UUID = 0x2909


def split_uuid(num: int) -> uuid.UUID:
    """The 128-bit UUID of a split service attribute numbered ``num``."""
    return uuid.UUID(f"{num & 0xFFFFFFFF:08x}-0096-7107-c967-c5cfb1c2482a")


SERVICE_UUID = split_uuid(0x00000000)
POSITION_STATE_UUID = split_uuid(0x00000001)


class SplitService:
    """Holds the peripheral's key position bitmap and notifies every change.

    ``notify`` receives the whole bitmap after each change; its return value is
    passed back to the caller.
    """

    def __init__(
        self,
        num_of_positions: int,
        notify: Optional[Callable[[bytes], Any]] = None,
    ) -> None:
        self.num_of_positions = num_of_positions
        self.notify = notify
        self._state = bytearray(POSITION_STATE_LEN)

    @property
    def position_state(self) -> bytes:
        """The current bitmap of pressed positions."""
        return bytes(self._state)

    def _write(self, position: int, pressed: bool) -> Any:
        if not 0 <= position < POSITION_STATE_LEN * 8:
            raise ValueError(f"position {position} does not fit the position state")
        byte, bit = divmod(position, 8)
        if pressed:
            self._state[byte] |= 1 << bit
        else:
            self._state[byte] &= ~(1 << bit) & 0xFF
        if self.notify is None:
            return None
        return self.notify(bytes(self._state))

    def position_pressed(self, position: int) -> Any:
        """Mark ``position`` pressed and notify the central."""
        return self._write(position, True)

    def position_released(self, position: int) -> Any:
        """Mark ``position`` released and notify the central."""
        return self._write(position, False)


class SplitListener:
    """Forwards position state changes to the split service."""

    def __init__(self, service: SplitService) -> None:
        self.service = service

    def attach(self, manager: EventManager) -> None:
        """Subscribe to position state changes."""
        manager.subscribe(self, PositionStateChanged)

    def __call__(self, event: object) -> None:
        if isinstance(event, PositionStateChanged):
            if event.state:
                self.service.position_pressed(event.position)
            else:
                self.service.position_released(event.position)
        return None