"""Idle-time power policy: deep sleep after a period without key activity."""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Optional

from .events import EventManager, PositionStateChanged, SensorEvent


class PowerState(Enum):
    """System power states the policy can choose."""

    ACTIVE = "active"
    DEEP_SLEEP_1 = "deep_sleep_1"


def _uptime_ms() -> int:
    return int(time.monotonic() * 1000)


class PowerPolicy:
    """Chooses deep sleep once the keyboard has been idle for ``idle_timeout_ms``.

    ``clock`` returns the uptime in milliseconds. ``usb_power`` reports whether
    the USB connection supplies power; without it, USB power is never present.
    Deep sleep is never chosen while on USB power, when ``deep_sleep_supported``
    is false, or while the last recorded activity time is zero.
    """

    def __init__(
        self,
        idle_timeout_ms: int,
        clock: Callable[[], int] = _uptime_ms,
        usb_power: Optional[Callable[[], bool]] = None,
        deep_sleep_supported: bool = True,
    ) -> None:
        self.idle_timeout_ms = idle_timeout_ms
        self.clock = clock
        self.usb_power = usb_power
        self.deep_sleep_supported = deep_sleep_supported
        self.last_uptime = clock()

    def usb_power_present(self) -> bool:
        """Whether the board is powered over USB."""
        return bool(self.usb_power()) if self.usb_power is not None else False

    def next_state(self) -> PowerState:
        """The power state the system should enter now."""
        if self.deep_sleep_supported:
            current = self.clock()
            if (
                self.last_uptime > 0
                and not self.usb_power_present()
                and current - self.last_uptime > self.idle_timeout_ms
            ):
                return PowerState.DEEP_SLEEP_1
        return PowerState.ACTIVE

    def attach(self, manager: EventManager) -> None:
        """Count key position changes and sensor readings as activity."""
        manager.subscribe(self, PositionStateChanged)
        manager.subscribe(self, SensorEvent)

    def __call__(self, event: object) -> None:
        self.last_uptime = self.clock()
        return None