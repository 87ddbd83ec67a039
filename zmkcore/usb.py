"""USB device state and HID report delivery over USB."""

from __future__ import annotations

import logging
import threading
from enum import Enum, auto
from typing import Any, Callable, Optional

log = logging.getLogger(__name__)

_WRITE_WAIT_SECONDS = 0.030


class UsbStatus(Enum):
    """States reported by the USB device controller."""

    ERROR = auto()
    RESET = auto()
    CONNECTED = auto()
    CONFIGURED = auto()
    DISCONNECTED = auto()
    SUSPEND = auto()
    RESUME = auto()
    INTERFACE = auto()
    SET_HALT = auto()
    CLEAR_HALT = auto()
    SOF = auto()
    UNKNOWN = auto()


_UNAVAILABLE = frozenset(
    {UsbStatus.ERROR, UsbStatus.RESET, UsbStatus.DISCONNECTED, UsbStatus.UNKNOWN}
)


class UsbDeviceUnavailableError(OSError):
    """The USB device is not in a state that can carry reports."""


class Usb:
    """Tracks the USB status and writes HID reports to the interrupt endpoint.

    ``write`` sends one report; ``wakeup`` asks a suspended host to resume.
    A write waits briefly for the previous one to complete, signalled through
    :meth:`in_ready`, and goes ahead even if that wait times out.
    """

    def __init__(
        self,
        write: Callable[[bytes], Any],
        wakeup: Optional[Callable[[], Any]] = None,
    ) -> None:
        self.write = write
        self.wakeup = wakeup
        self.status = UsbStatus.UNKNOWN
        self._ready = threading.BoundedSemaphore(1)

    def status_changed(self, status: UsbStatus) -> None:
        """Record a status reported by the device controller."""
        self.status = status

    def in_ready(self) -> None:
        """Signal that the endpoint finished sending the previous report."""
        try:
            self._ready.release()
        except ValueError:
            pass

    def send_report(self, report: bytes) -> Any:
        """Send ``report``, or request a wakeup when the bus is suspended."""
        if self.status is UsbStatus.SUSPEND:
            return self.wakeup() if self.wakeup is not None else None
        if self.status in _UNAVAILABLE:
            raise UsbDeviceUnavailableError(f"USB device is {self.status.name.lower()}")
        self._ready.acquire(timeout=_WRITE_WAIT_SECONDS)
        try:
            return self.write(bytes(report))
        except Exception:
            self.in_ready()
            raise