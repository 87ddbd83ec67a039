"""External power output switched through a GPIO pin."""

from __future__ import annotations

import logging
from typing import Protocol

log = logging.getLogger(__name__)


class ExtPowerError(OSError):
    """The control pin could not be configured or driven."""


class GpioController(Protocol):
    """The GPIO operations the external power control needs."""

    def configure_output(self, pin: int, flags: int) -> None: ...

    def set(self, pin: int, value: int) -> None: ...


class ExtPowerGeneric:
    """External power controlled by one output pin: high is on, low is off."""

    def __init__(self, gpio: GpioController, pin: int, flags: int = 0) -> None:
        if gpio is None:
            raise ValueError("no GPIO controller for the ext-power control pin")
        self.gpio = gpio
        self.pin = pin
        self.flags = flags
        self._status = False
        try:
            gpio.configure_output(pin, flags)
        except OSError as err:
            log.error("Failed to configure ext-power control pin")
            raise ExtPowerError("failed to configure ext-power control pin") from err

    def _drive(self, value: int, action: str) -> None:
        try:
            self.gpio.set(self.pin, value)
        except OSError as err:
            log.warning("Failed to %s ext-power control pin", action)
            raise ExtPowerError(f"failed to {action} ext-power control pin") from err

    def enable(self) -> None:
        """Turn the external power on."""
        self._drive(1, "set")
        self._status = True

    def disable(self) -> None:
        """Turn the external power off."""
        self._drive(0, "clear")
        self._status = False

    def get(self) -> bool:
        """Whether the external power is on."""
        return self._status