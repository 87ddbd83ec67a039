"""Keymap sensors and the events raised when they produce readings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from .events import EventManager, SensorEvent

log = logging.getLogger(__name__)


@dataclass
class SensorSlot:
    """An enabled keymap sensor and its device, if one was found."""

    sensor_number: int
    label: str
    device: Any = None


class Sensors:
    """Keymap sensors in keymap order.

    ``nodes`` lists the sensor labels in keymap order, with ``None`` for a
    disabled sensor; disabled sensors keep their sensor number but get no slot.
    ``lookup`` finds a device by label. Devices provide ``sample_fetch()``.
    """

    def __init__(
        self,
        nodes: Sequence[Optional[str]],
        manager: EventManager,
        lookup: Callable[[str], Any],
    ) -> None:
        self.manager = manager
        self.slots: list[SensorSlot] = []
        for sensor_number, label in enumerate(nodes):
            if label is None:
                continue
            log.debug(
                "Init %s at index %d with sensor_number %d",
                label,
                len(self.slots),
                sensor_number,
            )
            device = lookup(label)
            if device is None:
                log.warning("Failed to find device for %s", label)
            self.slots.append(SensorSlot(sensor_number, label, device))

    def _slot(self, sensor_number: int) -> SensorSlot:
        for slot in self.slots:
            if slot.sensor_number == sensor_number:
                if slot.device is None:
                    raise LookupError(f"sensor {sensor_number} has no device")
                return slot
        raise LookupError(f"no enabled sensor {sensor_number}")

    def trigger(self, sensor_number: int) -> Optional[SensorEvent]:
        """Fetch a sample and raise a sensor event; ``None`` if fetching failed."""
        slot = self._slot(sensor_number)
        log.debug("sensor %d", sensor_number)
        try:
            slot.device.sample_fetch()
        except OSError as err:
            log.warning("Failed to fetch sample from device %s", err)
            return None
        event = SensorEvent(sensor_number=slot.sensor_number, sensor=slot.device)
        self.manager.raise_event(event)
        return event