"""Key combo held at start-up that removes every BLE bond."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from .events import EventManager, PositionStateChanged

log = logging.getLogger(__name__)

_MAX_POSITIONS = 8


class UnpairCombo:
    """Tracks the combo's key positions and unpairs when all are held.

    ``unpair_all`` is called by :meth:`check`, which is meant to run once a
    short while after start-up.
    """

    def __init__(self, key_positions: Sequence[int], unpair_all: Callable[[], object]) -> None:
        if len(key_positions) > _MAX_POSITIONS:
            raise ValueError(f"at most {_MAX_POSITIONS} key positions are supported")
        self.key_positions = list(key_positions)
        self.unpair_all = unpair_all
        self.state = 0

    def index_for_key_position(self, position: int) -> Optional[int]:
        """Index of ``position`` within the combo, or ``None``."""
        try:
            return self.key_positions.index(position)
        except ValueError:
            return None

    def attach(self, manager: EventManager) -> None:
        """Subscribe to position state changes."""
        manager.subscribe(self, PositionStateChanged)

    def __call__(self, event: object) -> None:
        if isinstance(event, PositionStateChanged):
            index = self.index_for_key_position(event.position)
            if index is not None:
                if event.state:
                    self.state |= 1 << index
                else:
                    self.state &= ~(1 << index)
        return None

    def check(self) -> bool:
        """Unpair everything if every combo position is held; returns whether it did."""
        for index, position in enumerate(self.key_positions):
            if not self.state & (1 << index):
                log.debug("Key position %d not held, skipping unpair combo", position)
                return False
        self.unpair_all()
        return True