"""Typed events and an ordered publish/subscribe event manager."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, Optional

log = logging.getLogger(__name__)


class EventResult(IntEnum):
    """What a listener did with an event."""

    CONTINUE = 0
    HANDLED = 1
    CAPTURED = 2


class ListenerNotFoundError(LookupError):
    """The listener is not subscribed to the event's type."""


@dataclass
class Event:
    """Base class for all events."""

    last_listener_index: Optional[int] = field(
        default=None, init=False, repr=False, compare=False
    )


@dataclass
class PositionStateChanged(Event):
    """A key position was pressed or released."""

    position: int
    state: bool
    timestamp: int


@dataclass
class KeycodeStateChanged(Event):
    """A keycode on a usage page was pressed or released."""

    usage_page: int
    keycode: int
    state: bool


@dataclass
class ModifiersStateChanged(Event):
    """A set of modifier flags was pressed or released."""

    modifiers: int
    state: bool


@dataclass
class SensorEvent(Event):
    """A sensor produced a new reading."""

    sensor_number: int
    sensor: Any


@dataclass
class BleActiveProfileChanged(Event):
    """The active BLE profile changed."""

    index: int
    profile: Any


Listener = Callable[[Event], Any]


@dataclass(frozen=True)
class _Subscription:
    event_type: type
    listener: Listener


class EventManager:
    """Dispatches events to listeners in subscription order.

    A listener returns ``None`` or ``EventResult.CONTINUE`` to pass the event on,
    ``EventResult.HANDLED`` to stop dispatch, or ``EventResult.CAPTURED`` to stop
    dispatch and keep the event for a later :meth:`release`. Exceptions raised by
    a listener stop dispatch and propagate to the caller.
    """

    def __init__(self) -> None:
        self._subscriptions: list[_Subscription] = []

    def subscribe(self, listener: Listener, event_type: type) -> None:
        """Subscribe ``listener`` to events of exactly ``event_type``."""
        self._subscriptions.append(_Subscription(event_type, listener))

    def _handle_from(self, event: Event, start: int) -> EventResult:
        for index, sub in enumerate(self._subscriptions[start:], start):
            if type(event) is not sub.event_type:
                continue
            result = sub.listener(event)
            if result == EventResult.HANDLED:
                log.debug("Listener handled the event")
                return EventResult.HANDLED
            if result == EventResult.CAPTURED:
                log.debug("Listener captured the event")
                event.last_listener_index = index
                return EventResult.CAPTURED
        return EventResult.CONTINUE

    def _index_of(self, event: Event, listener: Listener) -> int:
        for index, sub in enumerate(self._subscriptions):
            if type(event) is sub.event_type and sub.listener == listener:
                return index
        raise ListenerNotFoundError(
            f"listener {listener!r} is not subscribed to {type(event).__name__}"
        )

    def raise_event(self, event: Event) -> EventResult:
        """Dispatch ``event`` to all its listeners from the first one."""
        return self._handle_from(event, 0)

    def raise_after(self, event: Event, listener: Listener) -> EventResult:
        """Dispatch ``event`` to the listeners subscribed after ``listener``."""
        return self._handle_from(event, self._index_of(event, listener) + 1)

    def raise_at(self, event: Event, listener: Listener) -> EventResult:
        """Dispatch ``event`` starting with ``listener`` itself."""
        return self._handle_from(event, self._index_of(event, listener))

    def release(self, event: Event) -> EventResult:
        """Resume dispatch of a captured event after the listener that captured it."""
        if event.last_listener_index is None:
            raise ValueError("event was never captured")
        return self._handle_from(event, event.last_listener_index + 1)