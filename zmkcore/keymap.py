"""Layered keymap that routes key positions and sensors to behaviors."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from .events import EventManager, PositionStateChanged, SensorEvent

log = logging.getLogger(__name__)

#: Number of layers that the layer state bit field can hold.
MAX_LAYERS = 32


class BehaviorNotSupportedError(Exception):
    """No behavior handled the request, or the behavior lacks the operation."""


@dataclass(frozen=True)
class Binding:
    """A behavior name with the two parameters given in the keymap."""

    behavior: str
    param1: int = 0
    param2: int = 0


@dataclass(frozen=True)
class BindingEvent:
    """Where and when a binding was pressed or released."""

    layer: int
    position: int
    timestamp: int


class Behavior:
    """Base class for behaviors bound in a keymap.

    A method returning a positive number passes the key on to the next lower
    active layer; returning ``None`` or ``0`` means the behavior handled it.
    Failures are raised. Operations a behavior does not override raise
    :class:`BehaviorNotSupportedError`.
    """

    def binding_pressed(self, binding: Binding, event: BindingEvent) -> Optional[int]:
        """Handle the bound position being pressed."""
        raise BehaviorNotSupportedError(f"{type(self).__name__} does not handle presses")

    def binding_released(self, binding: Binding, event: BindingEvent) -> Optional[int]:
        """Handle the bound position being released."""
        raise BehaviorNotSupportedError(f"{type(self).__name__} does not handle releases")

    def sensor_binding_triggered(self, binding: Binding, sensor: Any) -> Optional[int]:
        """Handle the bound sensor producing a reading."""
        raise BehaviorNotSupportedError(f"{type(self).__name__} does not handle sensors")


def _binding_at(table: Optional[Sequence[Optional[Sequence[Optional[Binding]]]]],
                layer: int, index: int) -> Optional[Binding]:
    if table is None or layer >= len(table):
        return None
    row = table[layer]
    if row is None or not 0 <= index < len(row):
        return None
    return row[index]


class Keymap:
    """Layers of bindings with a 32-bit active layer state.

    Layers are searched from the highest down to ``default_layer``; the default
    layer is always active. A release is delivered using the layer state that
    was current when the same position was last pressed, so a key released after
    its layer was turned off still reaches the behavior that saw the press.
    """

    def __init__(
        self,
        layers: Sequence[Sequence[Optional[Binding]]],
        behaviors: Mapping[str, Behavior],
        sensor_layers: Optional[Sequence[Optional[Sequence[Optional[Binding]]]]] = None,
        default_layer: int = 0,
    ) -> None:
        self.layers = [list(layer) for layer in layers]
        self.sensor_layers = (
            None
            if sensor_layers is None
            else [None if layer is None else list(layer) for layer in sensor_layers]
        )
        self.behaviors = dict(behaviors)
        self.default_layer = default_layer
        self.layer_state = 0
        self._behavior_layer_state: dict[int, int] = {}

    def layer_active(self, layer: int) -> bool:
        """Whether ``layer`` is switched on in the layer state."""
        bit = 1 << layer
        return (self.layer_state & bit) == bit

    def _set_layer(self, layer: int, state: bool) -> None:
        if not 0 <= layer < MAX_LAYERS:
            raise ValueError(f"layer {layer} is out of range")
        if state:
            self.layer_state |= 1 << layer
        else:
            self.layer_state &= ~(1 << layer)

    def layer_activate(self, layer: int) -> None:
        """Switch ``layer`` on."""
        self._set_layer(layer, True)

    def layer_deactivate(self, layer: int) -> None:
        """Switch ``layer`` off."""
        self._set_layer(layer, False)

    def layer_toggle(self, layer: int) -> None:
        """Switch ``layer`` off if it is on, otherwise on."""
        self._set_layer(layer, not self.layer_active(layer))

    def _is_active(self, layer: int, state: int) -> bool:
        bit = 1 << layer
        return (state & bit) == bit or layer == self.default_layer

    def _layers_top_down(self) -> range:
        return range(len(self.layers) - 1, self.default_layer - 1, -1)

    def _behavior_for(self, binding: Optional[Binding]) -> Optional[Behavior]:
        if binding is None:
            return None
        return self.behaviors.get(binding.behavior)

    def _apply_position_state(
        self, layer: int, position: int, pressed: bool, timestamp: int
    ) -> int:
        binding = _binding_at(self.layers, layer, position)
        behavior = self._behavior_for(binding)
        if behavior is None or binding is None:
            log.debug("No behavior assigned to %d on layer %d", position, layer)
            return 1
        log.debug("layer: %d position: %d, binding name: %s", layer, position, binding.behavior)
        event = BindingEvent(layer=layer, position=position, timestamp=timestamp)
        if pressed:
            result = behavior.binding_pressed(binding, event)
        else:
            result = behavior.binding_released(binding, event)
        return int(result or 0)

    def position_state_changed(self, position: int, pressed: bool, timestamp: int) -> int:
        """Deliver a press or release; returns the layer whose behavior handled it."""
        for layer in self._layers_top_down():
            state = (
                self.layer_state if pressed else self._behavior_layer_state.get(position, 0)
            )
            if not self._is_active(layer, state):
                continue
            try:
                result = self._apply_position_state(layer, position, pressed, timestamp)
            finally:
                self._behavior_layer_state[position] = self.layer_state
            if result > 0:
                log.debug("behavior processing to continue to next layer")
                continue
            return layer
        raise BehaviorNotSupportedError(f"no behavior handled position {position}")

    def sensor_triggered(self, sensor_number: int, sensor: Any) -> int:
        """Deliver a sensor reading; returns the layer whose behavior handled it."""
        for layer in self._layers_top_down():
            if not self._is_active(layer, self.layer_state):
                continue
            binding = _binding_at(self.sensor_layers, layer, sensor_number)
            behavior = self._behavior_for(binding)
            if behavior is None or binding is None:
                log.debug("No behavior assigned to %d on layer %d", sensor_number, layer)
                continue
            result = int(behavior.sensor_binding_triggered(binding, sensor) or 0)
            if result > 0:
                log.debug("behavior processing to continue to next layer")
                continue
            return layer
        raise BehaviorNotSupportedError(f"no behavior handled sensor {sensor_number}")

    def attach(self, manager: EventManager) -> None:
        """Subscribe to position changes, and to sensor events if sensors are bound."""
        manager.subscribe(self, PositionStateChanged)
        if self.sensor_layers is not None:
            manager.subscribe(self, SensorEvent)

    def __call__(self, event: object) -> None:
        if isinstance(event, PositionStateChanged):
            self.position_state_changed(event.position, event.state, event.timestamp)
        elif isinstance(event, SensorEvent):
            self.sensor_triggered(event.sensor_number, event.sensor)
        else:
            raise BehaviorNotSupportedError(f"unsupported event {type(event).__name__}")
        return None