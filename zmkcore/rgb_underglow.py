"""RGB underglow: animated LED strip effects with adjustable colour and speed."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any, Callable, Optional

log = logging.getLogger(__name__)

#: Name under which the underglow state is persisted.
SETTINGS_KEY = "rgb/underglow/state"

#: Interval between animation ticks.
TICK_INTERVAL_MS = 50

_MAX_SPEED = 5
_MIN_SPEED = 1
_STATE_FORMAT = struct.Struct("<HBBBBH?")


class Effect(IntEnum):
    """Available underglow effects, in cycling order."""

    SOLID = 0
    BREATHE = 1
    SPECTRUM = 2
    SWIRL = 3


_EFFECT_COUNT = len(Effect)


@dataclass(frozen=True)
class Rgb:
    """One LED colour, each channel 0..255."""

    r: int
    g: int
    b: int


_OFF = Rgb(0, 0, 0)


@dataclass
class UnderglowState:
    """The persisted underglow settings and animation position."""

    hue: int = 0
    saturation: int = 100
    brightness: int = 100
    animation_speed: int = 3
    current_effect: int = Effect.SOLID
    animation_step: int = 0
    on: bool = True


def _pack(state: UnderglowState) -> bytes:
    return _STATE_FORMAT.pack(
        state.hue & 0xFFFF,
        state.saturation & 0xFF,
        state.brightness & 0xFF,
        state.animation_speed & 0xFF,
        state.current_effect & 0xFF,
        state.animation_step & 0xFFFF,
        bool(state.on),
    )


def _unpack(data: bytes) -> UnderglowState:
    hue, sat, brt, speed, effect, step, on = _STATE_FORMAT.unpack(data)
    return UnderglowState(hue, sat, brt, speed, effect, step, on)


def hsb_to_rgb(hue: int, saturation: int, brightness: int) -> Rgb:
    """Convert hue (degrees), saturation and brightness (percent) to RGB."""
    sector = (hue // 60) & 0xFF
    v = brightness / 100.0
    s = saturation / 100.0
    f = hue / 360.0 * 6 - sector
    p = v * (1 - s)
    q = v * (1 - f * s)
    t = v * (1 - (1 - f) * s)

    r, g, b = {
        0: (v, t, p),
        1: (q, v, p),
        2: (p, v, t),
        3: (p, q, v),
        4: (t, p, v),
        5: (v, p, q),
    }[sector % 6]
    return Rgb(int(r * 255) & 0xFF, int(g * 255) & 0xFF, int(b * 255) & 0xFF)


class Underglow:
    """Drives an LED strip with the current effect.

    ``update_strip`` receives the full list of pixel colours after every change.
    :meth:`tick` is meant to run every :data:`TICK_INTERVAL_MS` while
    :attr:`running` is true. ``save`` persists the packed state under
    :data:`SETTINGS_KEY`.
    """

    def __init__(
        self,
        update_strip: Callable[[list[Rgb]], Any],
        num_pixels: int,
        hue_start: int = 0,
        sat_start: int = 100,
        brt_start: int = 100,
        spd_start: int = 3,
        eff_start: int = Effect.SOLID,
        on_start: bool = True,
        hue_step: int = 10,
        sat_step: int = 10,
        brt_step: int = 10,
        save: Optional[Callable[[str, bytes], Any]] = None,
    ) -> None:
        if update_strip is None:
            raise ValueError("LED strip device not found")
        if num_pixels < 1:
            raise ValueError("the LED strip needs at least one pixel")
        self.update_strip = update_strip
        self.num_pixels = num_pixels
        self.hue_step = hue_step
        self.sat_step = sat_step
        self.brt_step = brt_step
        self.save = save
        self.pixels: list[Rgb] = [_OFF] * num_pixels
        self.state = UnderglowState(
            hue=hue_start,
            saturation=sat_start,
            brightness=brt_start,
            animation_speed=spd_start,
            current_effect=eff_start,
            animation_step=0,
            on=on_start,
        )
        self.running = True

    def _show(self) -> None:
        self.update_strip(list(self.pixels))

    def _off(self) -> None:
        self.pixels = [_OFF] * self.num_pixels
        self._show()

    def _fill(self, hue: int, saturation: int, brightness: int) -> None:
        self.pixels = [hsb_to_rgb(hue, saturation, brightness)] * self.num_pixels

    def _effect_solid(self) -> None:
        st = self.state
        self._fill(st.hue, st.saturation, st.brightness)

    def _effect_breathe(self) -> None:
        st = self.state
        self._fill(st.hue, st.saturation, abs(st.animation_step - 1200) // 12)
        st.animation_step = (st.animation_step + st.animation_speed * 10) & 0xFFFF
        if st.animation_step > 2400:
            st.animation_step = 0

    def _effect_spectrum(self) -> None:
        st = self.state
        self._fill(st.animation_step, st.saturation, st.brightness)
        st.animation_step = ((st.animation_step + st.animation_speed) & 0xFFFF) % 360

    def _effect_swirl(self) -> None:
        st = self.state
        spacing = 360 // self.num_pixels
        self.pixels = [
            hsb_to_rgb((spacing * i + st.animation_step) % 360, st.saturation, st.brightness)
            for i in range(self.num_pixels)
        ]
        st.animation_step = ((st.animation_step + st.animation_speed * 2) & 0xFFFF) % 360

    def tick(self) -> None:
        """Advance the animation one step, or blank the strip and stop when off."""
        if not self.state.on:
            self._off()
            self.running = False
            return
        effect = {
            Effect.SOLID: self._effect_solid,
            Effect.BREATHE: self._effect_breathe,
            Effect.SPECTRUM: self._effect_spectrum,
            Effect.SWIRL: self._effect_swirl,
        }.get(self.state.current_effect)
        if effect is not None:
            effect()
        self._show()

    def save_state(self) -> bytes:
        """Persist the state; returns the packed form that was saved."""
        data = _pack(self.state)
        if self.save is not None:
            self.save(SETTINGS_KEY, data)
        return data

    def load_state(self, data: bytes) -> None:
        """Restore a state produced by :meth:`save_state`."""
        if len(data) != _STATE_FORMAT.size:
            raise ValueError(
                f"underglow state must be {_STATE_FORMAT.size} bytes, got {len(data)}"
            )
        self.state = _unpack(bytes(data))

    def toggle(self) -> None:
        """Switch the underglow on or off."""
        st = self.state
        st.on = not st.on
        if st.on:
            st.animation_step = 0
            self.running = True
        else:
            self._off()
            self.running = False
        self.save_state()

    def cycle_effect(self, direction: int) -> None:
        """Move ``direction`` steps through the effects, wrapping around."""
        st = self.state
        if st.current_effect == 0 and direction < 0:
            st.current_effect = _EFFECT_COUNT - 1
            return
        st.current_effect = (st.current_effect + direction) & 0xFF
        if st.current_effect >= _EFFECT_COUNT:
            st.current_effect = 0
        st.animation_step = 0
        self.save_state()

    def change_hue(self, direction: int) -> None:
        """Shift the hue by ``direction`` hue steps, wrapping at 360."""
        st = self.state
        if st.hue == 0 and direction < 0:
            st.hue = 360 - self.hue_step
            return
        st.hue = ((st.hue + direction * self.hue_step) & 0xFFFF) % 360
        self.save_state()

    def change_sat(self, direction: int) -> None:
        """Change the saturation by ``direction`` steps, capped at 100."""
        st = self.state
        if st.saturation == 0 and direction < 0:
            return
        st.saturation = (st.saturation + direction * self.sat_step) & 0xFF
        if st.saturation > 100:
            st.saturation = 100
        self.save_state()

    def change_brt(self, direction: int) -> None:
        """Change the brightness by ``direction`` steps, capped at 100."""
        st = self.state
        if st.brightness == 0 and direction < 0:
            return
        st.brightness = (st.brightness + direction * self.brt_step) & 0xFF
        if st.brightness > 100:
            st.brightness = 100
        self.save_state()

    def change_spd(self, direction: int) -> None:
        """Change the animation speed by ``direction``, within 1..5."""
        st = self.state
        if st.animation_speed == _MIN_SPEED and direction < 0:
            return
        st.animation_speed = (st.animation_speed + direction) & 0xFF
        if st.animation_speed > _MAX_SPEED:
            st.animation_speed = _MAX_SPEED
        self.save_state()

    def snapshot(self) -> UnderglowState:
        """A copy of the current state."""
        return replace(self.state)