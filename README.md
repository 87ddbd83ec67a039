# zmkcore

`zmkcore` holds the logic at the centre of a mechanical keyboard's firmware, written as
plain Python objects. It does no I/O of its own. You pass in callables for the parts that
touch hardware: writing a USB report, driving a GPIO pin, updating an LED strip, sending a
split-link notification, or reading a clock. That makes the package suitable for simulating
a keyboard, testing keymaps, or sitting behind your own I/O layer.

## Modules

- **`zmkcore.events`**: typed events (`PositionStateChanged`, `KeycodeStateChanged`,
  `ModifiersStateChanged`, `SensorEvent`, `BleActiveProfileChanged`) and an `EventManager`.
  Listeners subscribe to one exact event type with `subscribe(listener, event_type)` and are
  called in the order they subscribed. A listener returns `None` or `EventResult.CONTINUE` to
  pass an event on, or `EventResult.HANDLED` to stop dispatch. It returns
  `EventResult.CAPTURED` to stop dispatch and keep the event for a later `release(event)`.
  The `raise_at(event, listener)` and `raise_after(event, listener)` calls start dispatch at or
  after a given listener. They raise `ListenerNotFoundError` if that listener is not
  subscribed to the event's type.
- **`zmkcore.keymap`**: layers of `Binding(behavior, param1, param2)` routed to `Behavior`
  objects by name.
  - `Keymap.layer_activate`, `layer_deactivate` and `layer_toggle` work on a 32-bit layer
    state. A layer outside 0–31 raises `ValueError`.
  - `position_state_changed` and `sensor_triggered` search the active layers from the top
    down. The default layer is always active. They return the layer whose behavior handled
    the input.
  - A release reaches the layers that were active when the same position was last pressed.
  - A behavior returning a positive number passes the input to the next lower layer.
  - When nothing handles the input, `BehaviorNotSupportedError` is raised.
- **`zmkcore.power`**: `PowerPolicy` is an idle policy. `next_state()` returns
  `PowerState.DEEP_SLEEP_1` once no position or sensor event has arrived for
  `idle_timeout_ms`. Otherwise it returns `PowerState.ACTIVE`. It never chooses deep sleep
  while USB power is present.
- **`zmkcore.ext_power`**: `ExtPowerGeneric` switches external power through one output pin
  with `enable()`, `disable()` and `get()`. Pin failures raise `ExtPowerError`.
- **`zmkcore.usb`**: `Usb` tracks a `UsbStatus` and sends reports with `send_report`. When the
  bus is suspended, it calls the wakeup callable instead of writing. In the error, reset,
  disconnected and unknown states it raises `UsbDeviceUnavailableError`.
- **`zmkcore.sensors`**: `Sensors` looks up sensor devices by label. `trigger(sensor_number)`
  fetches a sample and raises a `SensorEvent`. It returns `None` if the fetch failed.
- **`zmkcore.split_service`** (peripheral half):
  - `SplitService` keeps a 16-byte bitmap of pressed positions and passes the whole bitmap to
    `notify` after every change.
  - `SplitListener` feeds it from position events.
  - `split_uuid(num)`, `SERVICE_UUID` and `POSITION_STATE_UUID` give the link's 128-bit UUIDs.
- **`zmkcore.split_central`** (central half):
  - `PositionStateTracker.update` returns the `(position, pressed)` pairs that changed
    between two bitmaps.
  - `SplitCentral.notify` raises a `PositionStateChanged` for each change.
  - `advertisement_has_split_service` checks a little-endian 128-bit UUID list for the split
    service.
- **`zmkcore.unpair_combo`**: `UnpairCombo` tracks up to eight key positions. Its `check()`
  method calls `unpair_all` if all of them are held.
- **`zmkcore.rgb_underglow`**:
  - `hsb_to_rgb` converts hue, saturation and brightness to an `Rgb` colour.
  - `Underglow` animates the `Effect.SOLID`, `BREATHE`, `SPECTRUM` and `SWIRL` effects.
    `tick()` runs one step and is meant to be called every `TICK_INTERVAL_MS` milliseconds.
  - `toggle`, `cycle_effect`, `change_hue`, `change_sat`, `change_brt` and `change_spd`
    adjust the effect.
  - `save_state()` packs the state to bytes and passes it to `save` under `SETTINGS_KEY`.
    `load_state()` restores it.

## Example

```python
from zmkcore.events import EventManager, PositionStateChanged
from zmkcore.keymap import Behavior, Binding, Keymap


class Printer(Behavior):
    def binding_pressed(self, binding, event):
        print("press", binding.param1, "on layer", event.layer)

    def binding_released(self, binding, event):
        print("release", binding.param1)


keymap = Keymap(
    layers=[[Binding("kp", 4), Binding("kp", 5)]],
    behaviors={"kp": Printer()},
)
manager = EventManager()
keymap.attach(manager)

manager.raise_event(PositionStateChanged(position=0, state=True, timestamp=0))
manager.raise_event(PositionStateChanged(position=0, state=False, timestamp=10))
```

## What it does not do

- It has no table of key codes and does not build or encode HID keyboard or consumer reports.
  `Usb.send_report` sends whatever bytes it is given.
- It has no matrix scanning and no mapping from matrix rows and columns to key positions.
  Position events must be raised by the caller.
- It does not manage Bluetooth profiles, advertising or pairing. It carries no radio or USB
  stack.
- It has no timers or scheduler. The caller runs `Underglow.tick`, `UnpairCombo.check` and
  `PowerPolicy.next_state` at the right moments.
- It offers no command-line program.

## Installing and testing

```
pip install zmkcore
pip install "zmkcore[test]"
pytest
```

Python 3.10 or newer is required. The package has no runtime dependencies.