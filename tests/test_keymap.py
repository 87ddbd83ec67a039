import pytest

from zmkcore.events import EventManager, PositionStateChanged, SensorEvent
from zmkcore.keymap import (
    Behavior,
    BehaviorNotSupportedError,
    Binding,
    BindingEvent,
    Keymap,
)


class Recorder(Behavior):
    def __init__(self, result=None):
        self.result = result
        self.calls = []

    def binding_pressed(self, binding, event):
        self.calls.append(("pressed", binding, event))
        return self.result

    def binding_released(self, binding, event):
        self.calls.append(("released", binding, event))
        return self.result

    def sensor_binding_triggered(self, binding, sensor):
        self.calls.append(("sensor", binding, sensor))
        return self.result


class Failing(Behavior):
    def binding_pressed(self, binding, event):
        raise RuntimeError("boom")


def make_keymap():
    base = Recorder()
    upper = Recorder()
    trans = Recorder(result=1)
    behaviors = {"kp": base, "up": upper, "trans": trans}
    layers = [
        [Binding("kp", 4), Binding("kp", 5)],
        [Binding("up", 6), Binding("trans")],
    ]
    return Keymap(layers, behaviors), base, upper, trans


def test_layer_activate_and_deactivate():
    km, *_ = make_keymap()
    assert not km.layer_active(3)
    km.layer_activate(3)
    assert km.layer_active(3)
    km.layer_deactivate(3)
    assert not km.layer_active(3)


def test_layer_toggle_round_trip():
    km, *_ = make_keymap()
    km.layer_toggle(2)
    assert km.layer_active(2)
    km.layer_toggle(2)
    assert km.layer_state == 0


@pytest.mark.parametrize("layer", [32, 40, -1])
def test_layer_out_of_range(layer):
    km, *_ = make_keymap()
    with pytest.raises(ValueError):
        km.layer_activate(layer)


def test_press_goes_to_default_layer():
    km, base, upper, _ = make_keymap()
    assert km.position_state_changed(0, True, 123) == 0
    assert base.calls == [("pressed", Binding("kp", 4), BindingEvent(0, 0, 123))]
    assert upper.calls == []


def test_press_goes_to_active_upper_layer():
    km, base, upper, _ = make_keymap()
    km.layer_activate(1)
    assert km.position_state_changed(0, True, 7) == 1
    assert upper.calls[0][2] == BindingEvent(1, 0, 7)
    assert base.calls == []


def test_transparent_falls_through():
    km, base, _, trans = make_keymap()
    km.layer_activate(1)
    assert km.position_state_changed(1, True, 0) == 0
    assert len(trans.calls) == 1
    assert base.calls[0][1] == Binding("kp", 5)


def test_release_uses_layer_state_at_press():
    km, base, upper, _ = make_keymap()
    km.layer_activate(1)
    km.position_state_changed(0, True, 1)
    km.layer_deactivate(1)
    assert km.position_state_changed(0, False, 2) == 1
    assert [call[0] for call in upper.calls] == ["pressed", "released"]
    assert base.calls == []


def test_unbound_position_raises():
    km, *_ = make_keymap()
    with pytest.raises(BehaviorNotSupportedError):
        km.position_state_changed(9, True, 0)


def test_unknown_behavior_name_is_skipped():
    base = Recorder()
    km = Keymap([[Binding("kp")], [Binding("missing")]], {"kp": base})
    km.layer_activate(1)
    assert km.position_state_changed(0, True, 0) == 0
    assert len(base.calls) == 1


def test_behavior_without_operation_raises():
    km = Keymap([[Binding("plain")]], {"plain": Behavior()})
    with pytest.raises(BehaviorNotSupportedError):
        km.position_state_changed(0, True, 0)


def test_behavior_error_propagates():
    km = Keymap([[Binding("bad")]], {"bad": Failing()})
    with pytest.raises(RuntimeError):
        km.position_state_changed(0, True, 0)


def test_layers_below_default_are_ignored():
    low = Recorder()
    km = Keymap([[Binding("low")], [None]], {"low": low}, default_layer=1)
    with pytest.raises(BehaviorNotSupportedError):
        km.position_state_changed(0, True, 0)
    assert low.calls == []


def test_sensor_triggered_routes_to_active_layer():
    enc = Recorder()
    enc_up = Recorder()
    km = Keymap(
        [[Binding("x")], [Binding("x")]],
        {"x": Recorder(), "enc": enc, "enc_up": enc_up},
        sensor_layers=[[Binding("enc")], [Binding("enc_up")]],
    )
    sensor = object()
    assert km.sensor_triggered(0, sensor) == 0
    km.layer_activate(1)
    assert km.sensor_triggered(0, sensor) == 1
    assert enc.calls == [("sensor", Binding("enc"), sensor)]
    assert enc_up.calls == [("sensor", Binding("enc_up"), sensor)]


def test_sensor_without_bindings_raises():
    km, *_ = make_keymap()
    with pytest.raises(BehaviorNotSupportedError):
        km.sensor_triggered(0, object())


def test_attached_keymap_receives_events():
    km, base, _, _ = make_keymap()
    manager = EventManager()
    km.attach(manager)
    manager.raise_event(PositionStateChanged(position=1, state=True, timestamp=55))
    assert base.calls == [("pressed", Binding("kp", 5), BindingEvent(0, 1, 55))]


def test_attached_keymap_error_stops_dispatch():
    km, *_ = make_keymap()
    manager = EventManager()
    km.attach(manager)
    seen = []
    manager.subscribe(seen.append, PositionStateChanged)
    with pytest.raises(BehaviorNotSupportedError):
        manager.raise_event(PositionStateChanged(position=8, state=True, timestamp=0))
    assert seen == []


def test_attach_subscribes_sensor_events_when_bound():
    enc = Recorder()
    km = Keymap([[None]], {"enc": enc}, sensor_layers=[[Binding("enc")]])
    manager = EventManager()
    km.attach(manager)
    sensor = object()
    manager.raise_event(SensorEvent(sensor_number=0, sensor=sensor))
    assert enc.calls == [("sensor", Binding("enc"), sensor)]