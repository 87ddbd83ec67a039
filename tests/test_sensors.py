import pytest

from zmkcore.events import EventManager, SensorEvent
from zmkcore.sensors import Sensors


class FakeSensor:
    def __init__(self, fail=False):
        self.fail = fail
        self.fetches = 0

    def sample_fetch(self):
        self.fetches += 1
        if self.fail:
            raise OSError("no sample")


def _setup(devices, nodes):
    manager = EventManager()
    seen = []
    manager.subscribe(seen.append, SensorEvent)
    sensors = Sensors(nodes, manager, devices.get)
    return sensors, seen


def test_disabled_sensors_keep_numbering():
    a, b = FakeSensor(), FakeSensor()
    sensors, _ = _setup({"ENC_A": a, "ENC_B": b}, ["ENC_A", None, "ENC_B"])
    assert [slot.sensor_number for slot in sensors.slots] == [0, 2]
    assert [slot.device for slot in sensors.slots] == [a, b]


def test_trigger_raises_event():
    b = FakeSensor()
    sensors, seen = _setup({"ENC_A": FakeSensor(), "ENC_B": b}, ["ENC_A", None, "ENC_B"])
    event = sensors.trigger(2)
    assert seen == [event]
    assert event.sensor_number == 2
    assert event.sensor is b
    assert b.fetches == 1


def test_failed_fetch_raises_nothing():
    dev = FakeSensor(fail=True)
    sensors, seen = _setup({"ENC": dev}, ["ENC"])
    assert sensors.trigger(0) is None
    assert seen == []
    assert dev.fetches == 1


def test_missing_device_and_unknown_number():
    sensors, seen = _setup({}, ["GONE", None])
    assert sensors.slots[0].device is None
    with pytest.raises(LookupError):
        sensors.trigger(0)
    with pytest.raises(LookupError):
        sensors.trigger(1)
    assert seen == []