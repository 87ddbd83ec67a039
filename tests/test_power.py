from zmkcore.events import EventManager, PositionStateChanged, SensorEvent
from zmkcore.power import PowerPolicy, PowerState


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def test_active_before_timeout():
    clock = Clock(1000)
    policy = PowerPolicy(500, clock=clock)
    clock.now = 1500
    assert policy.next_state() is PowerState.ACTIVE


def test_deep_sleep_after_timeout():
    clock = Clock(1000)
    policy = PowerPolicy(500, clock=clock)
    clock.now = 1501
    assert policy.next_state() is PowerState.DEEP_SLEEP_1


def test_usb_power_prevents_sleep():
    clock = Clock(1000)
    policy = PowerPolicy(500, clock=clock, usb_power=lambda: True)
    clock.now = 100000
    assert policy.usb_power_present() is True
    assert policy.next_state() is PowerState.ACTIVE


def test_no_usb_source_means_no_usb_power():
    policy = PowerPolicy(500, clock=Clock(1))
    assert policy.usb_power_present() is False


def test_unsupported_deep_sleep_stays_active():
    clock = Clock(1000)
    policy = PowerPolicy(500, clock=clock, deep_sleep_supported=False)
    clock.now = 100000
    assert policy.next_state() is PowerState.ACTIVE


def test_zero_start_time_never_sleeps_until_activity():
    clock = Clock(0)
    policy = PowerPolicy(500, clock=clock)
    clock.now = 100000
    assert policy.next_state() is PowerState.ACTIVE
    policy(PositionStateChanged(position=0, state=True, timestamp=0))
    assert policy.last_uptime == 100000
    clock.now = 100000 + 501
    assert policy.next_state() is PowerState.DEEP_SLEEP_1


def test_events_reset_idle_timer():
    clock = Clock(1000)
    policy = PowerPolicy(500, clock=clock)
    manager = EventManager()
    policy.attach(manager)
    clock.now = 1400
    manager.raise_event(PositionStateChanged(position=2, state=False, timestamp=0))
    clock.now = 1800
    assert policy.next_state() is PowerState.ACTIVE
    manager.raise_event(SensorEvent(sensor_number=0, sensor=None))
    assert policy.last_uptime == 1800