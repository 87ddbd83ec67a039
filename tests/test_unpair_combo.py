import pytest

from zmkcore.events import EventManager, PositionStateChanged
from zmkcore.unpair_combo import UnpairCombo


def setup():
    calls = []
    combo = UnpairCombo([3, 7], lambda: calls.append("unpair"))
    manager = EventManager()
    combo.attach(manager)
    return combo, manager, calls


def press(manager, position, state=True):
    manager.raise_event(PositionStateChanged(position=position, state=state, timestamp=0))


def test_index_for_key_position():
    combo, _, _ = setup()
    assert combo.index_for_key_position(7) == 1
    assert combo.index_for_key_position(5) is None


def test_all_held_unpairs():
    combo, manager, calls = setup()
    press(manager, 3)
    press(manager, 7)
    assert combo.check() is True
    assert calls == ["unpair"]


def test_partial_combo_does_nothing():
    combo, manager, calls = setup()
    press(manager, 3)
    press(manager, 5)
    assert combo.check() is False
    assert calls == []


def test_release_clears_position():
    combo, manager, calls = setup()
    press(manager, 3)
    press(manager, 7)
    press(manager, 7, state=False)
    assert combo.check() is False
    assert calls == []


def test_too_many_positions():
    with pytest.raises(ValueError):
        UnpairCombo(list(range(9)), lambda: None)