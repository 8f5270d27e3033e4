import logging

import pytest

from custom_components.novy_hood.const import (
    ATTR_SPEED,
    ATTR_SPEED_LEVEL,
    ATTR_TARGET_SPEED,
    CONF_ONOFF_ACTION,
    CONF_RUN_OUT,
)
from custom_components.novy_hood.state import HoodPolicy, HoodState, ShadowStateStore
from conftest import FakeTransport


def test_empty_settings_default_to_off():
    store = ShadowStateStore(FakeTransport())
    state = store.load()
    assert state == HoodState()
    assert state.speed_level == "speed_0"
    assert state.is_on is False


def test_speed_comes_from_speed_level():
    store = ShadowStateStore(FakeTransport({ATTR_SPEED: 1, ATTR_SPEED_LEVEL: "speed_3"}))
    assert store.load().speed == 3


@pytest.mark.parametrize("state", [
    HoodState(),
    HoodState(speed=3, light=True, speed_history=3, light_history=True),
    HoodState(speed=2, run_out_active=True, off_run_out=False),
    HoodState(speed=1, target_speed=4, speed_history=1, off_run_out=True),
])
def test_load_save_round_trip(state):
    store = ShadowStateStore(FakeTransport())
    store.save(state)
    assert store.load() == state


def test_save_returns_persisted_record():
    transport = FakeTransport()
    record = ShadowStateStore(transport).save(HoodState(speed=4, target_speed=None))
    assert record[ATTR_SPEED] == 4
    assert record[ATTR_SPEED_LEVEL] == "speed_4"
    assert transport.settings[ATTR_SPEED_LEVEL] == "speed_4"
    assert transport.settings[ATTR_TARGET_SPEED] is None


@pytest.mark.parametrize("level", ["speed_x", "speed_9", "fast"])
def test_invalid_speed_level_falls_back_to_zero(level, caplog):
    store = ShadowStateStore(FakeTransport({ATTR_SPEED_LEVEL: level}))
    with caplog.at_level(logging.WARNING):
        assert store.load().speed == 0
    assert "speed_0" in caplog.text


def test_invalid_target_speed_is_dropped():
    store = ShadowStateStore(FakeTransport({ATTR_TARGET_SPEED: 7}))
    assert store.load().target_speed is None


def test_save_failure_is_raised():
    transport = FakeTransport()
    transport.fail_save = True
    with pytest.raises(OSError):
        ShadowStateStore(transport).save(HoodState(speed=1))


def test_policy_defaults_and_unknown_action():
    assert ShadowStateStore(FakeTransport()).load_policy() == HoodPolicy("device", False)
    store = ShadowStateStore(FakeTransport({CONF_ONOFF_ACTION: "toaster", CONF_RUN_OUT: True}))
    assert store.load_policy() == HoodPolicy("device", True)
