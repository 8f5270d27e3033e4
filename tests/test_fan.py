from types import SimpleNamespace

import pytest

pytest.importorskip("homeassistant.components.fan")

from custom_components.novy_hood.fan import NovyHoodFan  # noqa: E402
from custom_components.novy_hood.state import HoodState  # noqa: E402


# ---- helpers ----
class FakeController:
    def __init__(self, state):
        self.state = state
        self.calls = []

    async def async_send_command(self, command=None, **fields):
        self.calls.append((command, fields))


def _fan(state):
    entry = SimpleNamespace(entry_id="entry1", data={"name": "Hood"}, title="Hood")
    return NovyHoodFan(entry, FakeController(state), transport=None)


# ---- tests ----
@pytest.mark.parametrize("speed,percentage", [(0, 0), (1, 25), (2, 50), (4, 100)])
def test_percentage_follows_speed(speed, percentage):
    fan = _fan(HoodState(speed=speed))
    assert fan.percentage == percentage
    assert fan.is_on is (speed > 0)
    assert fan.speed_count == 4


@pytest.mark.asyncio
@pytest.mark.parametrize("percentage,speed", [(0, 0), (25, 1), (60, 3), (100, 4)])
async def test_set_percentage_requests_speed(percentage, speed):
    fan = _fan(HoodState())
    await fan.async_set_percentage(percentage)
    assert fan._controller.calls == [(None, {"speed": speed})]


@pytest.mark.asyncio
async def test_turn_on_and_off_go_through_onoff_policy():
    fan = _fan(HoodState())
    await fan.async_turn_on()
    await fan.async_turn_off()
    assert fan._controller.calls == [(None, {"onoff": True}), (None, {"onoff": False})]


def test_attributes_expose_shadow_state():
    fan = _fan(HoodState(speed=2, run_out_active=True, target_speed=4))
    assert fan.extra_state_attributes == {
        "speed_level": "speed_2",
        "run_out_active": True,
        "target_speed": 4,
    }
