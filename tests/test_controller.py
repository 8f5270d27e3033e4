import pytest

from custom_components.novy_hood.const import (
    ATTR_SPEED_LEVEL,
    CONF_RUN_OUT,
    TIMER_RESEND,
    TIMER_RUN_OUT,
    UNIT_NONE,
)
from custom_components.novy_hood.controller import HoodController
from custom_components.novy_hood.timers import TimerRegistry
from conftest import FakeTransport


def _controller(loop, **settings):
    transport = FakeTransport(settings)
    timers = TimerRegistry(loop)
    return HoodController(transport, timers), transport, timers


@pytest.mark.asyncio
async def test_on_then_ramp_to_speed_3(loop):
    hood, transport, timers = _controller(loop)

    payload = await hood.async_send_command("on")
    assert payload.unit == "onoff"
    assert payload.speed == 1
    assert payload.onoff is True
    assert payload.speed_level == "speed_1"
    assert hood.state.speed == 1

    payload = await hood.async_send_command("speed_3")
    assert payload.unit == "increase"
    assert hood.state.target_speed == 3
    assert hood.state.speed == 2
    assert timers.is_armed(TIMER_RESEND)

    await loop.advance(0.05)
    assert hood.state.speed == 3
    assert hood.state.target_speed is None
    assert transport.sent == ["onoff", "increase", "increase"]
    assert not timers.is_armed(TIMER_RESEND)


@pytest.mark.asyncio
@pytest.mark.parametrize("start,target", [(0, 4), (1, 3), (4, 1), (3, 0), (2, 1)])
async def test_ramp_sends_one_step_per_speed(loop, start, target):
    hood, transport, _ = _controller(loop, **{ATTR_SPEED_LEVEL: f"speed_{start}"})

    await hood.async_send_command(f"speed_{target}")
    await loop.advance(1)

    assert len(transport.sent) == abs(target - start)
    assert set(transport.sent) == {"increase" if target > start else "decrease"}
    assert hood.state.speed == target
    assert hood.state.target_speed is None


@pytest.mark.asyncio
async def test_requesting_current_speed_sends_nothing(loop):
    hood, transport, _ = _controller(loop, **{ATTR_SPEED_LEVEL: "speed_2"})
    payload = await hood.async_send_command(speed=2)
    assert payload.unit == UNIT_NONE
    assert transport.sent == []
    assert hood.state.speed == 2
    assert hood.last_payload is payload


@pytest.mark.asyncio
async def test_fast_off_resends_onoff_once(loop):
    hood, transport, timers = _controller(loop, **{ATTR_SPEED_LEVEL: "speed_2"})

    await hood.async_send_command("off")
    assert transport.sent == ["onoff"]
    assert hood.state.run_out_active is True
    assert timers.is_armed(TIMER_RESEND)
    assert not timers.is_armed(TIMER_RUN_OUT)

    await loop.advance(0.05)
    assert transport.sent == ["onoff", "onoff"]
    assert hood.state.speed == 0
    assert hood.state.run_out_active is False
    assert not timers.is_armed(TIMER_RUN_OUT)

    await loop.advance(60)
    assert transport.sent == ["onoff", "onoff"]


@pytest.mark.asyncio
async def test_off_with_run_out_finishes_after_ten_minutes(loop):
    hood, transport, timers = _controller(
        loop, **{ATTR_SPEED_LEVEL: "speed_3", CONF_RUN_OUT: True}
    )

    await hood.async_send_command(onoff=False)
    assert transport.sent == ["onoff"]
    assert timers.is_armed(TIMER_RUN_OUT)
    assert hood.state.run_out_active is True
    assert hood.state.speed == 3

    await loop.advance(599)
    assert hood.state.run_out_active is True
    await loop.advance(1)
    assert hood.state.speed == 0
    assert hood.state.speed_level == "speed_0"
    assert hood.state.run_out_active is False
    assert transport.updates[-1].speed == 0


@pytest.mark.asyncio
async def test_second_press_during_run_out_cancels_timer(loop):
    hood, transport, timers = _controller(loop, **{ATTR_SPEED_LEVEL: "speed_2"})

    hood.handle_event({"unit": "onoff"})
    assert timers.is_armed(TIMER_RUN_OUT)

    payload = hood.handle_event({"unit": "onoff"})
    assert payload.command == "off"
    assert not timers.is_armed(TIMER_RUN_OUT)
    assert hood.state.run_out_active is False
    assert hood.state.speed == 0
    assert transport.sent == []


@pytest.mark.asyncio
async def test_increase_during_run_out_keeps_hood_running(loop):
    hood, _, timers = _controller(loop, **{ATTR_SPEED_LEVEL: "speed_2"})

    hood.handle_event({"unit": "onoff"})
    hood.handle_event({"unit": "increase"})
    assert not timers.is_armed(TIMER_RUN_OUT)
    assert hood.state.run_out_active is False
    assert hood.state.speed == 3

    await loop.advance(600)
    assert hood.state.speed == 3


@pytest.mark.asyncio
async def test_power_on_restores_light(loop):
    hood, transport, _ = _controller(loop, **{ATTR_SPEED_LEVEL: "speed_1"})
    await hood.async_send_command(light=True)
    await hood.async_send_command("off")
    await loop.advance(0.05)
    assert hood.state.light is False

    await hood.async_send_command("on")
    assert hood.state.light is True
    assert hood.state.speed == 1
    assert transport.sent == ["light", "onoff", "onoff", "onoff"]


@pytest.mark.asyncio
async def test_unknown_or_foreign_events_change_nothing(loop):
    transport = FakeTransport({ATTR_SPEED_LEVEL: "speed_2"}, address="0101010101")
    hood = HoodController(transport, TimerRegistry(loop))
    before = dict(transport.settings)

    assert hood.handle_event({"unit": "dim", "address": "0101010101"}) is None
    assert hood.handle_event({"unit": "onoff", "address": "1111111111"}) is None
    assert hood.handle_event({"address": "0101010101"}) is None
    assert transport.settings == before
    assert transport.updates == []


@pytest.mark.asyncio
async def test_shutdown_cancels_pending_timers(loop):
    hood, transport, timers = _controller(loop, **{ATTR_SPEED_LEVEL: "speed_1"})
    await hood.async_send_command("speed_4")
    hood.shutdown()
    await loop.advance(1)
    assert transport.sent == ["increase"]


@pytest.mark.asyncio
@pytest.mark.parametrize("second", ["speed_0", "decrease"])
async def test_new_speed_request_replaces_running_ramp(loop, second):
    hood, transport, _ = _controller(loop, **{ATTR_SPEED_LEVEL: "speed_1"})

    await hood.async_send_command("speed_4")
    await hood.async_send_command(second)
    await loop.advance(1)

    expected = 0 if second == "speed_0" else 1
    assert hood.state.speed == expected
    assert hood.state.target_speed is None
    assert "increase" not in transport.sent[1:]


@pytest.mark.asyncio
async def test_failed_send_leaves_no_pending_ramp(loop):
    hood, transport, timers = _controller(loop, **{ATTR_SPEED_LEVEL: "speed_1"})
    transport.fail_send = True

    with pytest.raises(ConnectionError):
        await hood.async_send_command("speed_4")
    assert hood.state.target_speed is None
    assert hood.state.speed == 1

    transport.fail_send = False
    hood.handle_event({"unit": "increase"})
    await loop.advance(1)
    assert transport.sent == []
    assert hood.state.speed == 2
    assert not timers.is_armed(TIMER_RESEND)


@pytest.mark.asyncio
async def test_failed_off_does_not_leave_fast_off_flag(loop):
    hood, transport, timers = _controller(loop, **{ATTR_SPEED_LEVEL: "speed_2"})
    transport.fail_send = True

    with pytest.raises(ConnectionError):
        await hood.async_send_command("off")
    assert hood.state.off_run_out is None

    transport.fail_send = False
    hood.handle_event({"unit": "onoff"})
    assert timers.is_armed(TIMER_RUN_OUT)
    assert not timers.is_armed(TIMER_RESEND)
