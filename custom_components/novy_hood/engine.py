"""
State-to-signal translation.

The hood only understands four stateless toggles (onoff, light, increase,
decrease).  Everything here is a pure function taking the current
``HoodState`` and returning a ``Transition``: the next state, the payload to
hand to the transport and the side effects (timers, resends) the caller has
to execute.  Nothing in this module touches storage, timers or the radio.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from .const import (
    UNIT_ONOFF,
    UNIT_LIGHT,
    UNIT_INCREASE,
    UNIT_DECREASE,
    UNIT_NONE,
    CMD_ON,
    CMD_OFF,
    CMD_OFF_RUN_OUT,
    CMD_TOGGLE_ONOFF,
    CMD_TOGGLE_ONOFF_RUN_OUT,
    CMD_LIGHT_ON,
    CMD_LIGHT_OFF,
    CMD_TOGGLE_LIGHT,
    CMD_INCREASE,
    CMD_DECREASE,
    SPEED_COMMANDS,
    ONOFF_ACTION_LIGHT,
    ONOFF_ACTION_HOOD,
    TIMER_RUN_OUT,
    TIMER_RESEND,
)
from .state import HoodPolicy, HoodState, clamp_speed, speed_level

_LOGGER = logging.getLogger(__name__)

# command reported for a unit that is re-sent without a fresh request
REPEAT_COMMANDS = {
    UNIT_ONOFF: CMD_TOGGLE_ONOFF,
    UNIT_LIGHT: CMD_TOGGLE_LIGHT,
    UNIT_INCREASE: CMD_INCREASE,
    UNIT_DECREASE: CMD_DECREASE,
}


@dataclass(frozen=True)
class OutgoingPayload:
    unit: str
    command: Optional[str]
    speed: int
    light: bool

    @property
    def onoff(self) -> bool:
        return self.speed > 0

    @property
    def speed_level(self) -> str:
        return speed_level(self.speed)

    def as_dict(self) -> dict[str, Any]:
        return {
            "unit": self.unit,
            "command": self.command,
            "speed": self.speed,
            "speed_level": self.speed_level,
            "light": self.light,
            "onoff": self.onoff,
        }


@dataclass(frozen=True)
class CommandRequest:
    """A fresh semantic request; ``command`` wins over the other fields."""
    command: Optional[str] = None
    onoff: Optional[bool] = None
    speed: Optional[int] = None
    light: Optional[bool] = None


# ───────── effects ──────────
@dataclass(frozen=True)
class CancelTimer:
    purpose: str


@dataclass(frozen=True)
class ArmRunOut:
    pass


@dataclass(frozen=True)
class Resend:
    unit: str                               # re-sent as a repeated signal


@dataclass(frozen=True)
class Transition:
    state: HoodState
    payload: OutgoingPayload
    effects: tuple = field(default=())
    persist: bool = True


# ───────── inbound ──────────
def interpret_signal(state: HoodState, unit: str) -> Optional[Transition]:
    """
    Apply a received (or echoed) toggle to *state*.

    Returns ``None`` for units we do not know; those leave everything as is.
    """
    if unit == UNIT_ONOFF:
        return _interpret_onoff(state)

    if unit == UNIT_LIGHT:
        light = not state.light
        new = replace(state, light=light, light_history=light)
        return _mirror(new, unit, CMD_LIGHT_ON if light else CMD_LIGHT_OFF)

    if unit in (UNIT_INCREASE, UNIT_DECREASE):
        step = 1 if unit == UNIT_INCREASE else -1
        speed = clamp_speed(state.speed + step)
        new = replace(state, speed=speed, speed_history=speed, run_out_active=False)
        new, ramp = continue_ramp(new, unit)
        return _mirror(new, unit, REPEAT_COMMANDS[unit],
                       (CancelTimer(TIMER_RUN_OUT), *ramp))

    _LOGGER.debug("Ignoring signal with unknown unit %r", unit)
    return None


def _interpret_onoff(state: HoodState) -> Transition:
    was_on = state.is_on
    turning_off = state.run_out_active or was_on
    if turning_off:
        # first press only starts the run-out, the second one finalizes it
        speed = 0 if state.run_out_active else state.speed
        light = False
    else:
        speed = state.speed_history or 1
        light = bool(state.light_history)

    run_out_active = turning_off and not state.run_out_active
    effects: list = [CancelTimer(TIMER_RUN_OUT), CancelTimer(TIMER_RESEND)]
    if run_out_active:
        effects.append(select_run_out(state))

    new = replace(
        state,
        speed=speed,
        light=light,
        run_out_active=run_out_active,
        off_run_out=None,
        target_speed=None,
    )
    return _mirror(new, UNIT_ONOFF, CMD_OFF if turning_off else CMD_ON, tuple(effects))


def select_run_out(state: HoodState):
    """Fast-off when the pending power-off explicitly asked for it."""
    if state.off_run_out is False:
        return Resend(UNIT_ONOFF)
    return ArmRunOut()


def continue_ramp(state: HoodState, unit: str) -> tuple[HoodState, tuple]:
    """Schedule the next step towards ``target_speed`` or end the ramp."""
    target = state.target_speed
    if target is None:
        return state, ()
    if (unit == UNIT_INCREASE and state.speed < target) or \
            (unit == UNIT_DECREASE and state.speed > target):
        return state, (Resend(unit),)
    return replace(state, target_speed=None), ()


def finish_run_out(state: HoodState) -> Transition:
    """Run-out timer expired: the hood has stopped by itself."""
    new = replace(state, speed=0, run_out_active=False, target_speed=None)
    return Transition(new, OutgoingPayload(UNIT_NONE, CMD_OFF, 0, new.light))


def _mirror(state: HoodState, unit: str, command: str, effects: tuple = ()) -> Transition:
    speed = state.target_speed if state.target_speed is not None else state.speed
    return Transition(state, OutgoingPayload(unit, command, speed, state.light), effects)


# ───────── outbound ──────────
def assemble_repeat(state: HoodState, unit: str) -> Transition:
    """Internal re-send: no resolution, just mirror the current state."""
    payload = OutgoingPayload(unit, REPEAT_COMMANDS.get(unit), state.speed, state.light)
    return Transition(state, payload, persist=False)


def resolve_command(request: CommandRequest, state: HoodState, policy: HoodPolicy) -> str:
    if request.command is not None:
        return request.command

    command = None
    if request.onoff is not None:
        if policy.onoff_action == ONOFF_ACTION_LIGHT:
            command = CMD_LIGHT_ON if request.onoff else CMD_LIGHT_OFF
        elif policy.onoff_action == ONOFF_ACTION_HOOD:
            command = speed_level((state.speed_history or 1) if request.onoff else 0)
        elif request.onoff:
            command = CMD_ON
        else:
            command = CMD_OFF_RUN_OUT if policy.run_out else CMD_OFF
    if request.speed is not None:
        command = speed_level(request.speed)
    if request.light is not None:
        command = CMD_LIGHT_ON if request.light else CMD_LIGHT_OFF

    if command is None:
        raise ValueError("Nothing to send: no command, onoff, speed or light given")
    return command


def assemble_command(state: HoodState, request: CommandRequest, policy: HoodPolicy) -> Transition:
    """Resolve a fresh request to the unit to transmit and the expected state."""
    command = resolve_command(request, state, policy)
    effects: tuple = ()
    is_on = state.is_on
    light = state.light
    remembered = state.speed_history or state.speed or 1

    if command == CMD_ON:
        unit = UNIT_ONOFF if not is_on else UNIT_NONE
        speed = remembered
        if unit == UNIT_ONOFF:
            light = bool(state.light_history)

    elif command in (CMD_OFF, CMD_OFF_RUN_OUT):
        unit = UNIT_ONOFF if is_on else UNIT_NONE
        state = replace(state, off_run_out=command == CMD_OFF_RUN_OUT)
        speed = 0
        if unit == UNIT_ONOFF:
            light = False

    elif command in (CMD_TOGGLE_ONOFF, CMD_TOGGLE_ONOFF_RUN_OUT):
        unit = UNIT_ONOFF
        state = replace(state, off_run_out=is_on and command == CMD_TOGGLE_ONOFF_RUN_OUT)
        speed = 0 if is_on else remembered
        light = False if is_on else bool(state.light_history)

    elif command in (CMD_LIGHT_ON, CMD_LIGHT_OFF):
        light = command == CMD_LIGHT_ON
        unit = UNIT_LIGHT if light != state.light else UNIT_NONE
        speed = state.speed

    elif command == CMD_TOGGLE_LIGHT:
        unit = UNIT_LIGHT
        light = not state.light
        speed = state.speed

    elif command in (CMD_INCREASE, CMD_DECREASE):
        unit = UNIT_INCREASE if command == CMD_INCREASE else UNIT_DECREASE
        state = replace(state, target_speed=None)
        effects = (CancelTimer(TIMER_RESEND),)
        speed = clamp_speed(state.speed + (1 if unit == UNIT_INCREASE else -1))

    elif command in SPEED_COMMANDS:
        speed = int(command[len("speed_"):])
        # a new speed supersedes any ramp still in flight
        effects = (CancelTimer(TIMER_RESEND),)
        if speed == state.speed:
            unit = UNIT_NONE
            state = replace(state, target_speed=None)
        else:
            unit = UNIT_INCREASE if speed > state.speed else UNIT_DECREASE
            state = replace(state, target_speed=speed)

    else:
        raise ValueError(f"Unsupported command {command!r}")

    _LOGGER.debug("Command %s resolved to unit %s (speed %s, light %s)",
                  command, unit, speed, light)
    return Transition(state, OutgoingPayload(unit, command, speed, light), effects)
