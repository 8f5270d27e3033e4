from __future__ import annotations
import logging
from dataclasses import replace
from typing import Any, Mapping, Optional

from .const import (
    UNIT_NONE,
    TIMEOUTS,
    TIMER_RESEND,
    TIMER_RUN_OUT,
)
from .engine import (
    ArmRunOut,
    CancelTimer,
    CommandRequest,
    OutgoingPayload,
    Resend,
    Transition,
    assemble_command,
    assemble_repeat,
    finish_run_out,
    interpret_signal,
)
from .state import HoodState, ShadowStateStore
from .timers import TimerRegistry
from .transport import HoodTransport

_LOGGER = logging.getLogger(__name__)


class HoodController:
    """
    Drives one hood: runs requests and received signals through the engine,
    persists the result and executes the resulting timers and resends.

    Every unit we transmit is fed back to the interpreter as an echo, exactly
    as if it had been received from a handheld remote; that is what moves the
    shadow state forward and keeps ramps going.
    """

    def __init__(self, transport: HoodTransport, timers: TimerRegistry):
        self._transport = transport
        self._timers = timers
        self._store = ShadowStateStore(transport)
        self.last_payload: Optional[OutgoingPayload] = None

    @property
    def state(self) -> HoodState:
        return self._store.load()

    # ─────── outbound ───────
    async def async_send_command(self,
                                 command: str | None = None,
                                 *,
                                 onoff: bool | None = None,
                                 speed: int | None = None,
                                 light: bool | None = None) -> OutgoingPayload:
        request = CommandRequest(command=command, onoff=onoff, speed=speed, light=light)
        result = assemble_command(self._store.load(), request, self._store.load_policy())
        return await self._async_transmit(result)

    async def _async_resend(self, unit: str) -> OutgoingPayload:
        return await self._async_transmit(assemble_repeat(self._store.load(), unit))

    async def _async_transmit(self, result: Transition) -> OutgoingPayload:
        if result.persist:
            self._store.save(result.state)
        self._run_effects(result.effects)
        payload = result.payload
        self.last_payload = payload
        if payload.unit == UNIT_NONE:
            _LOGGER.debug("Nothing to transmit for %s", payload.command)
            self._transport.update(payload)
            return payload

        try:
            await self._transport.async_send(payload)
        except Exception:
            # nothing went out: no ramp continues and no power-off is pending
            _LOGGER.error("Sending %s failed", payload.unit)
            self._store.save(replace(self._store.load(), target_speed=None, off_run_out=None))
            raise
        self._apply_signal(payload.unit)
        return payload

    # ─────── inbound ───────
    def handle_event(self, data: Mapping[str, Any]) -> Optional[OutgoingPayload]:
        """Entry point for signals picked up by an RF receiver."""
        if not self._transport.matches(data):
            return None
        return self._apply_signal(data["unit"])

    def _apply_signal(self, unit: str) -> Optional[OutgoingPayload]:
        result = interpret_signal(self._store.load(), unit)
        if result is None:
            return None
        self._store.save(result.state)
        self._run_effects(result.effects)
        _LOGGER.debug("Signal %s -> %s", unit, result.payload.as_dict())
        self._transport.update(result.payload)
        return result.payload

    # ─────── timers ───────
    def _run_effects(self, effects) -> None:
        for effect in effects:
            if isinstance(effect, CancelTimer):
                self._timers.cancel(effect.purpose)
            elif isinstance(effect, ArmRunOut):
                self._timers.cancel(TIMER_RUN_OUT)
                self._timers.arm(TIMER_RUN_OUT, TIMEOUTS[TIMER_RUN_OUT], self._finish_run_out)
            elif isinstance(effect, Resend):
                unit = effect.unit
                self._timers.cancel(TIMER_RESEND)
                self._timers.arm(TIMER_RESEND, TIMEOUTS[TIMER_RESEND],
                                 lambda: self._async_resend(unit))

    def _finish_run_out(self) -> None:
        result = finish_run_out(self._store.load())
        self._store.save(result.state)
        _LOGGER.debug("Run-out finished")
        self._transport.update(result.payload)

    def shutdown(self) -> None:
        self._timers.cancel_all()
