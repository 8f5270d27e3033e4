"""
Shadow state of the hood.

The hood never reports anything back, so everything we know about it lives
in a settings record owned by the transport. ``ShadowStateStore`` is the only
place that reads or writes that record.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

from .const import (
    ATTR_SPEED,
    ATTR_SPEED_LEVEL,
    ATTR_LIGHT,
    ATTR_OFF_RUN_OUT,
    ATTR_RUN_OUT_ACTIVE,
    ATTR_TARGET_SPEED,
    ATTR_SPEED_HISTORY,
    ATTR_LIGHT_HISTORY,
    CONF_ONOFF_ACTION,
    CONF_RUN_OUT,
    DEF_OPTIONS,
    MAX_SPEED,
    MIN_SPEED,
    ONOFF_ACTIONS,
)

_LOGGER = logging.getLogger(__name__)


def clamp_speed(speed: int) -> int:
    return min(MAX_SPEED, max(MIN_SPEED, speed))


def speed_level(speed: int) -> str:
    return f"speed_{speed}"


@dataclass(frozen=True)
class HoodState:
    speed: int = 0
    light: bool = False
    run_out_active: bool = False
    off_run_out: Optional[bool] = None     # consumed once by the next power-off
    target_speed: Optional[int] = None     # only set mid-ramp
    speed_history: Optional[int] = None
    light_history: Optional[bool] = None

    @property
    def speed_level(self) -> str:
        return speed_level(self.speed)

    @property
    def is_on(self) -> bool:
        return self.speed > 0


@dataclass(frozen=True)
class HoodPolicy:
    onoff_action: str = DEF_OPTIONS[CONF_ONOFF_ACTION]
    run_out: bool = DEF_OPTIONS[CONF_RUN_OUT]


class SettingsBackend(Protocol):
    def get_settings(self) -> Mapping[str, Any]: ...
    def set_settings(self, settings: Mapping[str, Any]) -> None: ...


class ShadowStateStore:
    """Load/save ``HoodState`` through a key-value settings collaborator."""

    def __init__(self, backend: SettingsBackend):
        self._backend = backend

    def load(self) -> HoodState:
        settings = self._backend.get_settings()
        level = settings.get(ATTR_SPEED_LEVEL) or speed_level(0)
        return HoodState(
            speed=_parse_level(level),
            light=bool(settings.get(ATTR_LIGHT, False)),
            run_out_active=bool(settings.get(ATTR_RUN_OUT_ACTIVE, False)),
            off_run_out=_optional_bool(settings, ATTR_OFF_RUN_OUT),
            target_speed=_optional_speed(settings, ATTR_TARGET_SPEED),
            speed_history=_optional_speed(settings, ATTR_SPEED_HISTORY),
            light_history=_optional_bool(settings, ATTR_LIGHT_HISTORY),
        )

    def save(self, state: HoodState) -> dict[str, Any]:
        speed = state.speed or 0
        record = {
            # public
            ATTR_SPEED: speed,
            ATTR_SPEED_LEVEL: speed_level(speed),
            ATTR_LIGHT: state.light,
            # internal
            ATTR_OFF_RUN_OUT: state.off_run_out,
            ATTR_RUN_OUT_ACTIVE: state.run_out_active,
            ATTR_TARGET_SPEED: state.target_speed,
            ATTR_SPEED_HISTORY: state.speed_history,
            ATTR_LIGHT_HISTORY: state.light_history,
        }
        try:
            self._backend.set_settings(record)
        except Exception:
            _LOGGER.error("Error saving hood state %s", record)
            raise
        _LOGGER.debug("Saved hood state %s", record)
        return record

    def load_policy(self) -> HoodPolicy:
        settings = self._backend.get_settings()
        action = settings.get(CONF_ONOFF_ACTION) or DEF_OPTIONS[CONF_ONOFF_ACTION]
        if action not in ONOFF_ACTIONS:
            _LOGGER.warning("Unknown %s %r, using %s",
                            CONF_ONOFF_ACTION, action, DEF_OPTIONS[CONF_ONOFF_ACTION])
            action = DEF_OPTIONS[CONF_ONOFF_ACTION]
        return HoodPolicy(
            onoff_action=action,
            run_out=bool(settings.get(CONF_RUN_OUT, DEF_OPTIONS[CONF_RUN_OUT])),
        )


# ───────── field validation ──────────
def _parse_level(level: Any) -> int:
    prefix, _, suffix = str(level).partition("speed_")
    try:
        if prefix:
            raise ValueError(level)
        speed = int(suffix)
    except ValueError:
        _LOGGER.warning("Invalid %s %r, assuming speed_0", ATTR_SPEED_LEVEL, level)
        return 0
    if not MIN_SPEED <= speed <= MAX_SPEED:
        _LOGGER.warning("Out of range %s %r, assuming speed_0", ATTR_SPEED_LEVEL, level)
        return 0
    return speed


def _optional_speed(settings: Mapping[str, Any], key: str) -> Optional[int]:
    value = settings.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) \
            or not MIN_SPEED <= value <= MAX_SPEED:
        _LOGGER.warning("Ignoring invalid %s %r", key, value)
        return None
    return value


def _optional_bool(settings: Mapping[str, Any], key: str) -> Optional[bool]:
    value = settings.get(key)
    if value is None:
        return None
    return bool(value)
