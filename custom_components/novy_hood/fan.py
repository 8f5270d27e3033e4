from __future__ import annotations
from typing import Any, Optional
import logging
import math
from homeassistant.components.fan import FanEntity, FanEntityFeature
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.const import CONF_NAME
from homeassistant.config_entries import ConfigEntry
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.util.percentage import ranged_value_to_percentage, percentage_to_ranged_value
from homeassistant.util.scaling import int_states_in_range
from .const import (
    DOMAIN,
    MAX_SPEED,
    ATTR_SPEED_LEVEL,
    ATTR_RUN_OUT_ACTIVE,
    ATTR_TARGET_SPEED,
)
from .controller import HoodController
from .transport import RemoteTransport

_LOGGER = logging.getLogger(__name__)
SPEED_RANGE: tuple[int, int] = (1, MAX_SPEED)       # 0 is *not* in the range


def device_info(entry: ConfigEntry) -> DeviceInfo:
    return DeviceInfo(
        identifiers={(DOMAIN, entry.entry_id)},
        name=entry.data.get(CONF_NAME) or entry.title,
        manufacturer="Novy",
        model="Intouch hood",
    )


class NovyHoodFan(FanEntity):
    _attr_supported_features = (
        FanEntityFeature.SET_SPEED
        | FanEntityFeature.TURN_ON
        | FanEntityFeature.TURN_OFF
    )
    _attr_should_poll = False
    _attr_has_entity_name = True
    _attr_name = None

    def __init__(self, entry: ConfigEntry, controller: HoodController, transport: RemoteTransport):
        self._controller = controller
        self._transport = transport
        self._attr_unique_id = f"{entry.entry_id}_fan"
        self._attr_device_info = device_info(entry)

    async def async_added_to_hass(self) -> None:
        self.async_on_remove(self._transport.add_listener(self.async_write_ha_state))

    # ─────── FanEntity API ───────
    @property
    def is_on(self) -> bool:
        return self._controller.state.is_on

    @property
    def percentage(self) -> Optional[int]:
        speed = self._controller.state.speed
        if speed == 0:
            return 0
        return ranged_value_to_percentage(SPEED_RANGE, speed)

    @property
    def speed_count(self) -> int:
        return int_states_in_range(SPEED_RANGE)

    async def async_set_percentage(self, percentage: int) -> None:
        # round UP so any non-zero percentage runs the hood
        speed = math.ceil(percentage_to_ranged_value(SPEED_RANGE, percentage)) if percentage else 0
        await self._controller.async_send_command(speed=min(speed, MAX_SPEED))

    async def async_turn_on(self,
                            percentage: int | None = None,
                            preset_mode: str | None = None,
                            **kwargs: Any) -> None:
        if percentage is not None:
            await self.async_set_percentage(percentage)
            return
        await self._controller.async_send_command(onoff=True)

    async def async_turn_off(self, **kwargs: Any) -> None:
        await self._controller.async_send_command(onoff=False)

    # ─────── state attributes ───────
    @property
    def extra_state_attributes(self):
        state = self._controller.state
        return {
            ATTR_SPEED_LEVEL: state.speed_level,
            ATTR_RUN_OUT_ACTIVE: state.run_out_active,
            ATTR_TARGET_SPEED: state.target_speed,
        }


async def async_setup_entry(
    hass, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    data = hass.data[DOMAIN][entry.entry_id]
    fan = NovyHoodFan(entry, data["controller"], data["transport"])
    async_add_entities([fan])
    data.setdefault("entities", []).append(fan)
