from __future__ import annotations
from homeassistant.components.light import ColorMode, LightEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from .const import DOMAIN
from .fan import device_info


class NovyHoodLight(LightEntity):
    _attr_color_mode = ColorMode.ONOFF
    _attr_supported_color_modes = {ColorMode.ONOFF}
    _attr_should_poll = False
    _attr_has_entity_name = True
    _attr_name = "Light"

    def __init__(self, entry: ConfigEntry, controller, transport):
        self._controller = controller
        self._transport = transport
        self._attr_unique_id = f"{entry.entry_id}_light"
        self._attr_device_info = device_info(entry)

    async def async_added_to_hass(self) -> None:
        self.async_on_remove(self._transport.add_listener(self.async_write_ha_state))

    @property
    def is_on(self):
        return self._controller.state.light

    async def async_turn_on(self, **kwargs):
        await self._controller.async_send_command(light=True)

    async def async_turn_off(self, **kwargs):
        await self._controller.async_send_command(light=False)


async def async_setup_entry(
    hass, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    data = hass.data[DOMAIN][entry.entry_id]
    light = NovyHoodLight(entry, data["controller"], data["transport"])
    async_add_entities([light])
    data.setdefault("entities", []).append(light)
