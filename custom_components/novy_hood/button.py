"""One ButtonEntity per toggle-style command, plus the ``send_command`` service."""
from __future__ import annotations
import logging
import voluptuous as vol
from homeassistant.components.button import ButtonEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import ATTR_ENTITY_ID
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from .const import (
    DOMAIN,
    COMMANDS,
    SERVICE_SEND_COMMAND,
    CMD_TOGGLE_ONOFF,
    CMD_TOGGLE_ONOFF_RUN_OUT,
    CMD_TOGGLE_LIGHT,
    CMD_INCREASE,
    CMD_DECREASE,
)
from .fan import device_info

_LOGGER = logging.getLogger(__name__)

BUTTONS = {
    CMD_TOGGLE_ONOFF: "Power",
    CMD_TOGGLE_ONOFF_RUN_OUT: "Power (run-out)",
    CMD_TOGGLE_LIGHT: "Light toggle",
    CMD_INCREASE: "Increase",
    CMD_DECREASE: "Decrease",
}

ATTR_COMMAND = "command"
SEND_COMMAND_SCHEMA = vol.Schema(
    {
        vol.Required(ATTR_ENTITY_ID): cv.entity_ids,
        vol.Required(ATTR_COMMAND): vol.In(COMMANDS),
    }
)


class NovyHoodButton(ButtonEntity):
    _attr_has_entity_name = True

    def __init__(self, entry: ConfigEntry, controller, command: str):
        self._controller = controller
        self._command = command
        self._attr_name = BUTTONS[command]
        self._attr_unique_id = f"{entry.entry_id}_{command}"
        # share the same HA Device as the fan
        self._attr_device_info = device_info(entry)

    async def async_press(self) -> None:
        await self._controller.async_send_command(self._command)


# ─────────────────────────────────────────────────────────────────────────────
# Platform-loader
# ─────────────────────────────────────────────────────────────────────────────
async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    data = hass.data[DOMAIN][entry.entry_id]
    buttons = [NovyHoodButton(entry, data["controller"], cmd) for cmd in BUTTONS]
    async_add_entities(buttons)
    data.setdefault("entities", []).extend(buttons)

    # Register the service exactly once for all hoods
    if hass.services.has_service(DOMAIN, SERVICE_SEND_COMMAND):
        return

    async def _service_handler(call: ServiceCall) -> None:
        await async_handle_send_command(hass, call)

    hass.services.async_register(
        DOMAIN, SERVICE_SEND_COMMAND, _service_handler, schema=SEND_COMMAND_SCHEMA
    )


async def async_handle_send_command(hass: HomeAssistant, call: ServiceCall) -> None:
    """Route the command to every hood owning one of the targeted entities."""
    command = call.data[ATTR_COMMAND]
    for eid in call.data[ATTR_ENTITY_ID]:
        controller = _controller_for(hass, eid)
        if controller is None:
            _LOGGER.warning("Service %s: %s is not a Novy hood entity", SERVICE_SEND_COMMAND, eid)
            continue
        _LOGGER.debug("Service %s: %s -> %s", SERVICE_SEND_COMMAND, eid, command)
        await controller.async_send_command(command)


def _controller_for(hass: HomeAssistant, entity_id: str):
    for data in hass.data.get(DOMAIN, {}).values():
        if any(ent.entity_id == entity_id for ent in data.get("entities", ())):
            return data["controller"]
    return None
