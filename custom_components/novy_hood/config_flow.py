from __future__ import annotations
import voluptuous as vol
from homeassistant import config_entries
from homeassistant.const import CONF_NAME
from homeassistant.core import callback
from homeassistant.helpers.selector import selector
from .const import (
    DOMAIN,
    CONF_REMOTE,
    CONF_DEVICE,
    CONF_ADDRESS,
    CONF_ONOFF_ACTION,
    CONF_RUN_OUT,
    DEF_OPTIONS,
    ONOFF_ACTIONS,
)

ADDRESS_BITS = 10


def _options_schema(defaults) -> dict:
    return {
        vol.Required(
            CONF_ONOFF_ACTION,
            default=defaults.get(CONF_ONOFF_ACTION, DEF_OPTIONS[CONF_ONOFF_ACTION]),
        ): selector({"select": {"options": list(ONOFF_ACTIONS)}}),
        vol.Required(
            CONF_RUN_OUT,
            default=defaults.get(CONF_RUN_OUT, DEF_OPTIONS[CONF_RUN_OUT]),
        ): bool,
    }


def _valid_address(address: str) -> bool:
    return len(address) == ADDRESS_BITS and set(address) <= {"0", "1"}


class NovyHoodConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    VERSION = 1
    _LOGGER = __import__("logging").getLogger(__name__)

    # ───────────────── STEP: USER ─────────────────
    async def async_step_user(self, user_input=None):
        errors = {}
        schema = vol.Schema(
            {
                vol.Required(CONF_REMOTE): selector({"entity": {"domain": "remote"}}),
                vol.Required(CONF_DEVICE, default="novy_hood"): str,
                vol.Optional(CONF_ADDRESS): str,
                vol.Optional(CONF_NAME): str,
                **_options_schema({}),
            }
        )

        if user_input is not None:
            address = user_input.get(CONF_ADDRESS)
            if address and not _valid_address(address):
                errors[CONF_ADDRESS] = "invalid_address"
                return self.async_show_form(step_id="user", data_schema=schema, errors=errors)

            # one entry per learned-command device on a remote
            unique_id = f"{user_input[CONF_REMOTE]}_{user_input[CONF_DEVICE]}"
            await self.async_set_unique_id(unique_id)
            self._abort_if_unique_id_configured()
            data = {
                CONF_REMOTE: user_input[CONF_REMOTE],
                CONF_DEVICE: user_input[CONF_DEVICE],
                CONF_NAME: user_input.get(CONF_NAME) or "Novy hood",
            }
            if address:
                data[CONF_ADDRESS] = address
            options = {
                CONF_ONOFF_ACTION: user_input[CONF_ONOFF_ACTION],
                CONF_RUN_OUT: user_input[CONF_RUN_OUT],
            }
            self._LOGGER.debug("Creating entry %s", data)
            return self.async_create_entry(title=data[CONF_NAME], data=data, options=options)

        return self.async_show_form(step_id="user", data_schema=schema)

    # ───────────────── OPTIONS FLOW ─────────────────
    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        return NovyHoodOptionsFlow(config_entry)


class NovyHoodOptionsFlow(config_entries.OptionsFlow):
    """Change what on/off means and whether power-off runs out."""
    def __init__(self, entry):
        self.entry = entry

    async def async_step_init(self, user_input=None):
        if user_input is None:
            schema = vol.Schema(_options_schema(self.entry.options))
            return self.async_show_form(step_id="init", data_schema=schema)

        return self.async_create_entry(title="", data=user_input)
