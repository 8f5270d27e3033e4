from __future__ import annotations
import logging
from typing import TYPE_CHECKING

from .const import (
    DOMAIN,
    CONF_REMOTE,
    CONF_DEVICE,
    CONF_ADDRESS,
    EVENT_SIGNAL,
    STORAGE_VERSION,
)

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import Event, HomeAssistant

_LOGGER = logging.getLogger(__name__)

PLATFORMS = ["fan", "light", "button"]


async def async_setup(hass: HomeAssistant, _: dict) -> bool:
    return True                                    # YAML disabled


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    # imported here so the engine can be used without Home Assistant loaded
    from homeassistant.core import callback
    from homeassistant.helpers.storage import Store
    from .controller import HoodController
    from .timers import TimerRegistry
    from .transport import RemoteTransport

    store = Store(hass, STORAGE_VERSION, f"{DOMAIN}.{entry.entry_id}")
    transport = RemoteTransport(
        hass,
        store,
        entry.data[CONF_REMOTE],
        entry.data[CONF_DEVICE],
        address=entry.data.get(CONF_ADDRESS),
        options=entry.options,
    )
    await transport.async_load()
    controller = HoodController(transport, TimerRegistry(hass.loop))

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "transport": transport,
        "controller": controller,
    }

    @callback
    def _handle_signal(event: Event) -> None:
        controller.handle_event(event.data)

    entry.async_on_unload(hass.bus.async_listen(EVENT_SIGNAL, _handle_signal))
    entry.async_on_unload(entry.add_update_listener(_async_options_updated))
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    return True


async def _async_options_updated(hass: HomeAssistant, entry: ConfigEntry) -> None:
    _LOGGER.info("Options for %s changed: %s", entry.title, dict(entry.options))
    await hass.config_entries.async_reload(entry.entry_id)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    unloaded = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unloaded:
        data = hass.data[DOMAIN].pop(entry.entry_id, None)
        if data:
            data["controller"].shutdown()
            await data["transport"].async_flush()
    return unloaded
