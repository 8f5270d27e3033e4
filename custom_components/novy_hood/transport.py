"""
Everything the controller needs from the outside world: a settings record,
a way to transmit a unit and a place to publish state changes.

``RemoteTransport`` is the Home Assistant implementation.  It transmits
through ``remote.send_command`` using commands learned on the remote under
the names of the four units, so no RF encoding happens here.
"""
from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Protocol

from .const import (
    CONF_ONOFF_ACTION,
    CONF_RUN_OUT,
    DEF_OPTIONS,
    DEF_STATE,
    SAVE_DELAY,
)

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.storage import Store
    from .engine import OutgoingPayload

_LOGGER = logging.getLogger(__name__)


class HoodTransport(Protocol):
    def get_settings(self) -> Mapping[str, Any]: ...
    def set_settings(self, settings: Mapping[str, Any]) -> None: ...
    async def async_send(self, payload: "OutgoingPayload") -> None: ...
    def matches(self, data: Mapping[str, Any]) -> bool: ...
    def update(self, payload: "OutgoingPayload") -> None: ...


class RemoteTransport:
    def __init__(self,
                 hass: "HomeAssistant",
                 store: "Store",
                 remote_entity: str,
                 device: str,
                 *,
                 address: str | None = None,
                 options: Mapping[str, Any] | None = None):
        self.hass = hass
        self._store = store
        self._remote_entity_id = remote_entity
        self._device = device
        self._address = address or None
        self._options = {**DEF_OPTIONS, **(options or {})}
        self._data: dict[str, Any] = dict(DEF_STATE)
        self._listeners: list[Callable[[], None]] = []

    async def async_load(self) -> None:
        """Read the persisted shadow state; a fresh device gets the defaults."""
        if (stored := await self._store.async_load()) is not None:
            self._data.update(stored)
        _LOGGER.debug("Loaded shadow state for %s: %s", self._device, self._data)

    # ─────── settings ───────
    def get_settings(self) -> Mapping[str, Any]:
        return {
            **self._data,
            CONF_ONOFF_ACTION: self._options[CONF_ONOFF_ACTION],
            CONF_RUN_OUT: self._options[CONF_RUN_OUT],
        }

    def set_settings(self, settings: Mapping[str, Any]) -> None:
        self._data.update({k: v for k, v in settings.items() if k in DEF_STATE})
        self._store.async_delay_save(lambda: dict(self._data), SAVE_DELAY)

    async def async_flush(self) -> None:
        """Write the shadow state now instead of waiting for the delayed save."""
        await self._store.async_save(dict(self._data))

    # ─────── radio ───────
    async def async_send(self, payload: "OutgoingPayload") -> None:
        _LOGGER.debug("Sending %s via %s", payload.unit, self._remote_entity_id)
        await self.hass.services.async_call(
            "remote",
            "send_command",
            {
                "entity_id": self._remote_entity_id,
                "device": self._device,
                "command": [payload.unit],
            },
            blocking=True,
        )

    def matches(self, data: Mapping[str, Any]) -> bool:
        if not data.get("unit"):
            return False
        if self._address is None:
            return True
        return data.get("address") == self._address

    # ─────── listeners ───────
    def add_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return remove

    def update(self, payload: Optional["OutgoingPayload"] = None) -> None:
        for listener in list(self._listeners):
            listener()
