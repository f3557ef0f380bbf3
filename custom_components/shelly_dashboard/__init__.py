"""Integration presenting every Shelly device on one dashboard."""

from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
import homeassistant.helpers.config_validation as cv
from homeassistant.helpers.dispatcher import async_dispatcher_send
from homeassistant.helpers.typing import ConfigType

from .api import ShellyRegistrySource
from .const import DOMAIN, SIGNAL_DASHBOARD_UPDATED
from .coordinator import ShellyDashboardCoordinator
from .websocket_api import async_register_websocket_commands

_LOGGER = logging.getLogger(__name__)

CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Register the dashboard websocket commands."""
    async_register_websocket_commands(hass)
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Shelly Dashboard from a config entry."""

    # Build the first set of rows, retried by Home Assistant if the registries fail
    coordinator = ShellyDashboardCoordinator(hass, entry, ShellyRegistrySource(hass))
    await coordinator.async_config_entry_first_refresh()
    _LOGGER.debug("Shelly dashboard set up with %s devices", len(coordinator.data))

    # Store coordinator for the websocket commands to access
    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = coordinator

    @callback
    def _async_signal_update() -> None:
        async_dispatcher_send(hass, SIGNAL_DASHBOARD_UPDATED)

    entry.async_on_unload(coordinator.async_add_listener(_async_signal_update))
    entry.async_on_unload(entry.add_update_listener(update_listener))

    # Subscribers from before a reload now follow the new coordinator
    _async_signal_update()

    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    coordinator: ShellyDashboardCoordinator = hass.data[DOMAIN].pop(entry.entry_id)
    await coordinator.async_shutdown()

    if not hass.data[DOMAIN]:
        hass.data.pop(DOMAIN)

    return True


async def update_listener(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle options update."""
    await hass.config_entries.async_reload(entry.entry_id)
