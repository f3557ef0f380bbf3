"""Websocket commands serving the Shelly dashboard panel."""

from __future__ import annotations

from typing import Any

import voluptuous as vol

from homeassistant.components import websocket_api
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
import homeassistant.helpers.config_validation as cv
from homeassistant.helpers.dispatcher import async_dispatcher_connect

from .const import DOMAIN, SIGNAL_DASHBOARD_UPDATED
from .coordinator import ShellyDashboardCoordinator
from .sorting import SORT_KEYS

ERR_NOT_LOADED = "not_loaded"


@callback
def async_register_websocket_commands(hass: HomeAssistant) -> None:
    """Register the dashboard websocket commands."""
    websocket_api.async_register_command(hass, ws_rows)
    websocket_api.async_register_command(hass, ws_subscribe)
    websocket_api.async_register_command(hass, ws_reload)
    websocket_api.async_register_command(hass, ws_sort)
    websocket_api.async_register_command(hass, ws_install_update)
    websocket_api.async_register_command(hass, ws_reboot)


def _loaded_coordinator(hass: HomeAssistant) -> ShellyDashboardCoordinator | None:
    """Return the coordinator of the loaded entry, if there is one."""
    coordinators = hass.data.get(DOMAIN)
    if not coordinators:
        return None
    return next(iter(coordinators.values()))


def _get_coordinator(
    hass: HomeAssistant, connection: websocket_api.ActiveConnection, msg_id: int
) -> ShellyDashboardCoordinator | None:
    """Return the coordinator of the loaded entry, reporting an error if there is none."""
    if (coordinator := _loaded_coordinator(hass)) is None:
        connection.send_error(msg_id, ERR_NOT_LOADED, "Shelly Dashboard is not set up")
    return coordinator


@websocket_api.websocket_command({vol.Required("type"): f"{DOMAIN}/rows"})
@websocket_api.require_admin
@websocket_api.async_response
async def ws_rows(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    """Return the sorted rows, loading them first if there are none yet."""
    if (coordinator := _get_coordinator(hass, connection, msg["id"])) is None:
        return
    if not coordinator.data and not coordinator.loading:
        await coordinator.async_load()
    connection.send_result(msg["id"], coordinator.as_dict())


@websocket_api.websocket_command({vol.Required("type"): f"{DOMAIN}/subscribe"})
@websocket_api.require_admin
@callback
def ws_subscribe(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    """Send the dashboard payload after every status change.

    The subscription outlives entry reloads and always reports the coordinator
    that is currently loaded.
    """
    if _get_coordinator(hass, connection, msg["id"]) is None:
        return

    @callback
    def forward() -> None:
        if (coordinator := _loaded_coordinator(hass)) is None:
            return
        connection.send_message(
            websocket_api.event_message(msg["id"], coordinator.as_dict())
        )

    connection.subscriptions[msg["id"]] = async_dispatcher_connect(
        hass, SIGNAL_DASHBOARD_UPDATED, forward
    )
    connection.send_result(msg["id"])
    forward()


@websocket_api.websocket_command({vol.Required("type"): f"{DOMAIN}/reload"})
@websocket_api.require_admin
@websocket_api.async_response
async def ws_reload(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    """Rebuild the rows."""
    if (coordinator := _get_coordinator(hass, connection, msg["id"])) is None:
        return
    await coordinator.async_load()
    connection.send_result(msg["id"], coordinator.as_dict())


@websocket_api.websocket_command(
    {
        vol.Required("type"): f"{DOMAIN}/sort",
        vol.Required("key"): vol.In(sorted(SORT_KEYS)),
    }
)
@websocket_api.require_admin
@callback
def ws_sort(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    """Sort by a column, flipping the direction if it is already active."""
    if (coordinator := _get_coordinator(hass, connection, msg["id"])) is None:
        return
    coordinator.toggle_sort(msg["key"])
    connection.send_result(msg["id"], coordinator.as_dict())


@websocket_api.websocket_command(
    {
        vol.Required("type"): f"{DOMAIN}/install_update",
        vol.Required("entity_id"): cv.entity_id,
    }
)
@websocket_api.require_admin
@websocket_api.async_response
async def ws_install_update(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    """Start a firmware update."""
    if (coordinator := _get_coordinator(hass, connection, msg["id"])) is None:
        return
    try:
        await coordinator.async_install_update(msg["entity_id"])
    except HomeAssistantError as err:
        connection.send_error(
            msg["id"], websocket_api.ERR_HOME_ASSISTANT_ERROR, str(err)
        )
        return
    connection.send_result(msg["id"])


@websocket_api.websocket_command(
    {
        vol.Required("type"): f"{DOMAIN}/reboot",
        vol.Required("entity_id"): cv.entity_id,
    }
)
@websocket_api.require_admin
@websocket_api.async_response
async def ws_reboot(
    hass: HomeAssistant,
    connection: websocket_api.ActiveConnection,
    msg: dict[str, Any],
) -> None:
    """Reboot a device."""
    if (coordinator := _get_coordinator(hass, connection, msg["id"])) is None:
        return
    try:
        await coordinator.async_reboot(msg["entity_id"])
    except HomeAssistantError as err:
        connection.send_error(
            msg["id"], websocket_api.ERR_HOME_ASSISTANT_ERROR, str(err)
        )
        return
    connection.send_result(msg["id"])
