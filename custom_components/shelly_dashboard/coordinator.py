"""Data update coordinator for the Shelly dashboard."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime
import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import CALLBACK_TYPE, HomeAssistant
from homeassistant.helpers.event import async_call_later
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .api import ShellyDashboardRegistryError, ShellyRegistrySource
from .const import CONF_RELOAD_DELAY, DEFAULT_RELOAD_DELAY, DOMAIN
from .engine import resolve_dashboard
from .models import DashboardData, DashboardRow
from .sorting import SortState

_LOGGER = logging.getLogger(__name__)


class ShellyDashboardCoordinator(DataUpdateCoordinator[DashboardData]):
    """Shelly dashboard data update coordinator.

    Rows are only rebuilt on request: when the dashboard asks for them, after
    a reload, or a short while after a command was sent to a device.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        entry: ConfigEntry,
        source: ShellyRegistrySource,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            config_entry=entry,
            name=DOMAIN,
            update_interval=None,
        )
        self.source = source
        self.reload_delay: float = entry.options.get(
            CONF_RELOAD_DELAY, entry.data.get(CONF_RELOAD_DELAY, DEFAULT_RELOAD_DELAY)
        )
        self.sort = SortState()
        self.loading = False
        self.error: str | None = None
        self._cancel_reload: CALLBACK_TYPE | None = None

    async def _async_update_data(self) -> DashboardData:
        """Fetch both registries and resolve them into rows.

        Returns:
            Rows in registry order, one per physical device

        Raises:
            UpdateFailed: If a registry cannot be read

        """
        try:
            devices, entities = await asyncio.gather(
                self.source.async_list_devices(),
                self.source.async_list_entities(),
            )
        except ShellyDashboardRegistryError as err:
            raise UpdateFailed(f"Error reading registries: {err}") from err

        return resolve_dashboard(devices, entities, self.source.state_of)

    async def async_load(self) -> None:
        """Rebuild all rows, unless a load is already running.

        Rows from the previous successful load are kept when this one fails.
        """
        if self.loading:
            _LOGGER.debug("Load already in progress, ignoring request")
            return

        self.loading = True
        self.error = None
        self.async_update_listeners()
        try:
            await self.async_refresh()
        finally:
            self.loading = False

        if not self.last_update_success:
            self.error = str(self.last_exception)
        self.async_update_listeners()

    def toggle_sort(self, key: str) -> None:
        """Sort by a column, flipping the direction if it is already active."""
        self.sort.toggle(key)
        self.async_update_listeners()

    @property
    def rows(self) -> list[DashboardRow]:
        """Return the rows ordered by the active sort."""
        return self.sort.apply(self.data or [])

    def as_dict(self) -> dict[str, Any]:
        """Return the dashboard payload."""
        return {
            "rows": [row.as_dict() for row in self.rows],
            "loading": self.loading,
            "error": self.error,
            "sort": self.sort.as_dict(),
        }

    async def async_install_update(self, entity_id: str) -> None:
        """Install the firmware update offered by an update entity."""
        await self._async_command(self.source.async_install_update, entity_id)

    async def async_reboot(self, entity_id: str) -> None:
        """Reboot a device through its reboot button."""
        await self._async_command(self.source.async_press_button, entity_id)

    async def _async_command(
        self, command: Callable[[str], Awaitable[None]], entity_id: str
    ) -> None:
        await command(entity_id)
        self._schedule_reload()

    def _schedule_reload(self) -> None:
        """Reload once the device had time to report its new state."""
        if self._cancel_reload:
            self._cancel_reload()
        _LOGGER.debug("Reloading dashboard in %s seconds", self.reload_delay)
        self._cancel_reload = async_call_later(
            self.hass, self.reload_delay, self._async_reload_later
        )

    async def _async_reload_later(self, _now: datetime) -> None:
        self._cancel_reload = None
        await self.async_load()

    async def async_shutdown(self) -> None:
        """Cancel a pending reload."""
        if self._cancel_reload:
            self._cancel_reload()
            self._cancel_reload = None
        await super().async_shutdown()
