"""Registry access for the Shelly dashboard."""

from __future__ import annotations

import logging

import voluptuous as vol

from homeassistant.const import ATTR_ENTITY_ID
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import device_registry as dr, entity_registry as er

from .models import DeviceRecord, EntityRecord, StateSnapshot

_LOGGER = logging.getLogger(__name__)


class ShellyDashboardError(HomeAssistantError):
    """Base exception for the Shelly dashboard."""


class ShellyDashboardRegistryError(ShellyDashboardError):
    """Exception to indicate the registries could not be read."""


class ShellyDashboardCommandError(ShellyDashboardError):
    """Exception to indicate a device command failed."""


def device_record(entry: dr.DeviceEntry) -> DeviceRecord:
    """Convert a device registry entry."""
    return DeviceRecord(
        id=entry.id,
        name=entry.name_by_user or entry.name,
        model=entry.model,
        manufacturer=entry.manufacturer,
        configuration_url=entry.configuration_url,
        connections=tuple(sorted(entry.connections)),
    )


def entity_record(entry: er.RegistryEntry) -> EntityRecord:
    """Convert an entity registry entry."""
    return EntityRecord(
        entity_id=entry.entity_id,
        device_id=entry.device_id,
        platform=entry.platform,
        entity_category=str(entry.entity_category) if entry.entity_category else None,
    )


class ShellyRegistrySource:
    """Read devices, entities and states from Home Assistant."""

    def __init__(self, hass: HomeAssistant) -> None:
        """Initialize the registry source.

        Args:
            hass: Home Assistant instance owning the registries

        """
        self.hass = hass

    async def async_list_devices(self) -> list[DeviceRecord]:
        """Return every device in the device registry."""
        registry = dr.async_get(self.hass)
        return [device_record(entry) for entry in registry.devices.values()]

    async def async_list_entities(self) -> list[EntityRecord]:
        """Return every entity in the entity registry."""
        registry = er.async_get(self.hass)
        return [entity_record(entry) for entry in registry.entities.values()]

    def state_of(self, entity_id: str) -> StateSnapshot | None:
        """Return the current state of an entity, if it has one."""
        state = self.hass.states.get(entity_id)
        if state is None:
            return None
        return StateSnapshot(state=state.state, attributes=state.attributes)

    async def async_install_update(self, entity_id: str) -> None:
        """Start a firmware update.

        Raises:
            ShellyDashboardCommandError: If the service call fails

        """
        await self._async_call("update", "install", entity_id)

    async def async_press_button(self, entity_id: str) -> None:
        """Press a button entity, used to reboot a device.

        Raises:
            ShellyDashboardCommandError: If the service call fails

        """
        await self._async_call("button", "press", entity_id)

    async def _async_call(self, domain: str, service: str, entity_id: str) -> None:
        try:
            await self.hass.services.async_call(
                domain, service, {ATTR_ENTITY_ID: entity_id}, blocking=True
            )
        except (HomeAssistantError, vol.Invalid) as err:
            _LOGGER.error(
                "Failed to call %s.%s for %s: %s", domain, service, entity_id, err
            )
            raise ShellyDashboardCommandError(
                f"Failed to call {domain}.{service} for {entity_id}: {err}"
            ) from err
