"""Shared helpers for Shelly Dashboard tests."""

from __future__ import annotations

import asyncio

from custom_components.shelly_dashboard.api import (
    ShellyDashboardCommandError,
    ShellyDashboardRegistryError,
)
from custom_components.shelly_dashboard.models import (
    DeviceRecord,
    EntityRecord,
    StateSnapshot,
)


class FakeRegistrySource:
    """In-memory stand-in for the Home Assistant registries."""

    def __init__(self) -> None:
        self.devices: list[DeviceRecord] = []
        self.entities: list[EntityRecord] = []
        self.states: dict[str, StateSnapshot] = {}
        self.fail = False
        self.fail_commands = False
        self.list_calls = 0
        self.commands: list[tuple[str, str]] = []
        # Cleared to hold a load inside the registry query
        self.release = asyncio.Event()
        self.release.set()

    async def async_list_devices(self) -> list[DeviceRecord]:
        self.list_calls += 1
        await self.release.wait()
        if self.fail:
            raise ShellyDashboardRegistryError("device registry unavailable")
        return list(self.devices)

    async def async_list_entities(self) -> list[EntityRecord]:
        return list(self.entities)

    def state_of(self, entity_id: str) -> StateSnapshot | None:
        return self.states.get(entity_id)

    async def async_install_update(self, entity_id: str) -> None:
        await self._async_command("install_update", entity_id)

    async def async_press_button(self, entity_id: str) -> None:
        await self._async_command("press_button", entity_id)

    async def _async_command(self, name: str, entity_id: str) -> None:
        if self.fail_commands:
            raise ShellyDashboardCommandError(f"{name} failed for {entity_id}")
        self.commands.append((name, entity_id))

