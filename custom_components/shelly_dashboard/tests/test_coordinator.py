"""Test the Shelly Dashboard coordinator."""

import asyncio
from datetime import timedelta
from unittest.mock import patch

import pytest
from pytest_homeassistant_custom_component.common import (
    MockConfigEntry,
    async_fire_time_changed,
)

from custom_components.shelly_dashboard.api import ShellyDashboardCommandError
from custom_components.shelly_dashboard.const import DOMAIN
from custom_components.shelly_dashboard.coordinator import ShellyDashboardCoordinator
from custom_components.shelly_dashboard.models import DeviceRecord
from homeassistant.core import HomeAssistant
from homeassistant.util import dt as dt_util

from .common import FakeRegistrySource
from .const import MOCK_CONFIG


@pytest.fixture
def coordinator(
    hass: HomeAssistant, fake_source: FakeRegistrySource
) -> ShellyDashboardCoordinator:
    """Return a coordinator reading from the fake registries."""
    entry = MockConfigEntry(domain=DOMAIN, data=MOCK_CONFIG)
    entry.add_to_hass(hass)
    return ShellyDashboardCoordinator(hass, entry, fake_source)  # type: ignore[arg-type]


async def test_load(coordinator: ShellyDashboardCoordinator) -> None:
    """Test a load builds the rows."""
    await coordinator.async_load()

    assert coordinator.loading is False
    assert coordinator.error is None
    (row,) = coordinator.rows
    assert row.device_id == "relay"
    assert row.ip == "192.168.1.30"
    assert row.firmware_update_available is True
    assert row.firmware_version == "1.3.0"
    assert row.latest_firmware_version == "1.4.2"
    assert row.reboot_entity_id == "button.garage_reboot"


async def test_load_notifies_status(coordinator: ShellyDashboardCoordinator) -> None:
    """Test listeners see the load start and finish."""
    seen: list[bool] = []
    coordinator.async_add_listener(lambda: seen.append(coordinator.loading))

    await coordinator.async_load()

    assert seen[0] is True
    assert seen[-1] is False


async def test_failed_load_keeps_rows(
    coordinator: ShellyDashboardCoordinator, fake_source: FakeRegistrySource
) -> None:
    """Test a failing load reports an error and keeps the previous rows."""
    await coordinator.async_load()
    previous = coordinator.data

    fake_source.fail = True
    await coordinator.async_load()

    assert coordinator.loading is False
    assert "device registry unavailable" in coordinator.error
    assert coordinator.data is previous

    fake_source.fail = False
    await coordinator.async_load()
    assert coordinator.error is None


async def test_load_replaces_rows(
    coordinator: ShellyDashboardCoordinator, fake_source: FakeRegistrySource
) -> None:
    """Test every load rebuilds the rows from scratch."""
    await coordinator.async_load()
    fake_source.devices.append(DeviceRecord("plug", name="Plug", manufacturer="Shelly"))

    await coordinator.async_load()

    assert [row.device_id for row in coordinator.rows] == ["relay", "plug"]


async def test_overlapping_load_ignored(
    hass: HomeAssistant,
    coordinator: ShellyDashboardCoordinator,
    fake_source: FakeRegistrySource,
) -> None:
    """Test a load requested while another runs is ignored."""
    fake_source.release.clear()
    task = hass.async_create_task(coordinator.async_load())
    await asyncio.sleep(0)
    assert coordinator.loading is True

    await coordinator.async_load()

    fake_source.release.set()
    await task
    assert coordinator.loading is False
    assert fake_source.list_calls == 1
    assert len(coordinator.rows) == 1


async def test_toggle_sort(coordinator: ShellyDashboardCoordinator) -> None:
    """Test sorting notifies listeners and shows in the payload."""
    await coordinator.async_load()
    calls: list[None] = []
    coordinator.async_add_listener(lambda: calls.append(None))

    coordinator.toggle_sort("name")

    assert calls
    assert coordinator.as_dict()["sort"] == {"key": "name", "direction": "desc"}


async def test_payload(coordinator: ShellyDashboardCoordinator) -> None:
    """Test the payload sent to the dashboard."""
    await coordinator.async_load()
    payload = coordinator.as_dict()

    assert payload["loading"] is False
    assert payload["error"] is None
    assert payload["rows"][0]["firmware_up_to_date"] is False
    assert payload["rows"][0]["cloud"] is None


async def test_command_reloads_later(
    hass: HomeAssistant,
    coordinator: ShellyDashboardCoordinator,
    fake_source: FakeRegistrySource,
) -> None:
    """Test a successful command reloads after the delay."""
    await coordinator.async_load()
    calls = fake_source.list_calls

    await coordinator.async_install_update("update.garage_firmware_update")
    assert fake_source.commands == [("install_update", "update.garage_firmware_update")]
    assert fake_source.list_calls == calls

    async_fire_time_changed(hass, dt_util.utcnow() + timedelta(seconds=3))
    await hass.async_block_till_done()
    assert fake_source.list_calls == calls + 1

    await coordinator.async_shutdown()


async def test_reboot(
    hass: HomeAssistant,
    coordinator: ShellyDashboardCoordinator,
    fake_source: FakeRegistrySource,
) -> None:
    """Test rebooting presses the reboot button."""
    await coordinator.async_reboot("button.garage_reboot")
    assert fake_source.commands == [("press_button", "button.garage_reboot")]
    await coordinator.async_shutdown()


async def test_failed_command_does_not_reload(
    hass: HomeAssistant,
    coordinator: ShellyDashboardCoordinator,
    fake_source: FakeRegistrySource,
) -> None:
    """Test a failing command is raised and leaves the rows alone."""
    await coordinator.async_load()
    rows = coordinator.data
    calls = fake_source.list_calls
    fake_source.fail_commands = True

    with pytest.raises(ShellyDashboardCommandError):
        await coordinator.async_reboot("button.garage_reboot")

    async_fire_time_changed(hass, dt_util.utcnow() + timedelta(seconds=3))
    await hass.async_block_till_done()
    assert fake_source.list_calls == calls
    assert coordinator.data is rows


async def test_shutdown_cancels_reload(
    hass: HomeAssistant,
    coordinator: ShellyDashboardCoordinator,
    fake_source: FakeRegistrySource,
) -> None:
    """Test a pending reload is dropped on shutdown."""
    await coordinator.async_reboot("button.garage_reboot")
    await coordinator.async_shutdown()

    async_fire_time_changed(hass, dt_util.utcnow() + timedelta(seconds=3))
    await hass.async_block_till_done()
    assert fake_source.list_calls == 0


async def test_unexpected_error_is_reported(
    coordinator: ShellyDashboardCoordinator, fake_source: FakeRegistrySource
) -> None:
    """Test an unexpected error ends the load and keeps the previous rows."""
    await coordinator.async_load()
    previous = coordinator.data

    with patch.object(
        fake_source, "async_list_entities", side_effect=RuntimeError("bug")
    ):
        await coordinator.async_load()

    assert coordinator.loading is False
    assert coordinator.error == "bug"
    assert coordinator.data is previous
