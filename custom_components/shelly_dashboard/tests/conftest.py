"""Global fixtures for Shelly Dashboard integration."""

from typing import Any

import pytest

from custom_components.shelly_dashboard.models import (
    DeviceRecord,
    EntityRecord,
    StateSnapshot,
)

from .common import FakeRegistrySource

pytest_plugins = "pytest_homeassistant_custom_component"


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> None:  # noqa: D103
    return


@pytest.fixture
def fake_source() -> FakeRegistrySource:
    """Return a registry source holding one Shelly relay."""
    source = FakeRegistrySource()
    source.devices.append(
        DeviceRecord(
            id="relay",
            name="Garage relay",
            model="Shelly Plus 1",
            manufacturer="Shelly",
            configuration_url="http://192.168.1.30/",
            connections=(("mac", "aa:bb:cc:dd:ee:30"),),
        )
    )
    source.entities.extend(
        [
            EntityRecord("switch.garage", "relay", "shelly"),
            EntityRecord("update.garage_firmware_update", "relay", "shelly", "config"),
            EntityRecord("button.garage_reboot", "relay", "shelly", "config"),
        ]
    )
    source.states["switch.garage"] = StateSnapshot("on")
    source.states["update.garage_firmware_update"] = StateSnapshot(
        "on", {"installed_version": "1.3.0", "latest_version": "1.4.2"}
    )
    return source
