"""Turn registry snapshots into one dashboard row per Shelly device."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import logging

from .const import TARGET_MANUFACTURER, TARGET_PLATFORM
from .models import DashboardData, DashboardRow, DeviceRecord, EntityRecord, StateLookup
from .resolvers import (
    RSSI_RULES,
    TEMPERATURE_RULES,
    UPTIME_RULES,
    resolve_cloud,
    resolve_firmware,
    resolve_ip,
    resolve_mac,
    resolve_reading,
    resolve_reboot,
    select_primary_entity,
)

_LOGGER = logging.getLogger(__name__)

# Entities grouped by the device they belong to
type EntityGroups = dict[str, list[EntityRecord]]


def group_entities(entities: Iterable[EntityRecord]) -> EntityGroups:
    """Index entities by owning device, keeping registry order.

    Entities without a device are left out.
    """
    groups: EntityGroups = {}
    for entity in entities:
        if not entity.device_id:
            continue
        groups.setdefault(entity.device_id, []).append(entity)
    return groups


def is_family_device(device: DeviceRecord, entities: Sequence[EntityRecord]) -> bool:
    """Return True if the device belongs to the Shelly family."""
    if any(entity.platform == TARGET_PLATFORM for entity in entities):
        return True
    manufacturer = device.manufacturer or ""
    return manufacturer.casefold() == TARGET_MANUFACTURER


def filter_family(
    devices: Iterable[DeviceRecord], groups: EntityGroups
) -> list[DeviceRecord]:
    """Return the Shelly devices, in registry order."""
    return [
        device
        for device in devices
        if is_family_device(device, groups.get(device.id, []))
    ]


def build_row(
    device: DeviceRecord,
    entities: Sequence[EntityRecord],
    state_of: StateLookup,
    ip: str,
) -> DashboardRow:
    """Resolve every field of a device into a row."""
    primary = select_primary_entity(entities, state_of)
    temperature, temperature_entity_id = resolve_reading(
        entities, state_of, TEMPERATURE_RULES, numeric=True
    )
    rssi, rssi_entity_id = resolve_reading(entities, state_of, RSSI_RULES)
    uptime, uptime_entity_id = resolve_reading(entities, state_of, UPTIME_RULES)
    firmware = resolve_firmware(entities, state_of)

    return DashboardRow(
        device_id=device.id,
        name=device.name or device.model or device.id,
        model=device.model or "",
        primary_entity_id=primary.entity_id if primary else None,
        ip=ip,
        mac=resolve_mac(device),
        cloud=resolve_cloud(entities, state_of),
        temperature=temperature,
        temperature_entity_id=temperature_entity_id,
        rssi=rssi,
        rssi_entity_id=rssi_entity_id,
        uptime=uptime,
        uptime_entity_id=uptime_entity_id,
        firmware_update_entity_id=firmware.entity_id,
        firmware_up_to_date=firmware.up_to_date,
        firmware_update_available=firmware.update_available,
        firmware_version=firmware.installed_version,
        latest_firmware_version=firmware.latest_version,
        reboot_entity_id=resolve_reboot(entities),
        configuration_url=device.configuration_url or (f"http://{ip}/" if ip else ""),
    )


def build_rows(
    devices: Iterable[DeviceRecord], groups: EntityGroups, state_of: StateLookup
) -> DashboardData:
    """Build one row per physical device.

    A device is skipped when its id was already seen, or when its address
    belongs to a device that already has a row.
    """
    seen: set[tuple[str, str]] = set()
    rows: DashboardData = []

    for device in devices:
        device_key = ("device", device.id)
        if device_key in seen:
            continue

        entities = groups.get(device.id, [])
        ip = resolve_ip(device, entities, state_of)
        ip_key = ("ip", ip)
        if ip and ip_key in seen:
            _LOGGER.debug(
                "Skipping device %s, address %s is already shown", device.id, ip
            )
            continue

        seen.add(device_key)
        if ip:
            seen.add(ip_key)
        rows.append(build_row(device, entities, state_of, ip))

    return rows


def resolve_dashboard(
    devices: Iterable[DeviceRecord],
    entities: Iterable[EntityRecord],
    state_of: StateLookup,
) -> DashboardData:
    """Run the whole pipeline over one registry snapshot."""
    groups = group_entities(entities)
    family = filter_family(devices, groups)
    rows = build_rows(family, groups, state_of)
    _LOGGER.debug("Resolved %s rows from %s Shelly devices", len(rows), len(family))
    return rows
