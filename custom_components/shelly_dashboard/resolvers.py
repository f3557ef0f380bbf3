"""Field resolvers that infer dashboard values from a device's entities.

Every resolver follows the same shape: walk an ordered list of rules, take
the first entity that matches, then read its current state. A resolver that
finds nothing returns its "unknown" value; missing data is never an error.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
import ipaddress
import re
from urllib.parse import urlsplit

from .const import (
    ATTR_INSTALLED_VERSION,
    ATTR_LATEST_VERSION,
    CHANNEL_SUFFIX,
    DEAD_STATES,
    EMBEDDED_IPV4_PATTERN,
    INVALID_HOSTS,
    IPV4_PATTERN,
    PRIMARY_DOMAIN_PRIORITY,
)
from .models import DeviceRecord, EntityRecord, StateLookup, StateSnapshot, TriState


@dataclass(frozen=True)
class EntityRule:
    """Match entities by domain and an entity id pattern."""

    domains: tuple[str, ...]
    pattern: re.Pattern[str]
    match_object_id: bool = False

    def matches(self, entity: EntityRecord) -> bool:
        """Return True if the entity satisfies this rule."""
        if entity.domain not in self.domains:
            return False
        subject = entity.object_id if self.match_object_id else entity.entity_id
        return self.pattern.search(subject) is not None


def first_match(
    entities: Iterable[EntityRecord], rules: Sequence[EntityRule]
) -> EntityRecord | None:
    """Return the first entity, in group order, matched by any rule."""
    for entity in entities:
        if any(rule.matches(entity) for rule in rules):
            return entity
    return None


def _rule(domains: str | tuple[str, ...], pattern: str, **kwargs: bool) -> EntityRule:
    if isinstance(domains, str):
        domains = (domains,)
    return EntityRule(domains, re.compile(pattern, re.IGNORECASE), **kwargs)


# Status fields, one ordered rule list each
CLOUD_RULES = (_rule(("binary_sensor", "switch"), r"_cloud$"),)
TEMPERATURE_RULES = (_rule("sensor", r"_device_temperature$"),)
RSSI_RULES = (_rule("sensor", r"_rssi$"),)
UPTIME_RULES = (_rule("sensor", r"_uptime$"),)
FIRMWARE_RULES = (_rule("update", r"_firmware_update$"),)
REBOOT_RULES = (_rule("button", r"_reboot$"),)

# Tried one at a time, in priority order
IP_SENSOR_RULES = (
    _rule("sensor", r"wifi_?ip$", match_object_id=True),
    _rule("sensor", r"ip_?address$", match_object_id=True),
    _rule("sensor", r"_ip$", match_object_id=True),
    _rule("sensor", r"^ip$", match_object_id=True),
)


def live_value(state: StateSnapshot | None) -> str | None:
    """Return the state value, or None if it carries nothing usable."""
    if state is None or not state.state or state.state in DEAD_STATES:
        return None
    return state.state


def is_ipv4(value: str | None) -> bool:
    """Return True for a dotted quad with every octet in range."""
    if not value or IPV4_PATTERN.fullmatch(value) is None:
        return False
    return all(int(octet) <= 255 for octet in value.split("."))


def _valid_host(host: str | None) -> bool:
    if not host or host.lower() in INVALID_HOSTS or not is_ipv4(host):
        return False
    # Zero padded octets are valid here but rejected by ipaddress
    octets = [int(octet) for octet in host.split(".")]
    return not ipaddress.IPv4Address(bytes(octets)).is_loopback


def host_from_url(url: str) -> str | None:
    """Extract a device address from a configuration URL."""
    try:
        host = urlsplit(url).hostname
    except ValueError:
        host = None

    if not host:
        # No scheme, or not parseable as a URL at all
        cleaned = re.sub(r"^https?://", "", url.strip(), flags=re.IGNORECASE)
        host = cleaned.rstrip("/").split("/")[0].split(":")[0]

    return host if _valid_host(host) else None


def select_primary_entity(
    entities: Sequence[EntityRecord], state_of: StateLookup
) -> EntityRecord | None:
    """Pick the entity that best represents the device."""
    if not entities:
        return None

    candidates = [entity for entity in entities if not entity.entity_category]
    if not candidates:
        return entities[0]

    for domain in PRIMARY_DOMAIN_PRIORITY:
        of_domain = [entity for entity in candidates if entity.domain == domain]
        if not of_domain:
            continue
        with_state = [e for e in of_domain if state_of(e.entity_id) is not None]
        if not with_state:
            return of_domain[0]
        for entity in with_state:
            if not CHANNEL_SUFFIX.search(entity.entity_id):
                return entity
        return with_state[0]

    for entity in candidates:
        if state_of(entity.entity_id) is not None:
            return entity
    return candidates[0]


def resolve_ip(
    device: DeviceRecord, entities: Sequence[EntityRecord], state_of: StateLookup
) -> str:
    """Resolve the device's IPv4 address, or an empty string."""
    if device.configuration_url:
        host = host_from_url(device.configuration_url)
        if host:
            return host

    for rule in IP_SENSOR_RULES:
        entity = first_match(entities, (rule,))
        if entity is None:
            continue
        value = live_value(state_of(entity.entity_id))
        if value and is_ipv4(value):
            return value

    for entity in entities:
        if entity.domain != "sensor":
            continue
        value = live_value(state_of(entity.entity_id))
        if value and is_ipv4(value):
            return value

    if device.name:
        for candidate in EMBEDDED_IPV4_PATTERN.findall(device.name):
            if is_ipv4(candidate):
                return candidate

    return ""


def resolve_mac(device: DeviceRecord) -> str:
    """Return the first MAC connection of the device."""
    for kind, value in device.connections:
        if kind == "mac":
            return value
    return ""


def resolve_cloud(entities: Sequence[EntityRecord], state_of: StateLookup) -> TriState:
    """Return whether the device is connected to the vendor cloud."""
    entity = first_match(entities, CLOUD_RULES)
    if entity is None:
        return TriState.UNKNOWN
    state = state_of(entity.entity_id)
    if state is None:
        return TriState.UNKNOWN
    return TriState.from_bool(state.state == "on")


def resolve_reading(
    entities: Sequence[EntityRecord],
    state_of: StateLookup,
    rules: Sequence[EntityRule],
    *,
    numeric: bool = False,
) -> tuple[str | None, str | None]:
    """Return the live state and entity id of the first matching entity.

    Both are None if there is no matching entity or its state is not live.
    """
    entity = first_match(entities, rules)
    if entity is None:
        return None, None
    value = live_value(state_of(entity.entity_id))
    if value is None:
        return None, None
    if numeric:
        try:
            float(value)
        except ValueError:
            return None, None
    return value, entity.entity_id


@dataclass
class FirmwareStatus:
    """Firmware update information of a device."""

    entity_id: str | None = None
    up_to_date: TriState = TriState.UNKNOWN
    update_available: bool = False
    installed_version: str | None = None
    latest_version: str | None = None


def resolve_firmware(
    entities: Sequence[EntityRecord], state_of: StateLookup
) -> FirmwareStatus:
    """Return the firmware update status from the device's update entity."""
    entity = first_match(entities, FIRMWARE_RULES)
    if entity is None:
        return FirmwareStatus()

    status = FirmwareStatus(entity_id=entity.entity_id)
    state = state_of(entity.entity_id)
    if state is None:
        return status

    if state.state == "on":
        status.update_available = True
        status.up_to_date = TriState.FALSE
    elif state.state == "off":
        status.up_to_date = TriState.TRUE

    installed = state.attributes.get(ATTR_INSTALLED_VERSION)
    latest = state.attributes.get(ATTR_LATEST_VERSION)
    status.installed_version = str(installed) if installed is not None else None
    status.latest_version = str(latest) if latest is not None else None
    return status


def resolve_reboot(entities: Sequence[EntityRecord]) -> str | None:
    """Return the reboot button entity id, if the device has one."""
    entity = first_match(entities, REBOOT_RULES)
    return entity.entity_id if entity else None
