"""Data models for Shelly Dashboard integration."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass, field
from enum import Enum, StrEnum
from typing import Any

from .const import RSSI_EXCELLENT, RSSI_FAIR, RSSI_GOOD


class TriState(Enum):
    """A boolean that may also be unknown."""

    TRUE = True
    FALSE = False
    UNKNOWN = None

    @classmethod
    def from_bool(cls, value: bool) -> TriState:
        """Wrap a known boolean."""
        return cls.TRUE if value else cls.FALSE


class RssiTier(StrEnum):
    """Qualitative signal strength band."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


def split_entity_id(entity_id: str) -> tuple[str, str]:
    """Split an entity id into domain and object id at the first dot.

    An id without a dot has an empty domain.
    """
    domain, sep, object_id = entity_id.partition(".")
    if not sep:
        return "", entity_id
    return domain, object_id


@dataclass(frozen=True)
class DeviceRecord:
    """Device as seen in the host device registry."""

    id: str
    name: str | None = None
    model: str | None = None
    manufacturer: str | None = None
    configuration_url: str | None = None
    connections: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class EntityRecord:
    """Entity as seen in the host entity registry."""

    entity_id: str
    device_id: str | None = None
    platform: str | None = None
    entity_category: str | None = None

    @property
    def domain(self) -> str:
        """Return the domain encoded in the entity id."""
        return split_entity_id(self.entity_id)[0]

    @property
    def object_id(self) -> str:
        """Return the part of the entity id after the domain."""
        return split_entity_id(self.entity_id)[1]


@dataclass(frozen=True)
class StateSnapshot:
    """Current state of an entity at the time of reading."""

    state: str
    attributes: Mapping[str, Any] = field(default_factory=dict)


# Returns None when the entity has no state
type StateLookup = Callable[[str], StateSnapshot | None]


def rssi_tier(rssi: str | None) -> RssiTier | None:
    """Band a signal strength reading, boundaries belong to the better tier."""
    if rssi is None:
        return None
    try:
        value = int(float(rssi))
    except (TypeError, ValueError):
        return None
    if value >= RSSI_EXCELLENT:
        return RssiTier.EXCELLENT
    if value >= RSSI_GOOD:
        return RssiTier.GOOD
    if value >= RSSI_FAIR:
        return RssiTier.FAIR
    return RssiTier.POOR


@dataclass
class DashboardRow:
    """One physical device as presented on the dashboard."""

    device_id: str
    name: str
    model: str = ""
    primary_entity_id: str | None = None
    ip: str = ""
    mac: str = ""
    cloud: TriState = TriState.UNKNOWN
    temperature: str | None = None
    temperature_entity_id: str | None = None
    rssi: str | None = None
    rssi_entity_id: str | None = None
    uptime: str | None = None
    uptime_entity_id: str | None = None
    firmware_update_entity_id: str | None = None
    firmware_up_to_date: TriState = TriState.UNKNOWN
    firmware_update_available: bool = False
    firmware_version: str | None = None
    latest_firmware_version: str | None = None
    reboot_entity_id: str | None = None
    configuration_url: str = ""

    @property
    def rssi_tier(self) -> RssiTier | None:
        """Return the signal strength band."""
        return rssi_tier(self.rssi)

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON serialisable representation."""
        data = asdict(self)
        data["cloud"] = self.cloud.value
        data["firmware_up_to_date"] = self.firmware_up_to_date.value
        tier = self.rssi_tier
        data["rssi_tier"] = tier.value if tier else None
        return data


# Rows in the order they were emitted
type DashboardData = list[DashboardRow]
