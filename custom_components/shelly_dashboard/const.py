"""Constants for the Shelly Dashboard integration."""

import re

DOMAIN = "shelly_dashboard"

# Family detection
TARGET_PLATFORM = "shelly"
TARGET_MANUFACTURER = "shelly"

# Config entry keys
CONF_RELOAD_DELAY = "reload_delay"

DEFAULT_RELOAD_DELAY = 2  # seconds to let host-side state settle after a command
MAX_RELOAD_DELAY = 60

# Sent whenever the dashboard payload changes, including after an entry reload
SIGNAL_DASHBOARD_UPDATED = f"{DOMAIN}_updated"

# States that carry no usable value
STATE_UNKNOWN = "unknown"
STATE_UNAVAILABLE = "unavailable"
DEAD_STATES = frozenset({STATE_UNKNOWN, STATE_UNAVAILABLE})

# Hosts that never identify a device on the network
INVALID_HOSTS = frozenset({"localhost", "0.0.0.0"})

# Controllable outputs first, passive sensors last
PRIMARY_DOMAIN_PRIORITY = ("light", "switch", "cover", "sensor", "binary_sensor")

CHANNEL_SUFFIX = re.compile(r"_\d+$|channel_\d+")

IPV4_PATTERN = re.compile(r"\d{1,3}(?:\.\d{1,3}){3}", re.ASCII)
EMBEDDED_IPV4_PATTERN = re.compile(
    r"(?<![\d.])\d{1,3}(?:\.\d{1,3}){3}(?!\.?\d)", re.ASCII
)

ATTR_INSTALLED_VERSION = "installed_version"
ATTR_LATEST_VERSION = "latest_version"

# Sorting
SORT_ASC = "asc"
SORT_DESC = "desc"
DEFAULT_SORT_KEY = "name"

# RSSI tier thresholds in dBm, best first
RSSI_EXCELLENT = -50
RSSI_GOOD = -60
RSSI_FAIR = -70
