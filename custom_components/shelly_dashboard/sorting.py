"""Column sorting for dashboard rows."""

from __future__ import annotations

from dataclasses import dataclass, fields
import re
import unicodedata
from typing import Any

from .const import DEFAULT_SORT_KEY, SORT_ASC, SORT_DESC
from .models import DashboardRow, TriState

SORT_KEYS = frozenset(f.name for f in fields(DashboardRow)) | {"rssi_tier"}

_CHUNKS = re.compile(r"(\d+)")


def sort_value(value: Any) -> str:
    """Return the text a value is compared by."""
    if isinstance(value, TriState):
        value = value.value
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def natural_key(text: str) -> tuple[tuple[int, int | str], ...]:
    """Return a case and accent insensitive key that orders digit runs by value."""
    folded = unicodedata.normalize("NFKD", text.casefold())
    folded = "".join(char for char in folded if not unicodedata.combining(char))
    # Even positions hold text, odd positions hold digit runs
    return tuple(
        (1, int(chunk)) if index % 2 else (0, chunk)
        for index, chunk in enumerate(_CHUNKS.split(folded))
    )


def sort_rows(
    rows: list[DashboardRow], key: str, direction: str = SORT_ASC
) -> list[DashboardRow]:
    """Return a sorted copy of the rows."""
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {key}")
    return sorted(
        rows,
        key=lambda row: natural_key(sort_value(getattr(row, key))),
        reverse=direction == SORT_DESC,
    )


@dataclass
class SortState:
    """The active sort column and direction."""

    key: str = DEFAULT_SORT_KEY
    direction: str = SORT_ASC

    def toggle(self, key: str) -> None:
        """Flip the direction of the active column or switch to a new one."""
        if key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key: {key}")
        if key == self.key:
            self.direction = SORT_DESC if self.direction == SORT_ASC else SORT_ASC
        else:
            self.key = key
            self.direction = SORT_ASC

    def apply(self, rows: list[DashboardRow]) -> list[DashboardRow]:
        """Sort rows by the active column."""
        return sort_rows(rows, self.key, self.direction)

    def as_dict(self) -> dict[str, str]:
        """Return a JSON serialisable representation."""
        return {"key": self.key, "direction": self.direction}
