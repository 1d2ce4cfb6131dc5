"""
Random Quotes - Widget Instance Identity

Every persisted value is partitioned by the id of the widget that owns it.
The home screen hands out plain integers and uses 0 to mean "no widget";
here that sentinel never leaves parse_widget_id() - callers get None instead.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

# Value the widget host uses for "no widget instance"
INVALID_WIDGET_ID = 0


@dataclass(frozen=True, order=True)
class WidgetInstanceId:
    """Identifier of one deployed widget. Always a positive integer."""
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Widget id must be an int, got {type(self.value).__name__}")
        if self.value <= INVALID_WIDGET_ID:
            raise ValueError(f"Invalid widget id: {self.value}")

    def lock_name(self) -> str:
        """Name of the lock that serializes saves for this widget."""
        return f"widget:{self.value}"

    def __str__(self) -> str:
        return str(self.value)


class WidgetState(Enum):
    """Configuration state of a single widget instance."""
    UNCONFIGURED = "unconfigured"  # Nothing stored
    PATHS_SET = "paths_set"        # Paths saved, no quotes derived yet
    READY = "ready"                # Quotes available for display


def parse_widget_id(raw: Any) -> Optional[WidgetInstanceId]:
    """
    Convert a raw id (int, numeric string, or None) into a WidgetInstanceId.

    Returns:
        The typed id, or None when raw is missing, the sentinel, negative,
        or not an integer
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, WidgetInstanceId):
        return raw

    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
        try:
            raw = int(raw)
        except ValueError:
            return None

    if not isinstance(raw, int) or raw <= INVALID_WIDGET_ID:
        return None
    return WidgetInstanceId(raw)
