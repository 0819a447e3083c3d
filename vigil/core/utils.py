"""
Utility functions shared by providers, the CLI and the report writer.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any

_DURATION_PATTERN = re.compile(r"(\d+(?:\.\d+)?)([smhd])")
_DURATION_UNITS = {"s": "seconds", "m": "minutes", "h": "hours", "d": "days"}

# =============================================================================
# Duration Utilities
# =============================================================================


def parse_duration(value: str) -> timedelta:
    """Parse a duration such as ``720h``, ``30d`` or ``1h30m``.

    Args:
        value: Duration string made of number/unit pairs (s, m, h, d).

    Returns:
        Parsed timedelta.

    Raises:
        ValueError: If the string is not a valid duration.
    """
    text = value.strip().lower()
    if not text:
        raise ValueError("empty duration")

    pos = 0
    total = timedelta()
    for match in _DURATION_PATTERN.finditer(text):
        if match.start() != pos:
            break
        amount, unit = match.groups()
        total += timedelta(**{_DURATION_UNITS[unit]: float(amount)})
        pos = match.end()

    if pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total


def window_bounds(window: timedelta, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Return the (start, end) UTC bounds of a trailing window ending now."""
    end = now or datetime.now(timezone.utc)
    return end - window, end


def to_rfc3339(moment: datetime) -> str:
    """Format a datetime as an RFC 3339 UTC timestamp."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


# =============================================================================
# Data Utilities
# =============================================================================


def safe_get_nested(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Safely get a nested value from a dictionary.

    Args:
        data: Source dictionary.
        *keys: Key path to traverse.
        default: Default value if path not found.

    Returns:
        Value at path or default.
    """
    current: Any = data
    for key in keys:
        if not isinstance(current, dict):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current


def truncate_string(s: str, max_length: int = 100, suffix: str = "...") -> str:
    """Truncate a string to a maximum length."""
    if len(s) <= max_length:
        return s
    return s[: max_length - len(suffix)] + suffix
