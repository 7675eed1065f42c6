"""
Time-span parsing for token lifetimes.

Accepts the compact notation used in env files: "15m", "7d", "10h",
"2 days", "1.5h", "500ms". A bare integer or float is a number of seconds;
a bare numeric string carries no unit and is read as milliseconds.
"""
from __future__ import annotations

import re
from datetime import timedelta
from typing import Union

_SECOND = 1000.0
_MINUTE = _SECOND * 60
_HOUR = _MINUTE * 60
_DAY = _HOUR * 24
_WEEK = _DAY * 7
_YEAR = _DAY * 365.25

# unit alias -> milliseconds
_UNITS = {
    "years": _YEAR, "year": _YEAR, "yrs": _YEAR, "yr": _YEAR, "y": _YEAR,
    "weeks": _WEEK, "week": _WEEK, "w": _WEEK,
    "days": _DAY, "day": _DAY, "d": _DAY,
    "hours": _HOUR, "hour": _HOUR, "hrs": _HOUR, "hr": _HOUR, "h": _HOUR,
    "minutes": _MINUTE, "minute": _MINUTE, "mins": _MINUTE, "min": _MINUTE, "m": _MINUTE,
    "seconds": _SECOND, "second": _SECOND, "secs": _SECOND, "sec": _SECOND, "s": _SECOND,
    "milliseconds": 1.0, "millisecond": 1.0, "msecs": 1.0, "msec": 1.0, "ms": 1.0,
}

_PATTERN = re.compile(r"^(?P<value>-?(?:\d+)?\.?\d+) *(?P<unit>[a-z]+)?$", re.IGNORECASE)


def parse_duration(value: Union[str, int, float, timedelta]) -> timedelta:
    """Turn a time-span value into a timedelta. Raises ValueError if unparsable or negative."""
    duration = _to_timedelta(value)
    if duration < timedelta(0):
        raise ValueError(f"Duration must not be negative: {value!r}")
    return duration


def _to_timedelta(value) -> timedelta:
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    if not isinstance(value, str):
        raise ValueError(f"Invalid duration: {value!r}")

    match = _PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")

    unit = (match.group("unit") or "ms").lower()
    if unit not in _UNITS:
        raise ValueError(f"Unknown duration unit {unit!r} in {value!r}")
    return timedelta(milliseconds=float(match.group("value")) * _UNITS[unit])
