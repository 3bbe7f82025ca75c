import math
import re
from datetime import timedelta
from typing import Any

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_SEGMENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")

# Largest unit first; timedelta resolution is one microsecond.
_FORMAT_UNITS_US = (
    ("h", 3_600_000_000),
    ("m", 60_000_000),
    ("s", 1_000_000),
    ("ms", 1_000),
    ("us", 1),
)


class DurationRangeError(ValueError):
    """Duration is well-formed but does not fit in a timedelta"""


def _to_timedelta(seconds: float, value: Any) -> timedelta:
    try:
        return timedelta(seconds=seconds)
    except OverflowError as e:
        raise DurationRangeError(f"duration out of range: {value!r}") from e


def parse_duration(value: Any) -> timedelta:
    """
    Parse a duration the way driver configs write them.

    Accepts:
        - timedelta               → returned unchanged
        - int / float             → seconds
        - "1m30s", "500ms", "2h"  → unit-suffixed segments, optional leading sign
        - "15" / "0.5"            → bare numeric string, seconds

    Raises:
        DurationRangeError: the value parses but exceeds the timedelta range
        ValueError: anything else that is not a duration
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ValueError(f"invalid duration: {value!r}")
        return _to_timedelta(value, value)
    if not isinstance(value, str):
        raise ValueError(f"invalid duration: {value!r}")

    text = value.strip()
    if not text:
        raise ValueError("invalid duration: empty string")

    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        return parse_duration(seconds)

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    total = 0.0
    pos = 0
    for match in _SEGMENT.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()

    if pos == 0 or pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return _to_timedelta(sign * total, value)


def format_duration(value: timedelta) -> str:
    """Render a timedelta back into the compact unit-suffixed form ("1m30s", "500ms", "250us")."""
    total_us = value // timedelta(microseconds=1)
    if total_us == 0:
        return "0s"
    sign = "-" if total_us < 0 else ""
    rest = abs(total_us)

    parts: list[str] = []
    for unit, size in _FORMAT_UNITS_US:
        count, rest = divmod(rest, size)
        if count:
            parts.append(f"{count}{unit}")
    return sign + "".join(parts)
