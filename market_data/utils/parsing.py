"""Shared publisher parsing helpers.

Centralized conversions used by every publisher. Providers send numbers
either as JSON numbers or as strings, and timestamps as ISO-ish strings
or epoch offsets; everything is normalized here.
"""

from __future__ import annotations

from datetime import UTC, datetime

from market_data.errors import ParsingError

_DATETIME_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d")


def to_float(value: float | int | str | None, field: str) -> float:
    """Convert a provider number (float, int or numeric string) to float.

    Raises ParsingError naming the field when the value is missing or
    not numeric. Booleans are rejected even though they subclass int.
    """
    if value is None or isinstance(value, bool):
        raise ParsingError(f"Unable to parse {field} field: {value!r}")
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise ParsingError(f"Unable to parse {field} field: {value!r}") from None
    return float(value)


def parse_datetime(text: str) -> datetime:
    """Parse "YYYY-MM-DD" or "YYYY-MM-DD HH:MM[:SS]" into a naive datetime."""
    stripped = text.strip()
    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(stripped, fmt)
        except ValueError:
            continue
    raise ParsingError(f"Unable to parse datetime: {text!r}")


def from_epoch_seconds(value: int | float) -> datetime:
    """Epoch seconds to a naive UTC datetime."""
    try:
        return datetime.fromtimestamp(value, UTC).replace(tzinfo=None)
    except (OverflowError, OSError, ValueError, TypeError):
        raise ParsingError(f"Unable to parse timestamp: {value!r}") from None


def from_epoch_millis(value: int | float) -> datetime:
    """Epoch milliseconds to a naive UTC datetime."""
    try:
        return from_epoch_seconds(value / 1000)
    except TypeError:
        raise ParsingError(f"Unable to parse timestamp: {value!r}") from None
