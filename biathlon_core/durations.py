"""Fixed-precision duration codec (``HH:MM:SS[.mmm]``).

Timestamps, the configured start time and the start window all share this
grammar. Values are carried as :class:`datetime.timedelta` at millisecond
precision.
"""
from __future__ import annotations

from datetime import timedelta

from .errors import FormatError

_ONE_DAY = timedelta(days=1)


def _as_int(field: str, text: str) -> int:
    if not field or not (field.isascii() and field.isdigit()):
        raise FormatError(f"invalid duration format: {text!r}")
    return int(field)


def parse_duration(text: str) -> timedelta:
    """Parse ``H:M:S`` with an optional fractional seconds part.

    The fraction is right-padded to three digits before being read as
    milliseconds: ``"5"`` is 500 ms, ``"05"`` is 50 ms, ``"005"`` is 5 ms.

    Raises:
        FormatError: wrong field count, more than one dot in the seconds
            field, a fraction longer than three digits, or any non-numeric
            component.
    """
    parts = text.split(":")
    if len(parts) != 3:
        raise FormatError(f"invalid duration format: {text!r}")

    secs_parts = parts[2].split(".")
    if len(secs_parts) > 2:
        raise FormatError(f"invalid duration format: {text!r}")

    hours = _as_int(parts[0], text)
    minutes = _as_int(parts[1], text)
    seconds = _as_int(secs_parts[0], text)

    millis = 0
    if len(secs_parts) == 2:
        fraction = secs_parts[1]
        if len(fraction) > 3:
            raise FormatError(f"invalid duration format: {text!r}")
        _as_int(fraction, text)
        millis = int(fraction.ljust(3, "0"))

    return timedelta(hours=hours, minutes=minutes, seconds=seconds, milliseconds=millis)


def parse_time_of_day(text: str) -> timedelta:
    """Like :func:`parse_duration` but the result must fall inside one day."""
    value = parse_duration(text)
    if value >= _ONE_DAY:
        raise FormatError(f"time of day out of range: {text!r}")
    return value


def format_duration(value: timedelta) -> str:
    """Render ``HH:MM:SS.mmm``; negative values are rendered as their absolute value."""
    total_ms = abs(value) // timedelta(milliseconds=1)
    total_seconds, millis = divmod(total_ms, 1000)
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"
