"""Event log line parsing.

Grammar: ``[HH:MM:SS.mmm] <kind> <competitor-id> [<params>...]``.

Kind 11 (competitor cannot continue) keeps everything after the competitor id
as a single free-text parameter; every other kind splits the remainder on
whitespace.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from enum import IntEnum
from typing import Iterable, List, Optional

from .durations import format_duration, parse_duration
from .errors import FormatError

logger = logging.getLogger(__name__)


class EventKind(IntEnum):
    REGISTER = 1
    SET_START_TIME = 2
    ON_START_LINE = 3
    START = 4
    ENTER_RANGE = 5
    HIT_TARGET = 6
    LEAVE_RANGE = 7
    ENTER_PENALTY = 8
    LEAVE_PENALTY = 9
    END_LAP = 10
    CANNOT_CONTINUE = 11


@dataclass(frozen=True)
class Event:
    """One parsed log line. ``time`` is the offset from race-day midnight."""

    time: timedelta
    kind: EventKind
    competitor_id: int
    params: tuple[str, ...] = ()
    raw: str = ""

    def param(self, index: int = 0) -> str | None:
        if index < len(self.params):
            return self.params[index]
        return None


def format_timestamp(value: timedelta) -> str:
    """Bracketed event time as it prefixes every narrative log line."""
    return f"[{format_duration(value)}]"


def _parse_int(token: str, what: str, line: str) -> int:
    try:
        return int(token, 10)
    except ValueError:
        raise FormatError(f"invalid {what} {token!r} in line: {line}") from None


def parse_event(line: str) -> Optional[Event]:
    """Parse one raw line.

    Returns None for blank lines.

    Raises:
        FormatError: fewer than three tokens, bad timestamp, non-integer kind
            or competitor id, or a kind outside 1..11.
    """
    line = line.strip()
    if not line:
        return None

    parts = line.split(None, 2)
    if len(parts) < 3:
        raise FormatError(f"invalid event format: {line}")
    time_token, kind_token, rest = parts

    if not (time_token.startswith("[") and time_token.endswith("]")):
        raise FormatError(f"invalid time format {time_token!r} in line: {line}")
    event_time = parse_duration(time_token[1:-1])

    kind_value = _parse_int(kind_token, "event kind", line)
    try:
        kind = EventKind(kind_value)
    except ValueError:
        raise FormatError(f"unknown event kind {kind_value} in line: {line}") from None

    rest_parts = rest.split(None, 1)
    competitor_id = _parse_int(rest_parts[0], "competitor id", line)
    extra = rest_parts[1].strip() if len(rest_parts) > 1 else ""

    params: tuple[str, ...] = ()
    if extra:
        if kind is EventKind.CANNOT_CONTINUE:
            params = (extra,)
        else:
            params = tuple(extra.split())

    return Event(
        time=event_time,
        kind=kind,
        competitor_id=competitor_id,
        params=params,
        raw=line,
    )


def read_events(lines: Iterable[str]) -> List[Event]:
    """Parse a line source, skipping blank and malformed lines.

    Malformed lines are logged with their 1-based line number. Errors raised
    by the line source itself (e.g. ``OSError``) propagate.
    """
    events: List[Event] = []
    for line_number, line in enumerate(lines, start=1):
        try:
            event = parse_event(line)
        except FormatError as e:
            logger.warning(f"error parsing event on line {line_number}: {e}")
            continue
        if event is not None:
            events.append(event)
    return events
