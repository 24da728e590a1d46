import logging
from datetime import timedelta

import pytest

from biathlon_core import Event, EventKind, FormatError, parse_event, read_events


def test_parse_event_basic_fields():
    event = parse_event("[09:05:59.867] 1 1")
    assert event == Event(
        time=timedelta(hours=9, minutes=5, seconds=59, milliseconds=867),
        kind=EventKind.REGISTER,
        competitor_id=1,
        params=(),
        raw="[09:05:59.867] 1 1",
    )


def test_parse_event_splits_extra_params():
    event = parse_event("[09:49:33.123] 6 1 1")
    assert event.kind is EventKind.HIT_TARGET
    assert event.params == ("1",)

    event = parse_event("[09:15:00.841] 2 1   09:30:00.000  extra ")
    assert event.params == ("09:30:00.000", "extra")
    assert event.param(1) == "extra"
    assert event.param(2) is None


def test_parse_event_keeps_cannot_continue_comment_whole():
    event = parse_event("[09:59:03.872] 11 1 Lost in the forest")
    assert event.kind is EventKind.CANNOT_CONTINUE
    assert event.params == ("Lost in the forest",)


def test_parse_event_blank_line_is_skipped():
    assert parse_event("") is None
    assert parse_event("   \t  ") is None


@pytest.mark.parametrize(
    "line",
    [
        "[09:05:59.867] 1",
        "09:05:59.867 1 1",
        "[09:05:59] 1",
        "[9:xx:59.867] 1 1",
        "[09:05:59.867] one 1",
        "[09:05:59.867] 1 first",
        "[09:05:59.867] 12 1",
        "[09:05:59.867] 0 1",
    ],
)
def test_parse_event_rejects_malformed(line):
    with pytest.raises(FormatError):
        parse_event(line)


def test_read_events_skips_bad_lines_and_logs_line_number(caplog):
    lines = [
        "[09:05:59.867] 1 1\n",
        "\n",
        "garbage\n",
        "[09:15:00.841] 2 1 09:30:00.000\n",
    ]
    with caplog.at_level(logging.WARNING, logger="biathlon_core.events"):
        events = read_events(lines)
    assert [e.kind for e in events] == [EventKind.REGISTER, EventKind.SET_START_TIME]
    assert "line 3" in caplog.text
