"""Per-competitor race state machine (pure, no file or console I/O).

This module turns an ordered event stream into competitor state plus a
narrative log.

Architecture:
- RaceState holds the competitor map (keyed by id, in registration order),
  the narrative log and the time of the last processed event
- apply_event() runs the not-started sweep at the event time, then dispatches
  the event to the addressed competitor
- close_race() runs the final sweep and the end-of-log resolver once the
  stream is exhausted
- run_race() drives a whole stream through both

State transitions (kind -> effect):
- 1 REGISTER: creates the competitor (Registered)
- 2 SET_START_TIME: draws a scheduled start (Scheduled)
- 3 ON_START_LINE: Scheduled -> OnStartLine
- 4 START: Scheduled/OnStartLine -> Started; any start past the window -> NotStarted
- 5..7: firing range visit (OnRange, hits, leave with misses counted)
- 8..9: penalty loop (InPenalty and back to OnLap)
- 10 END_LAP: closes a lap; the final lap finishes the race
- 11 CANNOT_CONTINUE: NotFinished with an optional comment

Terminal competitors (Finished, NotFinished, NotStarted, Disqualified) ignore
every later event.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, Iterable, List, Optional

from .durations import parse_time_of_day
from .errors import FormatError, UnknownCompetitorError
from .events import Event, EventKind, format_timestamp
from .types import (
    IN_RACE_STATUSES,
    PRE_START_STATUSES,
    SHOTS_PER_VISIT,
    Competitor,
    CompetitorStatus,
    FiringRangeVisit,
    Lap,
    PenaltyLap,
)
from .validation import RaceConfig

logger = logging.getLogger(__name__)

DID_NOT_FINISH_COMMENT = "Did not finish before end of log"


@dataclass
class RaceState:
    """Mutable race state owned by a single driver."""

    competitors: Dict[int, Competitor] = field(default_factory=dict)
    log: List[str] = field(default_factory=list)
    last_event_time: Optional[timedelta] = None


@dataclass
class EventOutcome:
    """Result of applying one event."""

    log_lines: List[str]
    applied: bool


def default_state() -> RaceState:
    return RaceState()


def _line(at: timedelta, message: str) -> str:
    return f"{format_timestamp(at)} {message}"


def _start_window_missed(comp: Competitor, now: timedelta, config: RaceConfig) -> bool:
    if comp.scheduled_start is None:
        return False
    return now > comp.scheduled_start + config.start_delta


def get_competitor(state: RaceState, competitor_id: int) -> Competitor:
    """Look up a registered competitor.

    Raises:
        UnknownCompetitorError: if the id was never registered
    """
    try:
        return state.competitors[competitor_id]
    except KeyError:
        raise UnknownCompetitorError(competitor_id) from None


def sweep_not_started(
    state: RaceState,
    now: timedelta,
    config: RaceConfig,
    *,
    end_of_log: bool = False,
) -> List[str]:
    """Mark every competitor whose start window closed before ``now`` as NotStarted.

    Only competitors still waiting to start (Scheduled or OnStartLine, with a
    scheduled start and no actual start) are affected.
    """
    reason = "Did not start by end of log" if end_of_log else "Did not start"
    lines: List[str] = []
    for comp in state.competitors.values():
        if comp.status not in PRE_START_STATUSES:
            continue
        if comp.actual_start is not None:
            continue
        if not _start_window_missed(comp, now, config):
            continue
        comp.status = CompetitorStatus.NOT_STARTED
        comp.finish_time = now
        lines.append(_line(now, f"The competitor({comp.id}) is disqualified ({reason})"))
    state.log.extend(lines)
    return lines


def resolve_end_of_log(state: RaceState) -> List[str]:
    """Force every competitor still out on the course into NotFinished."""
    lines: List[str] = []
    at = state.last_event_time
    if at is None:
        return lines
    for comp in state.competitors.values():
        if comp.status not in IN_RACE_STATUSES:
            continue
        comp.status = CompetitorStatus.NOT_FINISHED
        comp.finish_time = at
        comp.comment = DID_NOT_FINISH_COMMENT
        comp.current_range_visit = None
        lines.append(_line(at, f"The competitor({comp.id}) marked as NotFinished at end of log"))
    state.log.extend(lines)
    return lines


def _register(state: RaceState, event: Event) -> List[str]:
    state.competitors[event.competitor_id] = Competitor(
        id=event.competitor_id, last_event_time=event.time
    )
    return [_line(event.time, f"The competitor({event.competitor_id}) registered")]


def _set_start_time(comp: Competitor, event: Event, config: RaceConfig) -> List[str]:
    raw = event.param()
    if raw is None:
        logger.warning(
            f"event 2 missing start time for competitor {comp.id} at {format_timestamp(event.time)}"
        )
        return []
    try:
        time_of_day = parse_time_of_day(raw)
    except FormatError as e:
        logger.warning(f"event 2 invalid start time {raw!r} for competitor {comp.id}: {e}")
        return []
    comp.scheduled_start = config.scheduled_start_for(time_of_day)
    comp.status = CompetitorStatus.SCHEDULED
    return [
        _line(
            event.time,
            f"The start time for the competitor({comp.id}) was set by a draw to {raw}",
        )
    ]


def _on_start_line(comp: Competitor, event: Event) -> List[str]:
    if comp.status is not CompetitorStatus.SCHEDULED:
        return []
    comp.status = CompetitorStatus.ON_START_LINE
    return [_line(event.time, f"The competitor({comp.id}) is on the start line")]


def _start(comp: Competitor, event: Event, config: RaceConfig) -> List[str]:
    # A start reported after the window disqualifies whatever the status.
    if _start_window_missed(comp, event.time, config):
        comp.status = CompetitorStatus.NOT_STARTED
        comp.finish_time = event.time
        return [
            _line(event.time, f"The competitor({comp.id}) is disqualified (Started too late)"),
            _line(event.time, f"The competitor({comp.id}) is disqualified"),
        ]
    if comp.status not in PRE_START_STATUSES:
        return []
    comp.actual_start = event.time
    comp.status = CompetitorStatus.STARTED
    comp.current_lap_number = 1
    comp.current_lap_start = event.time
    return [_line(event.time, f"The competitor({comp.id}) has started")]


def _enter_range(comp: Competitor, event: Event) -> List[str]:
    if comp.status not in (CompetitorStatus.STARTED, CompetitorStatus.ON_LAP):
        return []
    firing_line = event.param()
    comp.status = CompetitorStatus.ON_RANGE
    comp.current_range_visit = FiringRangeVisit(
        enter_time=event.time, shots=SHOTS_PER_VISIT, firing_line=firing_line
    )
    comp.current_range_hits = 0
    label = firing_line if firing_line is not None else "unknown"
    return [_line(event.time, f"The competitor({comp.id}) is on the firing range({label})")]


def _hit_target(comp: Competitor, event: Event) -> List[str]:
    if comp.status is not CompetitorStatus.ON_RANGE or comp.current_range_visit is None:
        return []
    comp.current_range_hits += 1
    target = event.param() or "unknown"
    return [_line(event.time, f"The target({target}) has been hit by competitor({comp.id})")]


def _leave_range(comp: Competitor, event: Event) -> List[str]:
    visit = comp.current_range_visit
    if comp.status is not CompetitorStatus.ON_RANGE or visit is None:
        return []
    visit.exit_time = event.time
    visit.hits = comp.current_range_hits
    comp.range_visits.append(visit)
    comp.current_range_visit = None
    comp.total_hits += visit.hits
    comp.total_shots += visit.shots
    comp.last_misses = visit.shots - visit.hits
    # Back on the course either way; misses stay outstanding until the
    # penalty loop is run and END_LAP refuses while they do.
    comp.status = CompetitorStatus.ON_LAP
    return [_line(event.time, f"The competitor({comp.id}) left the firing range")]


def _enter_penalty(comp: Competitor, event: Event, config: RaceConfig) -> List[str]:
    if comp.status not in (CompetitorStatus.ON_LAP, CompetitorStatus.STARTED):
        return []
    if comp.last_misses <= 0:
        return []
    comp.status = CompetitorStatus.IN_PENALTY
    comp.current_penalty_start = event.time
    comp.current_penalty_distance = comp.last_misses * config.penalty_len
    return [_line(event.time, f"The competitor({comp.id}) entered the penalty laps")]


def _leave_penalty(comp: Competitor, event: Event) -> List[str]:
    if comp.status is not CompetitorStatus.IN_PENALTY:
        return []
    comp.penalty_laps.append(
        PenaltyLap(
            start_time=comp.current_penalty_start,
            end_time=event.time,
            distance=comp.current_penalty_distance or 0.0,
        )
    )
    comp.current_penalty_start = None
    comp.current_penalty_distance = None
    comp.last_misses = 0
    comp.status = CompetitorStatus.ON_LAP
    return [_line(event.time, f"The competitor({comp.id}) left the penalty laps")]


def _end_lap(comp: Competitor, event: Event, config: RaceConfig) -> List[str]:
    if comp.status not in (CompetitorStatus.ON_LAP, CompetitorStatus.STARTED):
        return []
    if comp.last_misses > 0:
        # Penalty loop still owed.
        return []
    comp.laps.append(
        Lap(
            number=comp.current_lap_number,
            start_time=comp.current_lap_start,
            end_time=event.time,
            distance=config.lap_len,
        )
    )
    lines = [_line(event.time, f"The competitor({comp.id}) ended the main lap")]
    if comp.current_lap_number >= config.laps:
        comp.status = CompetitorStatus.FINISHED
        comp.finish_time = event.time
        lines.append(_line(event.time, f"The competitor({comp.id}) has finished"))
    else:
        comp.current_lap_number += 1
        comp.current_lap_start = event.time
        comp.status = CompetitorStatus.ON_LAP
    return lines


def _cannot_continue(comp: Competitor, event: Event) -> List[str]:
    comp.status = CompetitorStatus.NOT_FINISHED
    comp.finish_time = event.time
    comp.current_range_visit = None
    comment = event.param()
    if comment:
        comp.comment = comment
        return [_line(event.time, f"The competitor({comp.id}) can`t continue: {comment}")]
    return [_line(event.time, f"The competitor({comp.id}) can`t continue")]


def _dispatch(comp: Competitor, event: Event, config: RaceConfig) -> List[str]:
    kind = event.kind
    if kind is EventKind.SET_START_TIME:
        return _set_start_time(comp, event, config)
    elif kind is EventKind.ON_START_LINE:
        return _on_start_line(comp, event)
    elif kind is EventKind.START:
        return _start(comp, event, config)
    elif kind is EventKind.ENTER_RANGE:
        return _enter_range(comp, event)
    elif kind is EventKind.HIT_TARGET:
        return _hit_target(comp, event)
    elif kind is EventKind.LEAVE_RANGE:
        return _leave_range(comp, event)
    elif kind is EventKind.ENTER_PENALTY:
        return _enter_penalty(comp, event, config)
    elif kind is EventKind.LEAVE_PENALTY:
        return _leave_penalty(comp, event)
    elif kind is EventKind.END_LAP:
        return _end_lap(comp, event, config)
    elif kind is EventKind.CANNOT_CONTINUE:
        return _cannot_continue(comp, event)
    raise ValueError(f"unhandled event kind: {kind!r}")


def apply_event(state: RaceState, event: Event, config: RaceConfig) -> EventOutcome:
    """Apply one event to the race state in place.

    Args:
        state: Race state (mutated)
        event: Next event in input order
        config: Static race configuration

    Returns:
        EventOutcome with every log line produced (sweep lines first) and
        whether the event itself changed its competitor

    Behavior:
        - Runs the not-started sweep at event.time before anything else
        - REGISTER creates an unknown competitor; any other kind for an
          unknown id is logged as a warning and skipped
        - Events for terminal competitors are ignored
        - Events whose preconditions do not hold are ignored
    """
    lines = sweep_not_started(state, event.time, config)

    if event.kind is EventKind.REGISTER and event.competitor_id not in state.competitors:
        produced = _register(state, event)
        processed = True
    elif event.kind is EventKind.REGISTER:
        # Re-registration changes nothing but still counts as processed.
        comp = state.competitors[event.competitor_id]
        comp.last_event_time = event.time
        logger.debug(f"competitor {comp.id} already registered, ignoring")
        produced = []
        processed = True
    else:
        try:
            comp = get_competitor(state, event.competitor_id)
        except UnknownCompetitorError as e:
            logger.warning(
                f"Event {int(event.kind)} for {e} at {format_timestamp(event.time)}"
            )
            return EventOutcome(log_lines=lines, applied=False)
        if comp.is_terminal:
            return EventOutcome(log_lines=lines, applied=False)
        comp.last_event_time = event.time
        produced = _dispatch(comp, event, config)
        # A late start disqualifies but does not count as processed.
        processed = bool(produced) and not (
            event.kind is EventKind.START and comp.status is CompetitorStatus.NOT_STARTED
        )

    if processed:
        state.last_event_time = event.time
    state.log.extend(produced)
    return EventOutcome(log_lines=lines + produced, applied=bool(produced))


def close_race(state: RaceState, config: RaceConfig) -> List[str]:
    """Run the final not-started sweep and the end-of-log resolver."""
    if state.last_event_time is None:
        return []
    lines = sweep_not_started(state, state.last_event_time, config, end_of_log=True)
    lines += resolve_end_of_log(state)
    return lines


def run_race(events: Iterable[Event], config: RaceConfig) -> RaceState:
    """Drive an ordered event stream through the state machine and close the race."""
    state = default_state()
    for event in events:
        apply_event(state, event, config)
    close_race(state, config)
    return state
