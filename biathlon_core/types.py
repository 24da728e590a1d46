"""Type definitions for race configuration, competitors and their records."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import List, Optional, TypedDict

SHOTS_PER_VISIT = 5


class RaceConfigPayload(TypedDict):
    """JSON shape of the race configuration file."""
    laps: int
    lapLen: float
    penaltyLen: float
    firingLines: int
    start: str  # "HH:MM:SS"
    startDelta: str  # "HH:MM:SS[.mmm]"


class CompetitorStatus(str, Enum):
    REGISTERED = "Registered"
    SCHEDULED = "Scheduled"
    ON_START_LINE = "OnStartLine"
    STARTED = "Started"
    ON_LAP = "OnLap"
    ON_RANGE = "OnRange"
    IN_PENALTY = "InPenalty"
    FINISHED = "Finished"
    NOT_FINISHED = "NotFinished"
    NOT_STARTED = "NotStarted"
    DISQUALIFIED = "Disqualified"


TERMINAL_STATUSES = frozenset(
    {
        CompetitorStatus.FINISHED,
        CompetitorStatus.NOT_FINISHED,
        CompetitorStatus.NOT_STARTED,
        CompetitorStatus.DISQUALIFIED,
    }
)

# Statuses from which a start (kind 4) is accepted or a no-show is detected.
PRE_START_STATUSES = frozenset({CompetitorStatus.SCHEDULED, CompetitorStatus.ON_START_LINE})

IN_RACE_STATUSES = frozenset(
    {
        CompetitorStatus.STARTED,
        CompetitorStatus.ON_LAP,
        CompetitorStatus.ON_RANGE,
        CompetitorStatus.IN_PENALTY,
    }
)


def _span(start: Optional[timedelta], end: Optional[timedelta]) -> timedelta:
    if start is None or end is None:
        return timedelta(0)
    return end - start


def average_speed(distance: float, duration: timedelta) -> float:
    """Distance per second, 0.0 when either side is non-positive."""
    seconds = duration.total_seconds()
    if seconds <= 0 or distance <= 0:
        return 0.0
    return distance / seconds


@dataclass
class Lap:
    number: int
    start_time: Optional[timedelta]
    end_time: Optional[timedelta]
    distance: float

    @property
    def duration(self) -> timedelta:
        return _span(self.start_time, self.end_time)

    @property
    def average_speed(self) -> float:
        return average_speed(self.distance, self.duration)


@dataclass
class PenaltyLap:
    start_time: Optional[timedelta]
    end_time: Optional[timedelta]
    distance: float

    @property
    def duration(self) -> timedelta:
        return _span(self.start_time, self.end_time)

    @property
    def average_speed(self) -> float:
        return average_speed(self.distance, self.duration)


@dataclass
class FiringRangeVisit:
    enter_time: timedelta
    exit_time: Optional[timedelta] = None
    hits: int = 0
    shots: int = SHOTS_PER_VISIT
    firing_line: Optional[str] = None


@dataclass
class Competitor:
    """Accumulated state of one competitor.

    ``None`` marks an unset time or a sub-record that is not in progress.
    """
    id: int
    status: CompetitorStatus = CompetitorStatus.REGISTERED
    scheduled_start: Optional[timedelta] = None
    actual_start: Optional[timedelta] = None
    finish_time: Optional[timedelta] = None
    comment: str = ""

    laps: List[Lap] = field(default_factory=list)
    current_lap_number: int = 0
    current_lap_start: Optional[timedelta] = None

    penalty_laps: List[PenaltyLap] = field(default_factory=list)
    current_penalty_start: Optional[timedelta] = None
    current_penalty_distance: Optional[float] = None

    range_visits: List[FiringRangeVisit] = field(default_factory=list)
    current_range_visit: Optional[FiringRangeVisit] = None
    current_range_hits: int = 0
    last_misses: int = 0

    total_shots: int = 0
    total_hits: int = 0

    last_event_time: Optional[timedelta] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def elapsed(self) -> Optional[timedelta]:
        """Finish time minus scheduled start, or None if either is unset."""
        if self.finish_time is None or self.scheduled_start is None:
            return None
        return self.finish_time - self.scheduled_start

    @property
    def penalty_time(self) -> timedelta:
        return sum((p.duration for p in self.penalty_laps), timedelta(0))

    @property
    def penalty_distance(self) -> float:
        return sum(p.distance for p in self.penalty_laps)
