from .durations import format_duration, parse_duration, parse_time_of_day
from .errors import ConfigError, FormatError, UnknownCompetitorError
from .events import Event, EventKind, format_timestamp, parse_event, read_events
from .race import (
    DID_NOT_FINISH_COMMENT,
    EventOutcome,
    RaceState,
    apply_event,
    close_race,
    default_state,
    resolve_end_of_log,
    run_race,
    sweep_not_started,
)
from .ranking import (
    LapCell,
    ResultRow,
    compute_results,
    format_result_row,
    format_results,
    outcome_class,
    rank_competitors,
)
from .types import (
    SHOTS_PER_VISIT,
    TERMINAL_STATUSES,
    Competitor,
    CompetitorStatus,
    FiringRangeVisit,
    Lap,
    PenaltyLap,
    RaceConfigPayload,
)
from .validation import RaceConfig, load_config

__all__ = [
    "format_duration",
    "parse_duration",
    "parse_time_of_day",
    "ConfigError",
    "FormatError",
    "UnknownCompetitorError",
    "Event",
    "EventKind",
    "format_timestamp",
    "parse_event",
    "read_events",
    "DID_NOT_FINISH_COMMENT",
    "EventOutcome",
    "RaceState",
    "apply_event",
    "close_race",
    "default_state",
    "resolve_end_of_log",
    "run_race",
    "sweep_not_started",
    "LapCell",
    "ResultRow",
    "compute_results",
    "format_result_row",
    "format_results",
    "outcome_class",
    "rank_competitors",
    "SHOTS_PER_VISIT",
    "TERMINAL_STATUSES",
    "Competitor",
    "CompetitorStatus",
    "FiringRangeVisit",
    "Lap",
    "PenaltyLap",
    "RaceConfigPayload",
    "RaceConfig",
    "load_config",
]
