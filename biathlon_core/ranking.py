"""Results ranking and fixed-column report rows.

Single source of truth for the results table:
- Comparator: outcome class first (Finished < NotFinished < NotStarted <
  Disqualified < anything still in progress).
- Finishers are ordered by elapsed time (finish - scheduled start).
- Ties and every other class fall back to competitor id.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, Sequence

from .durations import format_duration
from .types import Competitor, CompetitorStatus, average_speed
from .validation import RaceConfig

_OUTCOME_CLASS = {
    CompetitorStatus.FINISHED: 0,
    CompetitorStatus.NOT_FINISHED: 1,
    CompetitorStatus.NOT_STARTED: 2,
    CompetitorStatus.DISQUALIFIED: 3,
}
_IN_PROGRESS_CLASS = 4

_MISSING_TIMES = "ERR: Missing Times"


@dataclass(frozen=True)
class LapCell:
    duration: timedelta
    speed: float


@dataclass(frozen=True)
class ResultRow:
    competitor_id: int
    status: CompetitorStatus
    elapsed: timedelta | None
    comment: str
    # One entry per configured lap; None where the lap was never completed.
    laps: tuple[LapCell | None, ...]
    penalty: LapCell
    hits: int
    shots: int


def outcome_class(status: CompetitorStatus) -> int:
    return _OUTCOME_CLASS.get(status, _IN_PROGRESS_CLASS)


def _sort_key(comp: Competitor) -> tuple[int, timedelta, int]:
    cls = outcome_class(comp.status)
    if cls == 0:
        elapsed = comp.elapsed
        return (cls, elapsed if elapsed is not None else timedelta.max, comp.id)
    return (cls, timedelta(0), comp.id)


def rank_competitors(competitors: Iterable[Competitor]) -> list[Competitor]:
    """Return competitors in results-table order."""
    return sorted(competitors, key=_sort_key)


def _to_result_row(comp: Competitor, laps: int) -> ResultRow:
    lap_cells: list[LapCell | None] = []
    for i in range(laps):
        if i < len(comp.laps):
            lap = comp.laps[i]
            lap_cells.append(LapCell(duration=lap.duration, speed=lap.average_speed))
        else:
            lap_cells.append(None)
    penalty_time = comp.penalty_time
    penalty = LapCell(
        duration=penalty_time,
        speed=average_speed(comp.penalty_distance, penalty_time),
    )
    return ResultRow(
        competitor_id=comp.id,
        status=comp.status,
        elapsed=comp.elapsed if comp.status is CompetitorStatus.FINISHED else None,
        comment=comp.comment,
        laps=tuple(lap_cells),
        penalty=penalty,
        hits=comp.total_hits,
        shots=comp.total_shots,
    )


def compute_results(
    competitors: Iterable[Competitor],
    config: RaceConfig,
) -> tuple[ResultRow, ...]:
    """
    Rank competitors and build one result row each.

    Args:
      competitors: final competitor set (after the end-of-log resolution).
      config: race configuration; its lap count fixes the number of lap slots.
    """
    return tuple(_to_result_row(c, config.laps) for c in rank_competitors(competitors))


def _format_cell(cell: LapCell | None) -> str:
    if cell is None:
        return "{,}"
    return f"{{{format_duration(cell.duration)}, {cell.speed:.3f}}}"


def _format_time_field(row: ResultRow) -> str:
    if row.status is CompetitorStatus.FINISHED:
        if row.elapsed is None:
            return _MISSING_TIMES
        return format_duration(row.elapsed)
    text = row.status.value
    if row.comment:
        text += f" ({row.comment})"
    return text


def format_result_row(row: ResultRow) -> str:
    """``[Status] id time {lap}... {penalty} hits/shots``"""
    laps = " ".join(_format_cell(cell) for cell in row.laps)
    return " ".join(
        [
            f"[{row.status.value}]",
            str(row.competitor_id),
            _format_time_field(row),
            laps,
            _format_cell(row.penalty),
            f"{row.hits}/{row.shots}",
        ]
    )


def format_results(rows: Sequence[ResultRow]) -> list[str]:
    return [format_result_row(row) for row in rows]
