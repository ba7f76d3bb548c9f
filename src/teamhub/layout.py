from __future__ import annotations
from dataclasses import dataclass
from datetime import date
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .dates import DateLike, parse_date, span_days
from .models import Event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Interval:
    start: int  # row column, inclusive
    end: int    # row column, inclusive
    id: str

    def overlaps(self, other: "Interval") -> bool:
        return not (self.end < other.start or self.start > other.end)


@dataclass(frozen=True)
class Placement:
    event: Event
    lane: int
    start_idx: int
    end_idx: int

    def covers(self, ci: int) -> bool:
        return self.start_idx <= ci <= self.end_idx


@dataclass(frozen=True)
class RowLayout:
    days: Tuple[date, ...]
    placements: Tuple[Placement, ...]

    @property
    def lanes(self) -> Dict[str, int]:
        return {p.event.id: p.lane for p in self.placements}

    @property
    def lane_count(self) -> int:
        return max((p.lane for p in self.placements), default=-1) + 1

    def spans(self) -> Dict[str, Tuple[int, int]]:
        return {p.event.id: (p.start_idx, p.end_idx) for p in self.placements}

    def at(self, ci: int) -> List[Placement]:
        return [p for p in self.placements if p.covers(ci)]


def event_span(event: Event) -> Optional[Tuple[date, date]]:
    """Inclusive (start, end) of an event, or None when it has no start date.

    An end before the start is normalized to a single-day span.
    """
    start = parse_date(event.date)
    if start is None:
        return None
    end = parse_date(event.end_date)
    if end is None or end < start:
        end = start
    return start, end


def appears_on_day(event: Event, day: DateLike) -> bool:
    span = event_span(event)
    d = parse_date(day)
    if span is None or d is None:
        return False
    return span[0] <= d <= span[1]


def _clip(event: Event, days: Sequence[date]) -> Optional[Tuple[int, int]]:
    span = event_span(event)
    if span is None:
        return None
    covered = [i for i, d in enumerate(days) if span[0] <= d <= span[1]]
    if not covered:
        return None
    return covered[0], covered[-1]


def lane_sort_key(event: Event, start_idx: int):
    # Column first keeps first-fit packing minimal; within a column, all-day
    # events lead, then earlier start, then longer span.
    start, end = event_span(event)
    return (
        start_idx,
        0 if event.all_day else 1,
        start,
        -span_days(start, end),
        "" if event.all_day else event.time,
        event.title.lower(),
        event.id,
    )


def assign_lanes(intervals: Iterable[Interval]) -> Dict[str, int]:
    """Greedy first-fit lane packing. Intervals are taken in the given order.

    Ids must be unique; the result is keyed by id.
    """
    lanes: List[List[Interval]] = []
    assignment: Dict[str, int] = {}
    for interval in intervals:
        if interval.id in assignment:
            raise ValueError(f"Duplicate interval id: {interval.id!r}")
        for idx, lane in enumerate(lanes):
            if not any(interval.overlaps(other) for other in lane):
                lane.append(interval)
                assignment[interval.id] = idx
                break
        else:
            lanes.append([interval])
            assignment[interval.id] = len(lanes) - 1
    return assignment


def layout_row(days: Sequence[DateLike], events: Iterable[Event]) -> RowLayout:
    row_days = tuple(parse_date(d) for d in days)
    if any(d is None for d in row_days):
        raise ValueError(f"Invalid row days: {list(days)!r}")

    clipped: List[Tuple[Event, int, int]] = []
    seen = set()
    for e in events:
        cols = _clip(e, row_days)
        if cols is None:
            continue
        if e.id in seen:
            logger.warning("Skipping duplicate event id %s (%s)", e.id, e.title)
            continue
        seen.add(e.id)
        clipped.append((e, cols[0], cols[1]))
    clipped.sort(key=lambda item: lane_sort_key(item[0], item[1]))

    assignment = assign_lanes(Interval(start=s, end=t, id=e.id) for e, s, t in clipped)
    placements = tuple(
        Placement(event=e, lane=assignment[e.id], start_idx=s, end_idx=t) for e, s, t in clipped
    )
    return RowLayout(days=row_days, placements=placements)


def max_overlap_depth(days: Sequence[DateLike], events: Iterable[Event]) -> int:
    """Largest number of events covering a single column of the row."""
    row_days = [parse_date(d) for d in days]
    events = list(events)
    return max((sum(1 for e in events if appears_on_day(e, d)) for d in row_days), default=0)
