from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Tuple

from .dates import DateLike, GridCell, get_monday, month_grid, week_days
from .layout import RowLayout, layout_row
from .models import Event

MONTH_VISIBLE_LANES = 3


@dataclass(frozen=True)
class Segment:
    event: Event
    lane: int
    is_first: bool
    is_last: bool

    @property
    def show_details(self) -> bool:
        # Title/time/attendees only at the leftmost column of the bar.
        return self.is_first


@dataclass(frozen=True)
class CellProjection:
    cell: GridCell
    column: int
    lanes: Tuple[Optional[Segment], ...]
    overflow: int

    @property
    def segments(self) -> List[Segment]:
        return [s for s in self.lanes if s is not None]


@dataclass(frozen=True)
class RowProjection:
    layout: RowLayout
    cells: Tuple[CellProjection, ...]


def project_cell(
    row: RowLayout,
    ci: int,
    visible_lanes: Optional[int] = None,
    cell: Optional[GridCell] = None,
) -> CellProjection:
    if not 0 <= ci < len(row.days):
        raise IndexError(f"Column {ci} outside row of {len(row.days)} days")

    lane_total = row.lane_count if visible_lanes is None else min(visible_lanes, row.lane_count)
    slots: List[Optional[Segment]] = [None] * lane_total
    overflow = 0
    for p in row.at(ci):
        if p.lane >= lane_total:
            overflow += 1
            continue
        slots[p.lane] = Segment(
            event=p.event,
            lane=p.lane,
            is_first=ci == p.start_idx,
            is_last=ci == p.end_idx,
        )
    return CellProjection(
        cell=cell or GridCell(date=row.days[ci]),
        column=ci,
        lanes=tuple(slots),
        overflow=overflow,
    )


def project_row(
    cells: List[GridCell],
    events: Iterable[Event],
    visible_lanes: Optional[int] = None,
) -> RowProjection:
    layout = layout_row([c.date for c in cells], events)
    return RowProjection(
        layout=layout,
        cells=tuple(project_cell(layout, i, visible_lanes, cell=c) for i, c in enumerate(cells)),
    )


def week_view(events: Iterable[Event], monday: DateLike, days: int = 5) -> RowProjection:
    """Single work-week row; every lane is visible."""
    cells = [GridCell(date=d) for d in week_days(get_monday(monday), days)]
    return project_row(cells, events, visible_lanes=None)


def month_view(
    events: Iterable[Event],
    year: int,
    month: int,
    visible_lanes: int = MONTH_VISIBLE_LANES,
) -> List[RowProjection]:
    # Rows are laid out independently; bars restart at each week row.
    events = list(events)
    return [project_row(row, events, visible_lanes=visible_lanes) for row in month_grid(year, month)]


def events_for_day(events: Iterable[Event], day: date) -> List[Event]:
    layout = layout_row([day], events)
    return [p.event for p in layout.placements]
