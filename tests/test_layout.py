from datetime import date, timedelta
import random

import pytest

from teamhub.dates import week_days
from teamhub.layout import (
    Interval,
    appears_on_day,
    assign_lanes,
    event_span,
    layout_row,
    max_overlap_depth,
)
from teamhub.models import Event

ROW = ["2026-02-23", "2026-02-24", "2026-02-25", "2026-02-26", "2026-02-27"]


def _event(eid: str, start: str, end: str | None = None, all_day: bool = False, time: str = "10:00") -> Event:
    return Event(
        id=eid,
        title=f"Event {eid}",
        date=date.fromisoformat(start) if start else None,
        end_date=date.fromisoformat(end) if end else None,
        all_day=all_day,
        time="" if all_day else time,
        duration=0 if all_day else 60,
    )


def _assert_valid_coloring(layout):
    by_lane = {}
    for p in layout.placements:
        for other in by_lane.get(p.lane, []):
            assert p.end_idx < other.start_idx or p.start_idx > other.end_idx, (p, other)
        by_lane.setdefault(p.lane, []).append(p)


def test_appears_on_day_inclusive_bounds():
    e = _event("a", "2026-02-23", "2026-02-25")

    assert appears_on_day(e, "2026-02-23")
    assert appears_on_day(e, "2026-02-24")
    assert appears_on_day(e, date(2026, 2, 25))
    assert not appears_on_day(e, "2026-02-22")
    assert not appears_on_day(e, "2026-02-26")


def test_appears_on_day_without_end_date_is_single_day():
    e = _event("a", "2026-02-24")

    hits = [d for d in ROW if appears_on_day(e, d)]

    assert hits == ["2026-02-24"]


def test_appears_on_day_fails_closed_without_start_date():
    e = Event(id="x", title="No date", date=None)

    assert appears_on_day(e, "2026-02-24") is False
    assert appears_on_day(_event("a", "2026-02-24"), "") is False


def test_inverted_span_is_normalized_to_start_day():
    e = _event("a", "2026-02-25", "2026-02-23")

    assert event_span(e) == (date(2026, 2, 25), date(2026, 2, 25))
    assert [d for d in ROW if appears_on_day(e, d)] == ["2026-02-25"]


def test_interval_overlap_rule():
    assert Interval(0, 2, "a").overlaps(Interval(2, 3, "b"))
    assert not Interval(0, 1, "a").overlaps(Interval(2, 3, "b"))
    assert Interval(1, 1, "a").overlaps(Interval(0, 4, "b"))


def test_assign_lanes_first_fit():
    lanes = assign_lanes([Interval(0, 2, "a"), Interval(0, 0, "c"), Interval(1, 1, "b"), Interval(3, 4, "d")])

    assert lanes == {"a": 0, "c": 1, "b": 1, "d": 0}


def test_documented_scenario_uses_two_lanes():
    a = _event("A", "2026-02-23", "2026-02-25")
    b = _event("B", "2026-02-24", "2026-02-24")
    c = _event("C", "2026-02-23", "2026-02-23")

    layout = layout_row(ROW, [b, c, a])
    lanes = layout.lanes

    assert lanes["A"] != lanes["B"]
    assert lanes["A"] != lanes["C"]
    assert max(lanes.values()) == 1
    assert layout.lane_count == 2
    assert layout.spans() == {"A": (0, 2), "B": (1, 1), "C": (0, 0)}


def test_single_day_events_on_different_days_share_lane_zero():
    events = [_event(str(i), d) for i, d in enumerate(ROW)]

    layout = layout_row(ROW, events)

    assert set(layout.lanes.values()) == {0}


def test_events_outside_row_never_take_a_lane():
    inside = _event("in", "2026-02-24")
    weekend = _event("sat", "2026-02-28", "2026-03-01")
    last_week = _event("old", "2026-02-16", "2026-02-20")
    undated = Event(id="nodate", title="Floating", date=None)

    layout = layout_row(ROW, [weekend, inside, last_week, undated])

    assert layout.lanes == {"in": 0}


def test_spans_are_clipped_to_the_row():
    e = _event("long", "2026-02-19", "2026-03-03", all_day=True)

    layout = layout_row(ROW, [e])

    assert layout.spans() == {"long": (0, 4)}


def test_all_day_events_take_lower_lanes_on_the_same_start_column():
    timed = _event("timed", "2026-02-24", time="09:00")
    all_day = _event("allday", "2026-02-24", all_day=True)

    layout = layout_row(ROW, [timed, all_day])

    assert layout.lanes == {"allday": 0, "timed": 1}


def test_longer_span_wins_lower_lane_on_same_start():
    short = _event("short", "2026-02-23", "2026-02-24", all_day=True)
    long = _event("long", "2026-02-23", "2026-02-27", all_day=True)

    layout = layout_row(ROW, [short, long])

    assert layout.lanes == {"long": 0, "short": 1}


def test_layout_is_idempotent():
    events = [
        _event("a", "2026-02-23", "2026-02-26", all_day=True),
        _event("b", "2026-02-24"),
        _event("c", "2026-02-24", time="09:00"),
        _event("d", "2026-02-25", "2026-02-27"),
    ]

    assert layout_row(ROW, events) == layout_row(ROW, events)
    assert layout_row(ROW, events).lanes == layout_row(ROW, list(reversed(events))).lanes


def test_lane_count_matches_max_overlap_on_random_rows():
    rng = random.Random(1234)
    row = week_days("2026-02-23", 7)
    for _ in range(300):
        events = []
        for i in range(rng.randint(1, 12)):
            start = date(2026, 2, 20) + timedelta(days=rng.randint(0, 11))
            end = start + timedelta(days=rng.choice([0, 0, 0, 1, 2, 4]))
            events.append(_event(str(i), start.isoformat(), end.isoformat(), all_day=rng.random() < 0.4,
                                 time=f"{rng.randint(8, 17):02d}:00"))

        layout = layout_row(row, events)

        _assert_valid_coloring(layout)
        assert layout.lane_count == max_overlap_depth(row, events)


def test_empty_row_has_no_lanes():
    layout = layout_row(ROW, [])

    assert layout.lanes == {}
    assert layout.lane_count == 0


def test_assign_lanes_rejects_duplicate_ids():
    with pytest.raises(ValueError):
        assign_lanes([Interval(0, 2, "a"), Interval(1, 1, "a")])


def test_duplicate_event_ids_are_placed_once(caplog):
    first = _event("A", "2026-02-23", "2026-02-25")
    again = _event("A", "2026-02-24")

    layout = layout_row(ROW, [first, again])

    assert [(p.event.id, p.lane, p.start_idx, p.end_idx) for p in layout.placements] == [("A", 0, 0, 2)]
    assert layout.lane_count == 1
    assert "duplicate" in caplog.text
