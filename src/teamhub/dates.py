from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Union
from zoneinfo import ZoneInfo

DateLike = Union[date, str]

DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


@dataclass(frozen=True)
class GridCell:
    date: date
    in_month: bool = True

    @property
    def date_str(self) -> str:
        return format_date(self.date)


def parse_date(value: Optional[DateLike]) -> Optional[date]:
    """Parse a YYYY-MM-DD string (or pass a date through). Returns None for empty/invalid input."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    value = value.strip()
    if not value:
        return None
    try:
        # Airtable sometimes hands back full ISO timestamps for date fields
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def format_date(d: date) -> str:
    return d.strftime("%Y-%m-%d")


def today(tz: Optional[ZoneInfo] = None) -> date:
    # Local calendar day, never UTC.
    return datetime.now(tz=tz).date()


def today_str(tz: Optional[ZoneInfo] = None) -> str:
    return format_date(today(tz))


def weekday_index(d: date) -> int:
    """1=Mon .. 7=Sun."""
    return d.isoweekday()


def get_monday(d: DateLike) -> date:
    parsed = parse_date(d)
    if parsed is None:
        raise ValueError(f"Invalid date: {d!r}")
    return parsed - timedelta(days=parsed.weekday())


def get_sunday(monday: DateLike) -> date:
    return get_monday(monday) + timedelta(days=6)


def offset_week(monday: DateLike, weeks: int) -> date:
    return get_monday(monday) + timedelta(weeks=weeks)


def offset_month(year: int, month: int, months: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def week_days(monday: DateLike, count: int = 5) -> List[date]:
    start = get_monday(monday)
    return [start + timedelta(days=i) for i in range(count)]


def month_grid(year: int, month: int) -> List[List[GridCell]]:
    """Monday-first rows of 7 cells covering the whole month."""
    first = date(year, month, 1)
    start = get_monday(first)
    next_year, next_month = offset_month(year, month, 1)
    last = date(next_year, next_month, 1) - timedelta(days=1)

    rows: List[List[GridCell]] = []
    cursor = start
    while cursor <= last:
        row = [GridCell(date=cursor + timedelta(days=i), in_month=(cursor + timedelta(days=i)).month == month) for i in range(7)]
        rows.append(row)
        cursor += timedelta(days=7)
    return rows


def span_days(start: date, end: date) -> int:
    """Inclusive day count."""
    return (end - start).days + 1
