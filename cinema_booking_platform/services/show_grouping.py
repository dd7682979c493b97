"""
Grouping of a movie's shows into date buckets for the date and time pickers.
"""

import calendar
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from ..schemas.catalog import Show

WEEKDAY_ABBREVIATIONS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


class ShowGroup(BaseModel):
    """Shows of one calendar date, ordered by start time."""
    model_config = ConfigDict(frozen=True)

    show_date: date
    label: str
    shows: Tuple[Show, ...]

    @property
    def date_key(self) -> str:
        return self.show_date.isoformat()


class CalendarDay(BaseModel):
    """One day cell of the month calendar."""

    day: int
    date: str
    available: bool
    selected: bool


class CalendarMonth(BaseModel):
    """Month grid used to pick a date outside the displayed range."""

    year: int
    month: int
    month_name: str
    starting_day_of_week: int
    days_in_month: int
    days: List[CalendarDay]


def format_date_label(day: date, today: Optional[date] = None) -> str:
    """Return "Today", "Tomorrow" or a weekday abbreviation plus day of month."""
    today = today or date.today()
    if day == today:
        return "Today"
    if day == today + timedelta(days=1):
        return "Tomorrow"
    return f"{WEEKDAY_ABBREVIATIONS[day.weekday()]} {day.day}"


def format_show_time(moment: datetime) -> str:
    """Format a start time on the 12-hour clock, e.g. ``8:05 AM``."""
    suffix = "PM" if moment.hour >= 12 else "AM"
    hour = moment.hour % 12 or 12
    return f"{hour}:{moment.minute:02d} {suffix}"


def _wall_clock(show: Show) -> datetime:
    # Wall-clock order, consistent with grouping on the date as given.
    return show.start_time.replace(tzinfo=None)


def group_shows_by_date(shows: Iterable[Show], today: Optional[date] = None) -> List[ShowGroup]:
    """
    Partition shows by the date portion of their start time.

    Args:
        shows: Shows of one movie, in any order
        today: Reference date for the "Today"/"Tomorrow" labels

    Returns:
        Groups ordered by date, each with its shows ordered by start time.
        Dates without shows produce no group.
    """
    buckets: Dict[date, List[Show]] = defaultdict(list)
    for show in shows:
        buckets[show.start_time.date()].append(show)

    return [
        ShowGroup(
            show_date=show_date,
            label=format_date_label(show_date, today),
            shows=tuple(sorted(buckets[show_date], key=_wall_clock)),
        )
        for show_date in sorted(buckets, key=lambda d: d.isoformat())
    ]


def find_group_index(groups: List[ShowGroup], date_key: str) -> Optional[int]:
    """Return the index of the group whose date string equals ``date_key`` exactly."""
    for index, group in enumerate(groups):
        if group.date_key == date_key:
            return index
    return None


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move a (year, month) pair by ``delta`` months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def build_calendar_month(
    year: int,
    month: int,
    available_dates: Iterable[str],
    selected_date: Optional[str] = None
) -> CalendarMonth:
    """
    Build the month grid for the calendar lookup.

    Weekdays are numbered from Sunday = 0. A day is available when its ISO
    date string is one of ``available_dates``.
    """
    available = set(available_dates)
    first_weekday, days_in_month = calendar.monthrange(year, month)
    days = []
    for day in range(1, days_in_month + 1):
        key = date(year, month, day).isoformat()
        days.append(CalendarDay(
            day=day,
            date=key,
            available=key in available,
            selected=key == selected_date,
        ))

    return CalendarMonth(
        year=year,
        month=month,
        month_name=calendar.month_name[month],
        starting_day_of_week=(first_weekday + 1) % 7,
        days_in_month=days_in_month,
        days=days,
    )
