"""
Month grid helpers shared by the task and event calendars.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta

from django.utils import timezone

GRID_CELLS = 42

# The grid reaches into the neighbouring months, so the first and last
# years that ``date`` supports cannot be shown.
MIN_YEAR = 2
MAX_YEAR = 9998


@dataclass
class CalendarDay:
    date: date
    is_current_month: bool
    items: list = field(default_factory=list)

    @property
    def is_today(self):
        return self.date == timezone.localdate()


def build_month_grid(year, month, first_weekday=calendar.SUNDAY):
    """Return the 6x7 grid of days shown for ``month``.

    Leading cells are the closing days of the previous month and trailing
    cells the opening days of the next one.
    """
    first = date(year, month, 1)
    lead = (first.weekday() - first_weekday) % 7
    start = first - timedelta(days=lead)

    days = []
    for offset in range(GRID_CELLS):
        day = start + timedelta(days=offset)
        days.append(CalendarDay(date=day, is_current_month=day.month == month))
    return days


def shift_month(year, month, delta):
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def parse_month(request, today=None):
    """Read ``year``/``month`` from the query string, defaulting to today."""
    today = today or timezone.localdate()
    try:
        year = int(request.GET.get("year", today.year))
        month = int(request.GET.get("month", today.month))
    except (TypeError, ValueError):
        return today.year, today.month
    if not 1 <= month <= 12 or not MIN_YEAR <= year <= MAX_YEAR:
        return today.year, today.month
    return year, month


def grid_weeks(days):
    return [days[i : i + 7] for i in range(0, len(days), 7)]
