from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from ..common.datetime_utils import date_span, iter_days
from ..core.enums import CalendarEventType
from .model import CalendarContext, CalendarOccurrence
from .repository import CalendarRepository


def expand_occurrences(occurrences: Sequence[CalendarOccurrence]) -> CalendarContext:
    """Expand each occurrence into one entry per calendar day (inclusive)."""

    holidays: dict[str, str] = {}
    poya_days: dict[str, str] = {}

    for occ in occurrences:
        target = holidays if occ.event_type == CalendarEventType.HOLIDAY else poya_days
        for day in iter_days(occ.start.date(), occ.end.date()):
            target.setdefault(day.isoformat(), occ.title)

    return CalendarContext(holidays=holidays, poya_days=poya_days)


class CalendarContextProvider:
    def __init__(self, calendar: CalendarRepository):
        self._calendar = calendar

    def context_for(self, dates: Iterable[date]) -> CalendarContext:
        items = list(dates)
        if not items:
            return CalendarContext()

        start, end = date_span(items)
        occurrences = self._calendar.list_occurrences(start_date=start, end_date=end)
        return expand_occurrences(occurrences)
