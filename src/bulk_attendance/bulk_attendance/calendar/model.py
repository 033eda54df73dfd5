from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from ..core.enums import CalendarEventType


@dataclass(frozen=True)
class CalendarOccurrence:
    """A holiday or Poya day; may span several calendar days."""

    title: str
    start: datetime
    end: datetime
    event_type: CalendarEventType


@dataclass(frozen=True)
class CalendarContext:
    """Per-day lookup maps keyed by ISO date (YYYY-MM-DD)."""

    holidays: dict[str, str] = field(default_factory=dict)
    poya_days: dict[str, str] = field(default_factory=dict)

    def holiday_name(self, day: date) -> str | None:
        return self.holidays.get(day.isoformat())

    def poya_name(self, day: date) -> str | None:
        return self.poya_days.get(day.isoformat())
