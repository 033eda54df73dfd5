from __future__ import annotations

from datetime import date
from typing import Protocol, Sequence

from .model import CalendarOccurrence


class CalendarRepository(Protocol):
    def list_occurrences(self, *, start_date: date, end_date: date) -> Sequence[CalendarOccurrence]:
        """Holiday/Poya events whose [start, end] intersects the date range."""

        raise NotImplementedError
