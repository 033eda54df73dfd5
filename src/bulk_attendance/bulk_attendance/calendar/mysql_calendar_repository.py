from __future__ import annotations

from datetime import date, datetime, time
from typing import Sequence

from ..core.enums import CalendarEventType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import CalendarOccurrence
from .repository import CalendarRepository


class MySQLCalendarRepository(CalendarRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_occurrences(self, *, start_date: date, end_date: date) -> Sequence[CalendarOccurrence]:
        range_start = datetime.combine(start_date, time.min)
        range_end = datetime.combine(end_date, time.max)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT title, event_type, start_time, end_time
                FROM calendar_events
                WHERE event_type IN (%s, %s)
                  AND status <> 'cancelled'
                  AND start_time <= %s
                  AND end_time >= %s
                ORDER BY start_time ASC
                """,
                (
                    CalendarEventType.HOLIDAY.value,
                    CalendarEventType.POYA.value,
                    range_end,
                    range_start,
                ),
            )
            rows = fetchall(cur)
            return [
                CalendarOccurrence(
                    title=r["title"],
                    start=r["start_time"],
                    end=r["end_time"],
                    event_type=CalendarEventType(r["event_type"]),
                )
                for r in rows
            ]
