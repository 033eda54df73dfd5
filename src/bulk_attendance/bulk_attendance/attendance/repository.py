from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol

from ..core.enums import AttendanceStatus
from .model import AttendanceEntry


class AttendanceRepository(Protocol):
    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceEntry]:
        raise NotImplementedError

    def upsert(
        self,
        *,
        employee_id: int,
        work_date: date,
        check_in: Optional[time],
        check_out: Optional[time],
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> bool:
        """Insert or overwrite the entry for (employee_id, work_date)."""

        raise NotImplementedError
