from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from ..calendar.service import CalendarContextProvider
from ..core.constants import UNRESOLVED_EMPLOYEE_ERROR
from ..core.enums import ValidationStatus
from ..employees.service import EmployeeResolver
from ..ingest.model import IngestedRow
from ..leaves.service import LeaveConflictChecker, leave_key
from .model import EditableRecord
from .rules import override_status

logger = logging.getLogger(__name__)


def make_row_id(index: int) -> str:
    return f"r{index:05d}"


class ReconciliationEngine:
    """Turn ingested rows into annotated, editable review records.

    Employees are resolved first; calendar context and leave conflicts only
    depend on the date range / resolved ids, so both lookups run concurrently
    and are joined before any record is annotated.
    """

    def __init__(
        self,
        resolver: EmployeeResolver,
        calendar: CalendarContextProvider,
        leave_conflicts: LeaveConflictChecker,
    ):
        self._resolver = resolver
        self._calendar = calendar
        self._leave_conflicts = leave_conflicts

    def reconcile(self, rows: Sequence[IngestedRow]) -> list[EditableRecord]:
        records = [EditableRecord.from_row(make_row_id(i), row) for i, row in enumerate(rows, start=1)]
        if not records:
            return []

        employee_map = self._resolver.resolve(r.person_id for r in records)
        employee_ids = {employee_map[r.person_id] for r in records if r.person_id in employee_map}
        dates = {r.date for r in records}

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="reconcile") as pool:
            calendar_future = pool.submit(self._calendar.context_for, dates)
            conflicts_future = pool.submit(self._leave_conflicts.conflicts, employee_ids, dates)
            calendar = calendar_future.result()
            conflicts = conflicts_future.result()

        for record in records:
            employee_db_id = employee_map.get(record.person_id)
            record.employee_db_id = employee_db_id
            if employee_db_id is None:
                record.validation_status = ValidationStatus.INVALID
                record.error = record.error or UNRESOLVED_EMPLOYEE_ERROR
            else:
                record.validation_status = ValidationStatus.VALID

            record.holiday_name = calendar.holiday_name(record.date)
            record.is_holiday = record.holiday_name is not None
            record.poya_name = calendar.poya_name(record.date)
            record.is_poya = record.poya_name is not None

            if employee_db_id is not None:
                record.leave_type = conflicts.get(leave_key(employee_db_id, record.date))
            record.on_leave = record.leave_type is not None

            forced = override_status(record)
            if forced is not None:
                record.status = forced

        key_counts = Counter(r.key for r in records)
        for record in records:
            record.is_duplicate = key_counts[record.key] > 1

        duplicates = sum(1 for r in records if r.is_duplicate)
        logger.info(
            "Reconciled %d rows: %d valid, %d invalid, %d duplicate",
            len(records),
            sum(1 for r in records if r.validation_status == ValidationStatus.VALID),
            sum(1 for r in records if r.validation_status == ValidationStatus.INVALID),
            duplicates,
        )
        return records
