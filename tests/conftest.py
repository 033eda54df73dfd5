from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from typing import Optional

import pytest

from src.bulk_attendance.bulk_attendance.attendance.committer import ApprovalCommitter
from src.bulk_attendance.bulk_attendance.attendance.model import AttendanceEntry
from src.bulk_attendance.bulk_attendance.calendar.model import CalendarOccurrence
from src.bulk_attendance.bulk_attendance.calendar.service import CalendarContextProvider
from src.bulk_attendance.bulk_attendance.core.enums import (
    AttendanceStatus,
    CalendarEventType,
    RequestStatus,
    SessionClosePolicy,
)
from src.bulk_attendance.bulk_attendance.employees.model import EmployeeRef
from src.bulk_attendance.bulk_attendance.employees.service import EmployeeResolver
from src.bulk_attendance.bulk_attendance.ingest.model import IngestedRow
from src.bulk_attendance.bulk_attendance.leaves.model import LeaveBalance, LeaveGrant, MonthlyLeaveBalance
from src.bulk_attendance.bulk_attendance.leaves.service import LeaveConflictChecker
from src.bulk_attendance.bulk_attendance.reconciliation.engine import ReconciliationEngine
from src.bulk_attendance.bulk_attendance.reconciliation.session import ReviewSession


class FakeEmployeesRepo:
    def __init__(self, numbers: dict[str, int]):
        self.numbers = numbers

    def find_active_by_numbers(self, employee_nos):
        return [EmployeeRef(employee_id=self.numbers[n], employee_no=n) for n in employee_nos if n in self.numbers]


class FakeCalendarRepo:
    def __init__(self, occurrences: Optional[list[CalendarOccurrence]] = None):
        self.occurrences = list(occurrences or [])

    def add(self, title: str, start: date, end: date, event_type: CalendarEventType) -> None:
        self.occurrences.append(
            CalendarOccurrence(
                title=title,
                start=datetime.combine(start, time(0, 0)),
                end=datetime.combine(end, time(23, 59)),
                event_type=event_type,
            )
        )

    def list_occurrences(self, *, start_date: date, end_date: date):
        return [o for o in self.occurrences if o.start.date() <= end_date and o.end.date() >= start_date]


class FakeLeavesRepo:
    def __init__(self):
        self.grants: list[LeaveGrant] = []
        self.balances: dict[tuple[int, str], LeaveBalance] = {}
        self.monthly: dict[tuple[int, int, int], MonthlyLeaveBalance] = {}
        self.fail_listing = False

    def add_grant(self, *, employee_id: int, leave_type: str, start: date, end: date, total_days: float,
                  status: RequestStatus = RequestStatus.APPROVED) -> LeaveGrant:
        grant = LeaveGrant(
            leave_id=len(self.grants) + 1,
            request_id=100 + len(self.grants) + 1,
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start,
            end_date=end,
            total_days=total_days,
            request_status=status,
        )
        self.grants.append(grant)
        return grant

    def list_approved_overlapping(self, *, employee_ids, start_date, end_date):
        if self.fail_listing:
            raise RuntimeError("database unavailable")
        return [
            g
            for g in self.grants
            if g.request_status == RequestStatus.APPROVED
            and g.employee_id in employee_ids
            and g.start_date <= end_date
            and g.end_date >= start_date
        ]

    def find_grant_covering(self, *, employee_id, work_date):
        for g in self.grants:
            if g.employee_id == employee_id and g.covers(work_date):
                return g
        return None

    def set_request_status(self, *, request_id, status):
        for i, g in enumerate(self.grants):
            if g.request_id == request_id:
                self.grants[i] = replace(g, request_status=status)
                return True
        return False

    def get_balance(self, *, employee_id, leave_type):
        return self.balances.get((employee_id, leave_type))

    def update_balance(self, *, balance_id, used_days, remaining_days):
        for key, b in self.balances.items():
            if b.balance_id == balance_id:
                self.balances[key] = replace(b, used_days=used_days, remaining_days=remaining_days)
                return True
        return False

    def get_monthly_balance(self, *, employee_id, month, year):
        return self.monthly.get((employee_id, month, year))

    def update_monthly_balance(self, *, balance_id, used_leaves, available_leaves):
        for key, b in self.monthly.items():
            if b.balance_id == balance_id:
                self.monthly[key] = replace(b, used_leaves=used_leaves, available_leaves=available_leaves)
                return True
        return False


class FakeAttendanceRepo:
    def __init__(self):
        self.entries: dict[tuple[int, date], AttendanceEntry] = {}
        self.fail_for: set[int] = set()
        self._id = 0

    def get_for_employee_and_date(self, employee_id, work_date):
        return self.entries.get((employee_id, work_date))

    def upsert(self, *, employee_id, work_date, check_in, check_out, status, notes=None):
        if employee_id in self.fail_for:
            raise RuntimeError(f"Duplicate entry for employee {employee_id}")
        existing = self.entries.get((employee_id, work_date))
        if existing is None:
            self._id += 1
        self.entries[(employee_id, work_date)] = AttendanceEntry(
            entry_id=existing.entry_id if existing else self._id,
            employee_id=employee_id,
            work_date=work_date,
            check_in=check_in,
            check_out=check_out,
            status=status,
            notes=notes,
        )
        return True


def make_row(
    person_id: str,
    day: date,
    check_in: Optional[str] = "09:00:00",
    check_out: Optional[str] = "17:00:00",
    *,
    status: AttendanceStatus = AttendanceStatus.PRESENT,
    name: str = "",
    department: str = "Engineering",
    position: str = "Developer",
    error: Optional[str] = None,
) -> IngestedRow:
    return IngestedRow(
        person_id=person_id,
        name=name or f"Employee {person_id}",
        department=department,
        position=position,
        date=day,
        day_of_week=day.strftime("%A"),
        check_in=check_in,
        check_out=check_out,
        status=status,
        error=error,
    )


class World:
    """Fake repositories wired into a real engine and committer."""

    row = staticmethod(make_row)

    def __init__(self):
        self.employees = FakeEmployeesRepo({"E1": 1, "E2": 2, "E3": 3})
        self.calendar = FakeCalendarRepo()
        self.leaves = FakeLeavesRepo()
        self.attendance = FakeAttendanceRepo()

    @property
    def engine(self) -> ReconciliationEngine:
        return ReconciliationEngine(
            EmployeeResolver(self.employees),
            CalendarContextProvider(self.calendar),
            LeaveConflictChecker(self.leaves),
        )

    @property
    def committer(self) -> ApprovalCommitter:
        return ApprovalCommitter(self.attendance, self.leaves)


@pytest.fixture()
def world() -> World:
    return World()


@pytest.fixture()
def open_session(world):
    """Reconcile rows with the world's fakes and wrap them in a review session."""

    def _open(rows, *, close_policy=SessionClosePolicy.ANY_SUCCESS) -> ReviewSession:
        records = world.engine.reconcile(rows)
        return ReviewSession("tok", records, world.committer, close_policy=close_policy)

    return _open
