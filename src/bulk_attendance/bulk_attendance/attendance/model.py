from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceEntry:
    """Persisted attendance for one employee and day (attendance_logs)."""

    entry_id: int
    employee_id: int
    work_date: date
    check_in: Optional[time]
    check_out: Optional[time]
    status: AttendanceStatus
    notes: Optional[str] = None


@dataclass(frozen=True)
class LeaveDeduction:
    """Instruction for the committer; never stored on its own."""

    employee_id: int
    leave_type: str
    days_to_deduct: float
    should_cancel_leave: bool


@dataclass(frozen=True)
class CommitItem:
    employee_id: int
    date: date
    check_in: Optional[str]
    check_out: Optional[str]
    status: AttendanceStatus
    notes: Optional[str] = None
    leave_deduction: Optional[LeaveDeduction] = None
    row_id: Optional[str] = None


@dataclass(frozen=True)
class CommitError:
    employee_id: int
    date: date
    error: str
    row_id: Optional[str] = None


@dataclass
class CommitResult:
    success_count: int = 0
    failed_count: int = 0
    errors: list[CommitError] = field(default_factory=list)
    committed_row_ids: list[str] = field(default_factory=list)

    def error_for(self, row_id: str) -> Optional[str]:
        for e in self.errors:
            if e.row_id == row_id:
                return e.error
        return None
