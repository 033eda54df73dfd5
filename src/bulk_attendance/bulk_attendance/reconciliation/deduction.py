from __future__ import annotations

from typing import Optional

from ..attendance.model import CommitItem, LeaveDeduction
from ..core.constants import BULK_NOTE_PREFIX
from ..core.enums import AttendanceStatus
from .model import EditableRecord

# (status, both times recorded?) -> (days to deduct, cancel the leave grant?)
# Only consulted for rows that collide with approved leave.
LEAVE_DEDUCTION_TABLE: dict[tuple[AttendanceStatus, bool], tuple[float, bool]] = {
    (AttendanceStatus.LEAVE, False): (0, False),
    (AttendanceStatus.HALF_DAY, True): (0.5, True),
    (AttendanceStatus.PRESENT, True): (1, True),
}


def compute_leave_deduction(record: EditableRecord) -> Optional[LeaveDeduction]:
    if not record.on_leave or record.employee_db_id is None:
        return None

    both = record.has_check_in and record.has_check_out
    neither = not record.has_check_in and not record.has_check_out
    if not both and not neither:
        return None

    decision = LEAVE_DEDUCTION_TABLE.get((record.status, both))
    if decision is None:
        return None

    days, cancel = decision
    return LeaveDeduction(
        employee_id=record.employee_db_id,
        leave_type=record.leave_type or "",
        days_to_deduct=days,
        should_cancel_leave=cancel,
    )


def bulk_note(record: EditableRecord) -> str:
    detail = " ".join(p for p in (record.source.department, record.source.position) if p)
    return f"{BULK_NOTE_PREFIX} - {detail}" if detail else BULK_NOTE_PREFIX


def build_commit_item(record: EditableRecord) -> CommitItem:
    if record.employee_db_id is None:
        raise ValueError(f"Row {record.row_id} has no resolved employee")

    return CommitItem(
        employee_id=record.employee_db_id,
        date=record.date,
        check_in=record.check_in or None,
        check_out=record.check_out or None,
        status=record.status,
        notes=bulk_note(record),
        leave_deduction=compute_leave_deduction(record),
        row_id=record.row_id,
    )
