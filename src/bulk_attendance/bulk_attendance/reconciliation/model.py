from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..attendance.model import CommitError, LeaveDeduction
from ..core.enums import AttendanceStatus, ValidationStatus
from ..ingest.model import IngestedRow


@dataclass
class EditableRecord:
    """An ingested row under review, plus reconciliation annotations.

    ``source`` is never touched; edits land on ``check_in``/``check_out``/``status``.
    """

    row_id: str
    source: IngestedRow
    check_in: Optional[str]
    check_out: Optional[str]
    status: AttendanceStatus
    error: Optional[str] = None

    employee_db_id: Optional[int] = None
    validation_status: ValidationStatus = ValidationStatus.PENDING

    is_holiday: bool = False
    holiday_name: Optional[str] = None
    is_poya: bool = False
    poya_name: Optional[str] = None
    on_leave: bool = False
    leave_type: Optional[str] = None

    is_duplicate: bool = False
    approved: bool = False

    @classmethod
    def from_row(cls, row_id: str, row: IngestedRow) -> "EditableRecord":
        return cls(
            row_id=row_id,
            source=row,
            check_in=row.check_in,
            check_out=row.check_out,
            status=row.status,
            error=row.error,
        )

    @property
    def person_id(self) -> str:
        return self.source.person_id

    @property
    def date(self) -> date:
        return self.source.date

    @property
    def key(self) -> tuple[str, date]:
        return self.source.key

    @property
    def has_check_in(self) -> bool:
        return bool(self.check_in)

    @property
    def has_check_out(self) -> bool:
        return bool(self.check_out)

    @property
    def has_any_time(self) -> bool:
        return self.has_check_in or self.has_check_out


@dataclass(frozen=True)
class Badge:
    kind: str
    message: str
    blocking: bool


@dataclass(frozen=True)
class ReviewSummary:
    total: int
    valid_count: int
    invalid_count: int
    error_count: int
    holiday_count: int
    poya_count: int
    leave_conflict_count: int
    duplicate_count: int


@dataclass(frozen=True)
class RowApprovalResult:
    row_id: str
    success: bool
    error: Optional[str] = None
    leave_deduction: Optional[LeaveDeduction] = None
    session_closed: bool = False


@dataclass(frozen=True)
class BatchApprovalResult:
    success_count: int
    failed_count: int
    errors: list[CommitError] = field(default_factory=list)
    session_closed: bool = False
    remaining: list[EditableRecord] = field(default_factory=list)
