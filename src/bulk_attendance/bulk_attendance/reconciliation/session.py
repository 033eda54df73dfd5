from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Optional

from ..attendance.committer import ApprovalCommitter
from ..common.datetime_utils import now_local
from ..common.validators import require_status, require_time
from ..core.constants import UNRESOLVED_EMPLOYEE_ERROR
from ..core.enums import SessionClosePolicy, ValidationStatus
from ..core.exceptions import ApprovalBlockedError, RowNotFoundError, ValidationError
from .deduction import build_commit_item
from .model import BatchApprovalResult, EditableRecord, ReviewSummary, RowApprovalResult
from .rules import classify_error, has_errors, holiday_status_changed, holiday_times_recorded

logger = logging.getLogger(__name__)

UNSET: Any = object()


class ReviewSession:
    """Working set of one bulk upload, mutated only through explicit commands."""

    def __init__(
        self,
        token: str,
        records: list[EditableRecord],
        committer: ApprovalCommitter,
        *,
        close_policy: SessionClosePolicy = SessionClosePolicy.ANY_SUCCESS,
        created_at: Optional[datetime] = None,
    ):
        self.token = token
        self._records = list(records)
        self._committer = committer
        self._close_policy = close_policy
        self.created_at = created_at or now_local()
        self.closed = False
        self.lock = threading.RLock()

    @property
    def records(self) -> list[EditableRecord]:
        return list(self._records)

    def find(self, row_id: str) -> EditableRecord:
        for record in self._records:
            if record.row_id == row_id:
                return record
        raise RowNotFoundError(f"Row {row_id} is not in this review")

    def _ensure_open(self) -> None:
        if self.closed:
            raise ValidationError("This review session has already been completed")

    def _remove(self, row_id: str) -> bool:
        before = len(self._records)
        self._records = [r for r in self._records if r.row_id != row_id]
        return len(self._records) < before

    def _close_if_empty(self) -> bool:
        if not self._records:
            self.closed = True
        return self.closed

    def _has_duplicate_sibling(self, record: EditableRecord) -> bool:
        if not record.is_duplicate:
            return False
        return any(r.key == record.key and r.row_id != record.row_id for r in self._records)

    # -------- Commands --------
    def edit_row(
        self,
        row_id: str,
        *,
        check_in: Any = UNSET,
        check_out: Any = UNSET,
        status: Any = UNSET,
    ) -> EditableRecord:
        """Apply user edits. Holiday/Poya/leave overrides are not re-applied."""

        self._ensure_open()
        record = self.find(row_id)

        new_check_in = record.check_in if check_in is UNSET else require_time(check_in, "Check-in")
        new_check_out = record.check_out if check_out is UNSET else require_time(check_out, "Check-out")
        new_status = record.status if status is UNSET else require_status(status)

        record.check_in = new_check_in
        record.check_out = new_check_out
        record.status = new_status

        # An ingest time error goes away once that field is re-entered.
        edited = {"check-in": check_in is not UNSET, "check-out": check_out is not UNSET}
        if record.error and any(
            was_edited and record.error.startswith(f"Invalid {label} time") for label, was_edited in edited.items()
        ):
            record.error = None if record.employee_db_id is not None else UNRESOLVED_EMPLOYEE_ERROR
        return record

    def approve_row(self, row_id: str) -> RowApprovalResult:
        self._ensure_open()
        record = self.find(row_id)

        if record.validation_status == ValidationStatus.INVALID or record.employee_db_id is None:
            raise ApprovalBlockedError(record.error or UNRESOLVED_EMPLOYEE_ERROR)
        if holiday_times_recorded(record):
            raise ApprovalBlockedError("Clear check-in/check-out before approving a holiday")
        if holiday_status_changed(record):
            raise ApprovalBlockedError("Holiday rows can only be approved with status 'holiday'")
        if has_errors(record):
            raise ApprovalBlockedError("Fix the validation errors on this row before approving")
        if self._has_duplicate_sibling(record):
            raise ApprovalBlockedError("Another row has the same employee and date; skip one of them first")

        item = build_commit_item(record)
        result = self._committer.commit([item])

        if result.success_count > 0:
            record.approved = True
            self._remove(row_id)
            return RowApprovalResult(
                row_id=row_id,
                success=True,
                leave_deduction=item.leave_deduction,
                session_closed=self._close_if_empty(),
            )

        error = result.error_for(row_id) or "Failed to mark attendance"
        return RowApprovalResult(row_id=row_id, success=False, error=error, leave_deduction=item.leave_deduction)

    def ignore_row(self, row_id: str) -> bool:
        """Drop a row without committing. Returns False if it was already gone."""

        self._ensure_open()
        removed = self._remove(row_id)
        self._close_if_empty()
        return removed

    def approve_all(self) -> BatchApprovalResult:
        self._ensure_open()

        candidates = [r for r in self._records if r.validation_status == ValidationStatus.VALID]
        if not candidates:
            raise ApprovalBlockedError("No valid records to submit")

        counts = {"missing_check_in": 0, "missing_check_out": 0, "other": 0}
        for record in candidates:
            kind = classify_error(record)
            if kind:
                counts[kind] += 1
        if any(counts.values()):
            raise ApprovalBlockedError(
                "Cannot approve: "
                f"{counts['missing_check_in']} row(s) missing check-in, "
                f"{counts['missing_check_out']} row(s) missing check-out, "
                f"{counts['other']} row(s) with other validation errors"
            )

        duplicated = [r for r in candidates if self._has_duplicate_sibling(r)]
        if duplicated:
            raise ApprovalBlockedError(
                f"Cannot approve: {len(duplicated)} row(s) share an employee and date with another row"
            )

        result = self._committer.commit([build_commit_item(r) for r in candidates])

        for row_id in result.committed_row_ids:
            self._remove(row_id)
        for err in result.errors:
            logger.warning(
                "Bulk approval failed for employee %s on %s (row %s): %s",
                err.employee_id,
                err.date.isoformat(),
                err.row_id,
                err.error,
            )

        if self._close_policy == SessionClosePolicy.ALL_SUCCESS:
            self.closed = result.success_count > 0 and result.failed_count == 0
        else:
            self.closed = result.success_count > 0

        return BatchApprovalResult(
            success_count=result.success_count,
            failed_count=result.failed_count,
            errors=list(result.errors),
            session_closed=self.closed,
            remaining=self.records,
        )

    def summary(self) -> ReviewSummary:
        records = self._records
        return ReviewSummary(
            total=len(records),
            valid_count=sum(1 for r in records if r.validation_status == ValidationStatus.VALID),
            invalid_count=sum(1 for r in records if r.validation_status == ValidationStatus.INVALID),
            error_count=sum(1 for r in records if has_errors(r)),
            holiday_count=sum(1 for r in records if r.is_holiday),
            poya_count=sum(1 for r in records if r.is_poya),
            leave_conflict_count=sum(1 for r in records if r.on_leave),
            duplicate_count=sum(1 for r in records if self._has_duplicate_sibling(r)),
        )
