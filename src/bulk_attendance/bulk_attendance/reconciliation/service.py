from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..attendance.committer import ApprovalCommitter
from ..core.enums import AttendanceStatus, SessionClosePolicy
from ..core.exceptions import IngestError, SessionLoadError, SessionNotFoundError
from ..ingest.codec import rows_from_json, rows_to_json
from ..ingest.excel_parser import parse_attendance_workbook
from .engine import ReconciliationEngine
from .model import BatchApprovalResult, EditableRecord, RowApprovalResult
from .rules import badges_for, has_errors
from .session import UNSET, ReviewSession
from .store import ReviewSessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadResult:
    token: str
    total_records: int
    parse_errors: list[str] = field(default_factory=list)


class BulkReviewService:
    def __init__(
        self,
        engine: ReconciliationEngine,
        committer: ApprovalCommitter,
        store: ReviewSessionStore,
        *,
        close_policy: SessionClosePolicy = SessionClosePolicy.ANY_SUCCESS,
    ):
        self._engine = engine
        self._committer = committer
        self._store = store
        self._close_policy = close_policy

    def upload(self, source: Any) -> UploadResult:
        batch = parse_attendance_workbook(source)
        if not batch.rows:
            raise IngestError("No valid records found in the Excel file")

        token = self._store.stash_batch(rows_to_json(batch.rows))
        logger.info("Stashed upload %s with %d rows", token, batch.total_records)
        return UploadResult(token=token, total_records=batch.total_records, parse_errors=list(batch.errors))

    def open_session(self, token: str) -> ReviewSession:
        """Resume an open session, or build one from the stashed upload."""

        existing = self._store.get_session(token)
        if existing is not None:
            return existing

        rows = rows_from_json(self._store.get_batch(token))
        try:
            records = self._engine.reconcile(rows)
        except Exception:
            logger.exception("Reconciliation failed for upload %s", token)
            raise SessionLoadError("Failed to validate employee records")

        session = ReviewSession(
            token,
            records,
            self._committer,
            close_policy=self._close_policy,
        )
        # A concurrent open of the same token may have stored its session first.
        session = self._store.put_session(session)
        self._store.drop_batch(token)
        return session

    def get_session(self, token: str) -> ReviewSession:
        session = self._store.get_session(token)
        if session is None:
            raise SessionNotFoundError("Review session not found or expired. Please upload the file again.")
        return session

    def edit_row(
        self,
        token: str,
        row_id: str,
        *,
        check_in: Any = UNSET,
        check_out: Any = UNSET,
        status: Any = UNSET,
    ) -> EditableRecord:
        session = self.get_session(token)
        with session.lock:
            return session.edit_row(row_id, check_in=check_in, check_out=check_out, status=status)

    def approve_row(self, token: str, row_id: str) -> RowApprovalResult:
        session = self.get_session(token)
        with session.lock:
            result = session.approve_row(row_id)
        self._discard_if_closed(session)
        return result

    def skip_row(self, token: str, row_id: str) -> bool:
        session = self.get_session(token)
        with session.lock:
            removed = session.ignore_row(row_id)
        self._discard_if_closed(session)
        return removed

    def approve_all(self, token: str) -> BatchApprovalResult:
        session = self.get_session(token)
        with session.lock:
            result = session.approve_all()
        self._discard_if_closed(session)
        return result

    def _discard_if_closed(self, session: ReviewSession) -> None:
        if session.closed:
            self._store.discard(session.token)
            logger.info("Review session %s completed", session.token)

    def cancel(self, token: str) -> bool:
        discarded = self._store.discard(token)
        if discarded:
            logger.info("Cancelled review session %s", token)
        return discarded

    # -------- Views --------
    def session_view(self, session: ReviewSession) -> dict:
        summary = session.summary()
        return {
            "token": session.token,
            "closed": session.closed,
            "created_at": session.created_at.isoformat(timespec="seconds"),
            "rows": [self.row_view(r) for r in session.records],
            "summary": {
                "total": summary.total,
                "valid": summary.valid_count,
                "invalid": summary.invalid_count,
                "errors": summary.error_count,
                "holidays": summary.holiday_count,
                "poya": summary.poya_count,
                "leave_conflicts": summary.leave_conflict_count,
                "duplicates": summary.duplicate_count,
            },
        }

    def row_view(self, r: EditableRecord) -> dict:
        label = {
            AttendanceStatus.PRESENT: "Present",
            AttendanceStatus.ABSENT: "Absent",
            AttendanceStatus.HALF_DAY: "Half Day",
            AttendanceStatus.LEAVE: "Leave",
            AttendanceStatus.POYA: "Poya",
            AttendanceStatus.HOLIDAY: "Holiday",
        }.get(r.status, r.status.value)

        css = {
            AttendanceStatus.PRESENT: "bg-success",
            AttendanceStatus.ABSENT: "bg-secondary",
            AttendanceStatus.HALF_DAY: "bg-warning text-dark",
            AttendanceStatus.LEAVE: "bg-info text-dark",
            AttendanceStatus.POYA: "bg-primary",
            AttendanceStatus.HOLIDAY: "bg-danger",
        }.get(r.status, "bg-secondary")

        return {
            "row_id": r.row_id,
            "person_id": r.person_id,
            "name": r.source.name,
            "department": r.source.department,
            "position": r.source.position,
            "date": r.date.strftime("%Y-%m-%d"),
            "day_of_week": r.source.day_of_week,
            "check_in": r.check_in or "",
            "check_out": r.check_out or "",
            "status": r.status.value,
            "status_label": label,
            "css_class": css,
            "validation_status": r.validation_status.value,
            "employee_db_id": r.employee_db_id,
            "error": r.error,
            "has_errors": has_errors(r),
            "is_holiday": r.is_holiday,
            "holiday_name": r.holiday_name,
            "is_poya": r.is_poya,
            "poya_name": r.poya_name,
            "on_leave": r.on_leave,
            "leave_type": r.leave_type,
            "is_duplicate": r.is_duplicate,
            "badges": [{"kind": b.kind, "message": b.message, "blocking": b.blocking} for b in badges_for(r)],
        }


def result_view(result: RowApprovalResult) -> dict:
    deduction = result.leave_deduction
    return {
        "row_id": result.row_id,
        "success": result.success,
        "error": result.error,
        "session_closed": result.session_closed,
        "leave_deduction": None
        if deduction is None
        else {
            "leave_type": deduction.leave_type,
            "days_to_deduct": deduction.days_to_deduct,
            "should_cancel_leave": deduction.should_cancel_leave,
        },
    }
