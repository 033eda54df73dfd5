from __future__ import annotations

import logging
from typing import Sequence

from ..common.validators import parse_hms
from ..core.enums import AttendanceStatus, RequestStatus
from ..core.exceptions import DomainError
from ..leaves.repository import LeaveRepository
from .model import CommitError, CommitItem, CommitResult, LeaveDeduction
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class ApprovalCommitter:
    """Persist approved review rows and apply their leave-balance side effects.

    Items are processed one by one; a failing item is recorded in the result
    and never aborts its siblings. Nothing is retried.
    """

    def __init__(self, attendance: AttendanceRepository, leaves: LeaveRepository):
        self._attendance = attendance
        self._leaves = leaves

    def commit(self, items: Sequence[CommitItem]) -> CommitResult:
        result = CommitResult()

        for item in items:
            try:
                self._commit_one(item)
            except Exception as e:
                message = str(e) or e.__class__.__name__
                logger.warning(
                    "Failed to mark attendance for employee %s on %s: %s",
                    item.employee_id,
                    item.date.isoformat(),
                    message,
                )
                result.failed_count += 1
                result.errors.append(
                    CommitError(employee_id=item.employee_id, date=item.date, error=message, row_id=item.row_id)
                )
                continue

            result.success_count += 1
            if item.row_id is not None:
                result.committed_row_ids.append(item.row_id)

        logger.info("Bulk attendance commit: %d succeeded, %d failed", result.success_count, result.failed_count)
        return result

    def _commit_one(self, item: CommitItem) -> None:
        deduction = item.leave_deduction
        if deduction is not None and deduction.days_to_deduct > 0:
            self._apply_leave_deduction(item, deduction)

        if item.status == AttendanceStatus.LEAVE and deduction is None:
            self._deduct_monthly_leave(item)

        existing = self._attendance.get_for_employee_and_date(item.employee_id, item.date)
        if existing is not None:
            logger.info(
                "Overwriting attendance for employee %s on %s (%s -> %s)",
                item.employee_id,
                item.date.isoformat(),
                existing.status.value,
                item.status.value,
            )

        ok = self._attendance.upsert(
            employee_id=item.employee_id,
            work_date=item.date,
            check_in=parse_hms(item.check_in),
            check_out=parse_hms(item.check_out),
            status=item.status,
            notes=item.notes,
        )
        if not ok:
            raise DomainError("Failed to save attendance record")

    def _apply_leave_deduction(self, item: CommitItem, deduction: LeaveDeduction) -> None:
        grant = self._leaves.find_grant_covering(employee_id=item.employee_id, work_date=item.date)
        if grant is None:
            logger.info("No leave request found for employee %s on %s", item.employee_id, item.date)
            return

        if grant.request_status != RequestStatus.APPROVED:
            logger.info("Leave request %s is %s, skipping deduction", grant.request_id, grant.request_status.value)
            return

        if not deduction.should_cancel_leave:
            return

        if not self._leaves.set_request_status(request_id=grant.request_id, status=RequestStatus.CANCELLED):
            raise DomainError("Failed to cancel leave request")
        logger.info("Cancelled leave request %s for employee %s", grant.request_id, item.employee_id)

        # The worked portion stays deducted; the rest of the grant goes back to the balance.
        days_to_restore = grant.total_days - deduction.days_to_deduct
        if days_to_restore <= 0:
            return

        balance = self._leaves.get_balance(employee_id=item.employee_id, leave_type=grant.leave_type)
        if balance is None:
            logger.warning("No %s leave balance for employee %s", grant.leave_type, item.employee_id)
            return

        updated = self._leaves.update_balance(
            balance_id=balance.balance_id,
            used_days=balance.used_days - days_to_restore,
            remaining_days=balance.remaining_days + days_to_restore,
        )
        if not updated:
            logger.error("Error updating leave balance %s", balance.balance_id)

    def _deduct_monthly_leave(self, item: CommitItem) -> None:
        month, year = item.date.month, item.date.year
        balance = self._leaves.get_monthly_balance(employee_id=item.employee_id, month=month, year=year)
        if balance is None:
            logger.error("Leave balance not found for employee %s (%02d/%d)", item.employee_id, month, year)
            return

        if balance.available_leaves < 1:
            logger.warning("Insufficient leave balance for employee %s (%02d/%d)", item.employee_id, month, year)
            return

        updated = self._leaves.update_monthly_balance(
            balance_id=balance.balance_id,
            used_leaves=balance.used_leaves + 1,
            available_leaves=balance.available_leaves - 1,
        )
        if not updated:
            logger.error("Error deducting leave balance %s", balance.balance_id)
