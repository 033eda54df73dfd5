from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import LeaveBalance, LeaveGrant, MonthlyLeaveBalance


class LeaveRepository(Protocol):
    def list_approved_overlapping(
        self,
        *,
        employee_ids: Sequence[int],
        start_date: date,
        end_date: date,
    ) -> Sequence[LeaveGrant]:
        raise NotImplementedError

    def find_grant_covering(self, *, employee_id: int, work_date: date) -> Optional[LeaveGrant]:
        """Any leave line covering the date, regardless of request status."""

        raise NotImplementedError

    def set_request_status(self, *, request_id: int, status: RequestStatus) -> bool:
        raise NotImplementedError

    def get_balance(self, *, employee_id: int, leave_type: str) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def update_balance(self, *, balance_id: int, used_days: float, remaining_days: float) -> bool:
        raise NotImplementedError

    def get_monthly_balance(self, *, employee_id: int, month: int, year: int) -> Optional[MonthlyLeaveBalance]:
        raise NotImplementedError

    def update_monthly_balance(self, *, balance_id: int, used_leaves: float, available_leaves: float) -> bool:
        raise NotImplementedError
