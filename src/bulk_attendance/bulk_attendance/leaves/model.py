from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import RequestStatus


@dataclass(frozen=True)
class LeaveGrant:
    """A leave request line (leave_requests) with its parent request status."""

    leave_id: int
    request_id: int
    employee_id: int
    leave_type: str
    start_date: date
    end_date: date
    total_days: float
    request_status: RequestStatus

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class LeaveBalance:
    """Balance for one leave type (leave_balances)."""

    balance_id: int
    employee_id: int
    leave_type: str
    used_days: float
    remaining_days: float


@dataclass(frozen=True)
class MonthlyLeaveBalance:
    """Per-month allowance (employee_leave_balances)."""

    balance_id: int
    employee_id: int
    month: int
    year: int
    used_leaves: float
    available_leaves: float
