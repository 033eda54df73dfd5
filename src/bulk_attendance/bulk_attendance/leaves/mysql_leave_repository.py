from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_days, db_cursor, fetchall, fetchone, in_placeholders
from .model import LeaveBalance, LeaveGrant, MonthlyLeaveBalance
from .repository import LeaveRepository

_GRANT_COLUMNS = """
    lr.id, lr.request_id, lr.employee_id, lr.leave_type,
    lr.start_date, lr.end_date, lr.total_days, r.status AS request_status
"""


def _to_grant(r: dict) -> LeaveGrant:
    return LeaveGrant(
        leave_id=int(r["id"]),
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=r["leave_type"],
        start_date=r["start_date"],
        end_date=r["end_date"],
        total_days=as_days(r["total_days"]),
        request_status=RequestStatus(r["request_status"]),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_approved_overlapping(
        self,
        *,
        employee_ids: Sequence[int],
        start_date: date,
        end_date: date,
    ) -> Sequence[LeaveGrant]:
        ids = [int(i) for i in employee_ids]
        if not ids:
            return []

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_GRANT_COLUMNS}
                FROM leave_requests lr
                JOIN requests r ON r.id = lr.request_id
                WHERE lr.employee_id IN ({in_placeholders(ids)})
                  AND lr.start_date <= %s
                  AND lr.end_date >= %s
                  AND r.status = %s
                """,
                tuple(ids + [end_date, start_date, RequestStatus.APPROVED.value]),
            )
            return [_to_grant(r) for r in fetchall(cur)]

    def find_grant_covering(self, *, employee_id: int, work_date: date) -> Optional[LeaveGrant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_GRANT_COLUMNS}
                FROM leave_requests lr
                JOIN requests r ON r.id = lr.request_id
                WHERE lr.employee_id=%s AND lr.start_date <= %s AND lr.end_date >= %s
                ORDER BY lr.id ASC
                LIMIT 1
                """,
                (int(employee_id), work_date, work_date),
            )
            r = fetchone(cur)
            return _to_grant(r) if r else None

    def set_request_status(self, *, request_id: int, status: RequestStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE requests SET status=%s WHERE id=%s",
                (status.value, int(request_id)),
            )
            return cur.rowcount > 0

    def get_balance(self, *, employee_id: int, leave_type: str) -> Optional[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, employee_id, leave_type, used_days, remaining_days
                FROM leave_balances
                WHERE employee_id=%s AND leave_type=%s
                """,
                (int(employee_id), leave_type),
            )
            r = fetchone(cur)
            if not r:
                return None
            return LeaveBalance(
                balance_id=int(r["id"]),
                employee_id=int(r["employee_id"]),
                leave_type=r["leave_type"],
                used_days=as_days(r["used_days"]),
                remaining_days=as_days(r["remaining_days"]),
            )

    def update_balance(self, *, balance_id: int, used_days: float, remaining_days: float) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE leave_balances SET used_days=%s, remaining_days=%s WHERE id=%s",
                (used_days, remaining_days, int(balance_id)),
            )
            return cur.rowcount > 0

    def get_monthly_balance(self, *, employee_id: int, month: int, year: int) -> Optional[MonthlyLeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, employee_id, month, year, used_leaves, available_leaves
                FROM employee_leave_balances
                WHERE employee_id=%s AND month=%s AND year=%s
                """,
                (int(employee_id), int(month), int(year)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return MonthlyLeaveBalance(
                balance_id=int(r["id"]),
                employee_id=int(r["employee_id"]),
                month=int(r["month"]),
                year=int(r["year"]),
                used_leaves=as_days(r["used_leaves"]),
                available_leaves=as_days(r["available_leaves"]),
            )

    def update_monthly_balance(self, *, balance_id: int, used_leaves: float, available_leaves: float) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employee_leave_balances SET used_leaves=%s, available_leaves=%s WHERE id=%s",
                (used_leaves, available_leaves, int(balance_id)),
            )
            return cur.rowcount > 0
