from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .attendance.committer import ApprovalCommitter
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .calendar.mysql_calendar_repository import MySQLCalendarRepository
from .calendar.service import CalendarContextProvider
from .core.constants import DEFAULT_SESSION_TTL_MINUTES
from .core.enums import SessionClosePolicy
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.service import EmployeeResolver
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveConflictChecker
from .reconciliation.engine import ReconciliationEngine
from .reconciliation.service import BulkReviewService
from .reconciliation.store import ReviewSessionStore


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    employees_repo: MySQLEmployeeRepository
    calendar_repo: MySQLCalendarRepository
    leaves_repo: MySQLLeaveRepository
    attendance_repo: MySQLAttendanceRepository

    review_store: ReviewSessionStore
    bulk_review_service: BulkReviewService


def build_container(
    *,
    db_config: dict,
    close_policy: str = SessionClosePolicy.ANY_SUCCESS.value,
    session_ttl_minutes: int = DEFAULT_SESSION_TTL_MINUTES,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    employees_repo = MySQLEmployeeRepository(conn)
    calendar_repo = MySQLCalendarRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    engine = ReconciliationEngine(
        EmployeeResolver(employees_repo),
        CalendarContextProvider(calendar_repo),
        LeaveConflictChecker(leaves_repo),
    )
    committer = ApprovalCommitter(attendance_repo, leaves_repo)
    review_store = ReviewSessionStore(ttl=timedelta(minutes=int(session_ttl_minutes)))
    bulk_review_service = BulkReviewService(
        engine,
        committer,
        review_store,
        close_policy=SessionClosePolicy(close_policy),
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        calendar_repo=calendar_repo,
        leaves_repo=leaves_repo,
        attendance_repo=attendance_repo,
        review_store=review_store,
        bulk_review_service=bulk_review_service,
    )
