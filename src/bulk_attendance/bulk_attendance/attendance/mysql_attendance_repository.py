from __future__ import annotations

from datetime import date, time
from typing import Optional

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import AttendanceEntry
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, employee_id, date, check_in, check_out, status, notes
                FROM attendance_logs
                WHERE employee_id=%s AND date=%s
                """,
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            return AttendanceEntry(
                entry_id=int(r["id"]),
                employee_id=int(r["employee_id"]),
                work_date=r["date"],
                check_in=normalize_mysql_time(r.get("check_in")),
                check_out=normalize_mysql_time(r.get("check_out")),
                status=AttendanceStatus(r["status"]),
                notes=r.get("notes"),
            )

    def upsert(
        self,
        *,
        employee_id: int,
        work_date: date,
        check_in: Optional[time],
        check_out: Optional[time],
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_logs(employee_id, date, check_in, check_out, status, notes)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    check_in=VALUES(check_in),
                    check_out=VALUES(check_out),
                    status=VALUES(status),
                    notes=VALUES(notes)
                """,
                (int(employee_id), work_date, check_in, check_out, status.value, notes),
            )
            # MySQL reports 0 affected rows when an identical row already exists.
            return cur.rowcount >= 0
