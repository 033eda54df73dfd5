from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_placeholders
from .model import EmployeeRef
from .repository import EmployeeRepository


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_active_by_numbers(self, employee_nos: Sequence[str]) -> Sequence[EmployeeRef]:
        numbers = list(employee_nos)
        if not numbers:
            return []

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, employee_no
                FROM employees
                WHERE is_active=1 AND employee_no IN ({in_placeholders(numbers)})
                """,
                tuple(numbers),
            )
            rows = fetchall(cur)
            return [EmployeeRef(employee_id=int(r["id"]), employee_no=str(r["employee_no"])) for r in rows]
