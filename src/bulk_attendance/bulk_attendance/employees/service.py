from __future__ import annotations

import logging
from typing import Iterable

from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


class EmployeeResolver:
    """Map external person ids to internal employee ids.

    Unknown or inactive ids are simply absent from the result; callers treat
    absence as "unresolved".
    """

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def resolve(self, person_ids: Iterable[str]) -> dict[str, int]:
        wanted = sorted({p.strip() for p in person_ids if p and p.strip()})
        if not wanted:
            return {}

        found = {e.employee_no: e.employee_id for e in self._employees.find_active_by_numbers(wanted)}
        missing = [p for p in wanted if p not in found]
        if missing:
            logger.info("Unresolved person ids in batch: %s", ", ".join(missing))
        return found
