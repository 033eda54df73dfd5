from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from ..common.datetime_utils import date_span, iter_days
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


def leave_key(employee_id: int, day: date) -> str:
    """Composite lookup key "{employee_id}-{YYYY-MM-DD}"."""
    return f"{employee_id}-{day.isoformat()}"


class LeaveConflictChecker:
    """Find approved leave already granted on days present in an upload."""

    def __init__(self, leaves: LeaveRepository):
        self._leaves = leaves

    def conflicts(self, employee_ids: Iterable[int], dates: Iterable[date]) -> dict[str, str]:
        ids = sorted(set(employee_ids))
        days = set(dates)
        if not ids or not days:
            return {}

        start, end = date_span(days)
        try:
            grants = self._leaves.list_approved_overlapping(employee_ids=ids, start_date=start, end_date=end)
        except Exception:
            # Review continues without conflict hints.
            logger.exception("Error checking leave conflicts for %d employees", len(ids))
            return {}

        out: dict[str, str] = {}
        for grant in grants:
            for day in iter_days(grant.start_date, grant.end_date):
                if day in days:
                    out[leave_key(grant.employee_id, day)] = grant.leave_type
        return out
