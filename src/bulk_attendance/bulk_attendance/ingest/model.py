from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class IngestedRow:
    """One parsed spreadsheet row. Never mutated, only decorated."""

    person_id: str
    name: str
    department: str
    date: date
    day_of_week: str
    check_in: Optional[str]
    check_out: Optional[str]
    status: AttendanceStatus = AttendanceStatus.PRESENT
    position: str = ""
    error: Optional[str] = None

    @property
    def key(self) -> tuple[str, date]:
        return (self.person_id, self.date)


@dataclass(frozen=True)
class ParsedBatch:
    rows: list[IngestedRow]
    errors: list[str] = field(default_factory=list)

    @property
    def total_records(self) -> int:
        return len(self.rows)
