from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EmployeeRef:
    """Internal id for an external (device/HR export) employee number."""

    employee_id: int
    employee_no: str
