from __future__ import annotations

from typing import Protocol, Sequence

from .model import EmployeeRef


class EmployeeRepository(Protocol):
    def find_active_by_numbers(self, employee_nos: Sequence[str]) -> Sequence[EmployeeRef]:
        """Return active employees whose employee_no is in the given list."""

        raise NotImplementedError
