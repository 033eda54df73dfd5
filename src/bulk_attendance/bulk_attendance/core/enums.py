from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status stored per employee/day."""

    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half_day"
    LEAVE = "leave"
    POYA = "poya"
    HOLIDAY = "holiday"


class ValidationStatus(str, Enum):
    """Employee resolution state of a reviewed row."""

    VALID = "valid"
    INVALID = "invalid"
    PENDING = "pending"


class CalendarEventType(str, Enum):
    HOLIDAY = "holiday"
    POYA = "poya"


class RequestStatus(str, Enum):
    """Approval state of an employee request (leave, etc.)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class SessionClosePolicy(str, Enum):
    """When a batch approval ends the review session.

    ANY_SUCCESS: close as soon as one row committed (failures are only logged).
    ALL_SUCCESS: close only when every submitted row committed.
    """

    ANY_SUCCESS = "any_success"
    ALL_SUCCESS = "all_success"
