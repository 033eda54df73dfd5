from __future__ import annotations

import re
from datetime import datetime, time
from typing import Optional

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError

_HMS = re.compile(r"^\d{2}:\d{2}:\d{2}$")
_HM = re.compile(r"^\d{1,2}:\d{1,2}$")


def is_hms(value: str) -> bool:
    return bool(_HMS.match(value or ""))


def normalize_time_text(value: Optional[str]) -> Optional[str]:
    """Normalize user/ingested time text into HH:MM:SS.

    Blank and "-" mean "no time". Returns None for anything unparseable.
    """

    v = (value or "").strip()
    if not v or v == "-":
        return None
    if _HMS.match(v):
        return v
    if _HM.match(v):
        hours, minutes = v.split(":")
        return f"{int(hours):02d}:{int(minutes):02d}:00"
    return None


def require_time(value: Optional[str], field_name: str) -> Optional[str]:
    """Like normalize_time_text, but reject non-blank garbage."""

    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text like HH:MM")
    v = (value or "").strip()
    if not v or v == "-":
        return None
    normalized = normalize_time_text(v)
    if normalized is None:
        raise ValidationError(f"{field_name} must be HH:MM or HH:MM:SS")
    try:
        datetime.strptime(normalized, "%H:%M:%S")
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid time of day")
    return normalized


def require_status(value: str) -> AttendanceStatus:
    allowed = ", ".join(s.value for s in AttendanceStatus)
    if not isinstance(value, str):
        raise ValidationError(f"Status must be one of: {allowed}")
    try:
        return AttendanceStatus(value.strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown status {value!r} (expected one of: {allowed})")


def parse_hms(value: Optional[str]) -> Optional[time]:
    if not value:
        return None
    return datetime.strptime(value, "%H:%M:%S").time()
