"""Attendance spreadsheet parsing.

Reads the first sheet of a device/HR export (Person ID, Name, Department,
Position, Date, Day Of Week, First-In, Last-Out) into IngestedRow records.
Row-level problems are attached to the row (``error``) so the reviewer can
see and fix them; only unusable rows (no readable date) are dropped and
reported in ``ParsedBatch.errors``.
"""

from __future__ import annotations

import io
import logging
import math
from dataclasses import replace
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

import pandas as pd

from ..common.validators import is_hms, normalize_time_text
from ..core.constants import DEFAULT_STATUS
from ..core.enums import AttendanceStatus
from ..core.exceptions import IngestError
from .model import IngestedRow, ParsedBatch

logger = logging.getLogger(__name__)

COLUMN_ALIASES: dict[str, list[str]] = {
    "person_id": ["Person ID", "PersonID", "Employee ID", "No."],
    "name": ["Name", "Employee Name", "Full Name"],
    "department": ["Department", "Dept"],
    "position": ["Position", "Designation", "Role"],
    "date": ["Date", "Attendance Date"],
    "day_of_week": ["Day Of Week", "Day", "Weekday"],
    "check_in": ["First-In", "Check In", "Check-In", "CheckIn", "In Time"],
    "check_out": ["Last-Out", "Check Out", "Check-Out", "CheckOut", "Out Time"],
}
REQUIRED_COLUMNS = ("person_id", "name", "date")

_EXCEL_EPOCH = date(1899, 12, 30)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if value is pd.NaT:
        return True
    return isinstance(value, str) and not value.strip()


def find_column_index(headers: list[str], aliases: list[str]) -> int:
    lowered = [h.strip().lower() for h in headers]
    for alias in aliases:
        name = alias.strip().lower()
        if name in lowered:
            return lowered.index(name)
    return -1


def format_value(value: Any) -> str:
    if _is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        # Numeric ids come back from Excel as 1001.0
        return str(int(value))
    return str(value).strip()


def format_date(value: Any) -> date:
    if _is_blank(value):
        raise ValueError("Date is required")

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        return _EXCEL_EPOCH + timedelta(days=int(value))

    text = str(value).strip()
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        pass
    try:
        return pd.to_datetime(text).date()
    except (ValueError, TypeError, OverflowError):
        raise ValueError(f"Invalid date format: {text}")


def format_time(value: Any) -> tuple[Optional[str], bool]:
    """Return (HH:MM:SS or None, malformed?)."""

    if _is_blank(value):
        return None, False
    if isinstance(value, datetime):
        return value.strftime("%H:%M:%S"), False
    if isinstance(value, time):
        return value.strftime("%H:%M:%S"), False
    if isinstance(value, (int, float)):
        # Excel stores times as a fraction of a day.
        total_seconds = int(round((float(value) % 1) * 24 * 60 * 60)) % 86400
        hours, rest = divmod(total_seconds, 3600)
        minutes, seconds = divmod(rest, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}", False

    text = str(value).strip()
    if text == "-":
        return None, False
    normalized = normalize_time_text(text)
    if normalized is None:
        return None, True
    return normalized, False


def validate_row(row: IngestedRow) -> Optional[str]:
    if not row.person_id:
        return "Person ID is required"
    if not row.name:
        return "Name is required"
    for label, value in (("check-in", row.check_in), ("check-out", row.check_out)):
        if value is None:
            continue
        if not is_hms(value):
            return f"Invalid {label} time format (expected HH:MM:SS)"
        try:
            datetime.strptime(value, "%H:%M:%S")
        except ValueError:
            return f"Invalid {label} time"
    return None


def parse_attendance_workbook(source: Any) -> ParsedBatch:
    """Parse an uploaded workbook (path, bytes or binary stream)."""

    if isinstance(source, (bytes, bytearray)):
        source = io.BytesIO(source)

    try:
        frame = pd.read_excel(source, sheet_name=0, header=None, dtype=object, engine="openpyxl")
    except Exception as e:
        raise IngestError(f"Failed to read Excel file: {e}")

    if frame.shape[0] < 2:
        raise IngestError("Excel file must contain at least a header row and one data row")

    values = frame.values.tolist()
    headers = [format_value(h) for h in values[0]]
    columns = {field: find_column_index(headers, aliases) for field, aliases in COLUMN_ALIASES.items()}

    for field in REQUIRED_COLUMNS:
        if columns[field] == -1:
            raise IngestError(f"Required column not found: {field}. Headers found: {', '.join(headers)}")

    def cell(row: list, field: str) -> Any:
        idx = columns[field]
        if idx == -1 or idx >= len(row):
            return None
        return row[idx]

    rows: list[IngestedRow] = []
    errors: list[str] = []

    for line_no, raw in enumerate(values[1:], start=2):
        person_id = format_value(cell(raw, "person_id"))
        if not person_id:
            continue

        try:
            work_date = format_date(cell(raw, "date"))
        except ValueError as e:
            errors.append(f"Row {line_no}: {e}")
            continue

        check_in, bad_in = format_time(cell(raw, "check_in"))
        check_out, bad_out = format_time(cell(raw, "check_out"))

        row = IngestedRow(
            person_id=person_id,
            name=format_value(cell(raw, "name")),
            department=format_value(cell(raw, "department")),
            position=format_value(cell(raw, "position")),
            date=work_date,
            day_of_week=format_value(cell(raw, "day_of_week")) or work_date.strftime("%A"),
            check_in=check_in,
            check_out=check_out,
            status=AttendanceStatus(DEFAULT_STATUS),
        )

        error = validate_row(row)
        if error is None and bad_in:
            error = "Invalid check-in time format (expected HH:MM:SS)"
        if error is None and bad_out:
            error = "Invalid check-out time format (expected HH:MM:SS)"
        if error:
            row = replace(row, error=error)

        rows.append(row)

    logger.info("Parsed attendance workbook: %d rows, %d dropped", len(rows), len(errors))
    return ParsedBatch(rows=rows, errors=errors)
