from __future__ import annotations

from datetime import date, datetime

import pandas as pd
import pytest

from src.bulk_attendance.bulk_attendance.core.enums import AttendanceStatus
from src.bulk_attendance.bulk_attendance.core.exceptions import IngestError
from src.bulk_attendance.bulk_attendance.ingest.excel_parser import (
    find_column_index,
    format_date,
    format_time,
    parse_attendance_workbook,
)

HEADERS = ["Person ID", "Name", "Department", "Position", "Date", "Day Of Week", "First-In", "Last-Out"]


def _write(tmp_path, rows, headers=HEADERS):
    path = tmp_path / "attendance.xlsx"
    pd.DataFrame(rows, columns=headers).to_excel(path, index=False, engine="openpyxl")
    return path


def test_parses_rows_and_normalizes_times(tmp_path):
    path = _write(
        tmp_path,
        [
            [1001, "Nimal Perera", "Finance", "Accountant", "2024-01-10", "Wednesday", "09:00", "17:30:00"],
            ["1002", "Kamala Silva", "HR", "", datetime(2024, 1, 11), None, "-", None],
        ],
    )

    batch = parse_attendance_workbook(path)

    assert batch.errors == []
    assert batch.total_records == 2
    first, second = batch.rows
    assert first.person_id == "1001"
    assert first.date == date(2024, 1, 10)
    assert (first.check_in, first.check_out) == ("09:00:00", "17:30:00")
    assert first.status == AttendanceStatus.PRESENT
    assert first.error is None
    assert second.date == date(2024, 1, 11)
    assert second.day_of_week == "Thursday"
    assert (second.check_in, second.check_out) == (None, None)


def test_bad_rows_are_reported_or_flagged(tmp_path):
    path = _write(
        tmp_path,
        [
            [None, "No Id", "Ops", "", "2024-01-10", "", "09:00", "17:00"],
            [1003, "Bad Date", "Ops", "", "not a date", "", "09:00", "17:00"],
            [1004, "Bad Time", "Ops", "", "2024-01-10", "", "nine", "17:00"],
            [1005, "", "Ops", "", "2024-01-10", "", "09:00", "17:00"],
        ],
    )

    batch = parse_attendance_workbook(path.read_bytes())

    assert [r.person_id for r in batch.rows] == ["1004", "1005"]
    assert batch.errors == ["Row 3: Invalid date format: not a date"]
    assert batch.rows[0].error == "Invalid check-in time format (expected HH:MM:SS)"
    assert batch.rows[1].error == "Name is required"


def test_header_aliases_are_matched_case_insensitively(tmp_path):
    path = _write(
        tmp_path,
        [["E7", "Ruwan", "2024-02-01", "08:45", "16:45"]],
        headers=["employee id", "FULL NAME", "Attendance Date", "Check In", "Check Out"],
    )

    [row] = parse_attendance_workbook(path).rows

    assert row.person_id == "E7"
    assert row.department == ""
    assert (row.check_in, row.check_out) == ("08:45:00", "16:45:00")


def test_missing_required_column_is_rejected(tmp_path):
    path = _write(tmp_path, [["1001", "2024-01-10"]], headers=["Person ID", "Date"])

    with pytest.raises(IngestError, match="Required column not found: name"):
        parse_attendance_workbook(path)


def test_header_only_sheet_is_rejected(tmp_path):
    path = _write(tmp_path, [])

    with pytest.raises(IngestError, match="at least a header row"):
        parse_attendance_workbook(path)


def test_unreadable_file_is_rejected():
    with pytest.raises(IngestError, match="Failed to read Excel file"):
        parse_attendance_workbook(b"definitely not a workbook")


def test_find_column_index_prefers_alias_order():
    assert find_column_index(["Day", "Date"], ["Date", "Attendance Date"]) == 1
    assert find_column_index(["Name"], ["Person ID"]) == -1


def test_cell_formatters():
    assert format_date(45301) == date(2024, 1, 10)
    assert format_time(0.375) == ("09:00:00", False)
    assert format_time("") == (None, False)
    assert format_time("later") == (None, True)
