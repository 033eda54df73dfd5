from __future__ import annotations

from datetime import date, time

import pytest

from src.bulk_attendance.bulk_attendance.core.constants import UNRESOLVED_EMPLOYEE_ERROR
from src.bulk_attendance.bulk_attendance.core.enums import (
    AttendanceStatus,
    CalendarEventType,
    SessionClosePolicy,
)
from src.bulk_attendance.bulk_attendance.core.exceptions import (
    ApprovalBlockedError,
    RowNotFoundError,
    ValidationError,
)
from src.bulk_attendance.bulk_attendance.leaves.model import LeaveBalance

JAN_10 = date(2024, 1, 10)


def test_ignore_row_is_idempotent(world, open_session):
    session = open_session([world.row("E1", JAN_10), world.row("E2", JAN_10)])

    assert session.ignore_row("r00001") is True
    assert session.ignore_row("r00001") is False
    assert [r.row_id for r in session.records] == ["r00002"]


def test_approve_row_commits_and_removes_it(world, open_session):
    session = open_session([world.row("E1", JAN_10, "09:00:00", "17:00:00")])

    result = session.approve_row("r00001")

    assert result.success is True
    assert result.leave_deduction is None
    assert session.records == []
    entry = world.attendance.entries[(1, JAN_10)]
    assert entry.check_in == time(9, 0)
    assert entry.check_out == time(17, 0)
    assert entry.status == AttendanceStatus.PRESENT
    assert entry.notes == "Bulk upload - Engineering Developer"


def test_approve_row_rejects_unresolved_employee(world, open_session):
    session = open_session([world.row("X9", JAN_10)])

    with pytest.raises(ApprovalBlockedError, match=UNRESOLVED_EMPLOYEE_ERROR):
        session.approve_row("r00001")
    assert world.attendance.entries == {}


def test_approve_row_rejects_rows_with_errors(world, open_session):
    session = open_session([world.row("E1", JAN_10, "09:00:00", None)])

    with pytest.raises(ApprovalBlockedError):
        session.approve_row("r00001")


def test_approve_row_failure_keeps_row_and_reports_error(world, open_session):
    world.attendance.fail_for = {1}
    session = open_session([world.row("E1", JAN_10)])

    result = session.approve_row("r00001")

    assert result.success is False
    assert "Duplicate entry" in result.error
    assert [r.row_id for r in session.records] == ["r00001"]


def test_holiday_row_needs_times_cleared_before_approval(world, open_session):
    world.calendar.add("New Year", JAN_10, JAN_10, CalendarEventType.HOLIDAY)
    session = open_session([world.row("E1", JAN_10)])

    with pytest.raises(ApprovalBlockedError, match="holiday"):
        session.approve_row("r00001")

    session.edit_row("r00001", check_in="", check_out="-")
    result = session.approve_row("r00001")

    assert result.success is True
    assert result.leave_deduction is None
    entry = world.attendance.entries[(1, JAN_10)]
    assert entry.status == AttendanceStatus.HOLIDAY
    assert entry.check_in is None and entry.check_out is None


def test_holiday_row_cannot_be_approved_with_another_status(world, open_session):
    world.calendar.add("New Year", JAN_10, JAN_10, CalendarEventType.HOLIDAY)
    session = open_session([world.row("E1", JAN_10, None, None), world.row("E2", JAN_10, None, None)])

    session.edit_row("r00001", status="absent")

    with pytest.raises(ApprovalBlockedError, match="status 'holiday'"):
        session.approve_row("r00001")
    with pytest.raises(ApprovalBlockedError, match="1 row\\(s\\) with other"):
        session.approve_all()
    assert world.attendance.entries == {}

    session.edit_row("r00001", status="holiday")
    result = session.approve_all()

    assert result.success_count == 2
    assert world.attendance.entries[(1, JAN_10)].status == AttendanceStatus.HOLIDAY


def test_fixing_an_ingested_bad_time_clears_its_error(world, open_session):
    bad_time = "Invalid check-in time format (expected HH:MM:SS)"
    session = open_session([world.row("E1", JAN_10, None, "17:00:00", error=bad_time)])

    session.edit_row("r00001", check_out="17:30")
    assert session.find("r00001").error == bad_time

    record = session.edit_row("r00001", check_in="09:00")

    assert record.error is None
    assert session.approve_row("r00001").success is True


def test_time_fix_keeps_unresolved_employee_error(world, open_session):
    session = open_session(
        [world.row("X9", JAN_10, None, "17:00:00", error="Invalid check-in time format (expected HH:MM:SS)")]
    )

    record = session.edit_row("r00001", check_in="09:00")

    assert record.error == UNRESOLVED_EMPLOYEE_ERROR


def test_session_closes_when_last_row_leaves(world, open_session):
    session = open_session([world.row("E1", JAN_10), world.row("E2", JAN_10)])

    first = session.approve_row("r00001")
    assert first.session_closed is False
    assert session.closed is False

    session.ignore_row("r00002")

    assert session.closed is True
    with pytest.raises(ValidationError):
        session.ignore_row("r00002")


def test_edit_row_normalizes_times_and_does_not_rerun_overrides(world, open_session):
    world.calendar.add("New Year", JAN_10, JAN_10, CalendarEventType.HOLIDAY)
    session = open_session([world.row("E1", JAN_10)])

    record = session.edit_row("r00001", check_in="8:30", status="Present")

    assert record.check_in == "08:30:00"
    assert record.check_out == "17:00:00"
    assert record.status == AttendanceStatus.PRESENT
    assert record.is_holiday is True


def test_edit_row_rejects_bad_input(world, open_session):
    session = open_session([world.row("E1", JAN_10)])

    with pytest.raises(ValidationError):
        session.edit_row("r00001", check_in="nine")
    with pytest.raises(ValidationError):
        session.edit_row("r00001", status="vacation")
    with pytest.raises(RowNotFoundError):
        session.edit_row("r99999", status="absent")

    assert session.find("r00001").check_in == "09:00:00"


def test_approve_all_reports_blocking_error_breakdown(world, open_session):
    session = open_session(
        [
            world.row("E1", JAN_10, "09:00:00", None),
            world.row("E2", JAN_10, None, "17:00:00"),
            world.row("E3", JAN_10, None, None, status=AttendanceStatus.PRESENT),
        ]
    )

    with pytest.raises(ApprovalBlockedError) as exc:
        session.approve_all()

    message = str(exc.value)
    assert "2 row(s) missing check-in, 1 row(s) missing check-out, 0 row(s) with other" in message
    assert world.attendance.entries == {}


def test_approve_all_processes_only_valid_rows(world, open_session):
    session = open_session([world.row("E1", JAN_10), world.row("E2", JAN_10), world.row("X9", JAN_10)])

    summary = session.summary()
    assert (summary.valid_count, summary.invalid_count) == (2, 1)

    result = session.approve_all()

    assert (result.success_count, result.failed_count) == (2, 0)
    assert set(world.attendance.entries) == {(1, JAN_10), (2, JAN_10)}
    assert [r.person_id for r in result.remaining] == ["X9"]
    assert result.remaining[0].error == UNRESOLVED_EMPLOYEE_ERROR
    assert result.session_closed is True
    with pytest.raises(ValidationError):
        session.ignore_row(result.remaining[0].row_id)


def test_approve_all_without_valid_rows_is_blocked(world, open_session):
    session = open_session([world.row("X9", JAN_10)])

    with pytest.raises(ApprovalBlockedError, match="No valid records"):
        session.approve_all()


def test_partial_failure_closes_under_any_success_policy(world, open_session):
    world.attendance.fail_for = {2}
    session = open_session([world.row("E1", JAN_10), world.row("E2", JAN_10)])

    result = session.approve_all()

    assert (result.success_count, result.failed_count) == (1, 1)
    assert result.errors[0].row_id == "r00002"
    assert result.session_closed is True


def test_partial_failure_keeps_session_open_under_all_success_policy(world, open_session):
    world.attendance.fail_for = {2}
    session = open_session(
        [world.row("E1", JAN_10), world.row("E2", JAN_10)],
        close_policy=SessionClosePolicy.ALL_SUCCESS,
    )

    result = session.approve_all()

    assert result.session_closed is False
    assert [r.row_id for r in session.records] == ["r00002"]

    world.attendance.fail_for = set()
    retry = session.approve_all()
    assert (retry.success_count, retry.failed_count) == (1, 0)
    assert retry.session_closed is True


def test_duplicate_rows_block_approval_until_one_is_skipped(world, open_session):
    session = open_session([world.row("E1", JAN_10), world.row("E1", JAN_10, "10:00:00", "18:00:00")])

    assert session.summary().duplicate_count == 2
    with pytest.raises(ApprovalBlockedError):
        session.approve_row("r00001")
    with pytest.raises(ApprovalBlockedError, match="share an employee and date"):
        session.approve_all()

    session.ignore_row("r00001")
    result = session.approve_row("r00002")

    assert result.success is True
    assert world.attendance.entries[(1, JAN_10)].check_in == time(10, 0)


def test_leave_conflict_row_approved_as_present_cancels_the_leave(world, open_session):
    world.leaves.add_grant(employee_id=1, leave_type="sick", start=JAN_10, end=JAN_10, total_days=1)
    world.leaves.balances[(1, "sick")] = LeaveBalance(
        balance_id=1, employee_id=1, leave_type="sick", used_days=1, remaining_days=6
    )
    session = open_session([world.row("E1", JAN_10)])

    with pytest.raises(ApprovalBlockedError):
        session.approve_row("r00001")

    session.edit_row("r00001", status="present")
    result = session.approve_row("r00001")

    assert result.success is True
    assert result.leave_deduction.days_to_deduct == 1
    assert result.leave_deduction.should_cancel_leave is True
    assert world.leaves.grants[0].request_status.value == "cancelled"
    # Whole grant was worked, nothing to restore.
    assert world.leaves.balances[(1, "sick")].used_days == 1
