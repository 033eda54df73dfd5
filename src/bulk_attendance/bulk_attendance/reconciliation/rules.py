"""Ordered rule lists for the review table.

Every list is evaluated top-down; for status overrides and validity the
first applicable rule decides. Precedence is therefore the list order:
holiday > Poya > leave conflict > missing time > other.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, Sequence, TypeVar

from ..core.enums import AttendanceStatus
from .model import Badge, EditableRecord

T = TypeVar("T")

TIMED_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.HALF_DAY, AttendanceStatus.POYA})
UNTIMED_STATUSES = frozenset({AttendanceStatus.ABSENT, AttendanceStatus.LEAVE})


@dataclass(frozen=True)
class Rule(Generic[T]):
    name: str
    applies: Callable[[EditableRecord], bool]
    outcome: Callable[[EditableRecord], T]


def first_match(rules: Sequence[Rule[T]], record: EditableRecord) -> Optional[Rule[T]]:
    for rule in rules:
        if rule.applies(record):
            return rule
    return None


# ---- Status override (load time only) ----

STATUS_OVERRIDE_RULES: tuple[Rule[AttendanceStatus], ...] = (
    Rule("holiday", lambda r: r.is_holiday, lambda r: AttendanceStatus.HOLIDAY),
    Rule("poya", lambda r: r.is_poya, lambda r: AttendanceStatus.POYA),
    Rule("leave_conflict", lambda r: r.on_leave, lambda r: AttendanceStatus.LEAVE),
)


def override_status(record: EditableRecord) -> Optional[AttendanceStatus]:
    rule = first_match(STATUS_OVERRIDE_RULES, record)
    return rule.outcome(record) if rule else None


# ---- Validity ----

VALIDITY_RULES: tuple[Rule[bool], ...] = (
    Rule(
        "holiday",
        lambda r: r.is_holiday,
        lambda r: bool(r.error) or r.has_any_time or r.status != AttendanceStatus.HOLIDAY,
    ),
    Rule("partial_time", lambda r: r.has_check_in != r.has_check_out, lambda r: True),
    Rule(
        "no_time",
        lambda r: not r.has_check_in and not r.has_check_out,
        lambda r: bool(r.error) or r.status not in UNTIMED_STATUSES,
    ),
    Rule("both_times", lambda r: True, lambda r: bool(r.error) or r.status not in TIMED_STATUSES),
)


def has_errors(record: EditableRecord) -> bool:
    rule = first_match(VALIDITY_RULES, record)
    return bool(rule and rule.outcome(record))


def holiday_times_recorded(record: EditableRecord) -> bool:
    return record.is_holiday and record.has_any_time


def holiday_status_changed(record: EditableRecord) -> bool:
    return record.is_holiday and record.status != AttendanceStatus.HOLIDAY


# ---- Badges ----

def _missing_check_in(r: EditableRecord) -> bool:
    return (
        not r.is_holiday
        and not r.error
        and not r.has_check_in
        and (r.has_check_out or r.status in TIMED_STATUSES)
    )


def _missing_check_out(r: EditableRecord) -> bool:
    return (
        not r.is_holiday
        and not r.error
        and not r.has_check_out
        and (r.has_check_in or r.status in TIMED_STATUSES)
    )


def _holiday_badge(r: EditableRecord) -> Badge:
    name = r.holiday_name or "Holiday"
    if r.has_any_time:
        return Badge("holiday", f"{name}: check-in/check-out not allowed on a holiday", blocking=True)
    if r.error:
        return Badge("holiday", f"{name}: {r.error}", blocking=True)
    if r.status != AttendanceStatus.HOLIDAY:
        return Badge("holiday", f"{name}: status must stay 'holiday'", blocking=True)
    return Badge("holiday", f"Holiday: {name}", blocking=False)


def _other_badge(r: EditableRecord) -> Badge:
    if r.error:
        return Badge("error", r.error, blocking=True)
    return Badge("error", f"Status '{r.status.value}' does not match the recorded times", blocking=True)


BADGE_RULES: tuple[Rule[Badge], ...] = (
    Rule("holiday", lambda r: r.is_holiday, _holiday_badge),
    Rule("poya", lambda r: r.is_poya, lambda r: Badge("poya", f"Poya day: {r.poya_name or 'Poya'}", blocking=False)),
    Rule(
        "leave_conflict",
        lambda r: r.on_leave,
        lambda r: Badge("leave", f"On approved leave ({r.leave_type or 'leave'})", blocking=False),
    ),
    Rule("missing_check_in", _missing_check_in, lambda r: Badge("missing_check_in", "Missing check-in time", blocking=True)),
    Rule(
        "missing_check_out",
        _missing_check_out,
        lambda r: Badge("missing_check_out", "Missing check-out time", blocking=True),
    ),
    Rule(
        "other",
        lambda r: not r.is_holiday
        and has_errors(r)
        and (bool(r.error) or not (_missing_check_in(r) or _missing_check_out(r))),
        _other_badge,
    ),
)


def badges_for(record: EditableRecord) -> list[Badge]:
    """All applicable badges, highest precedence first."""
    return [rule.outcome(record) for rule in BADGE_RULES if rule.applies(record)]


def classify_error(record: EditableRecord) -> Optional[str]:
    """Return missing_check_in / missing_check_out / other, or None for a clean row."""

    if not has_errors(record):
        return None
    for badge in badges_for(record):
        if badge.blocking:
            return badge.kind if badge.kind in {"missing_check_in", "missing_check_out"} else "other"
    return "other"
