"""JSON codec for parsed batches stashed between upload and review."""

from __future__ import annotations

import json
from typing import Sequence

from ..common.datetime_utils import parse_iso_date
from ..core.enums import AttendanceStatus
from ..core.exceptions import SessionLoadError
from .model import IngestedRow


def rows_to_json(rows: Sequence[IngestedRow]) -> str:
    return json.dumps(
        [
            {
                "personId": r.person_id,
                "name": r.name,
                "department": r.department,
                "position": r.position,
                "date": r.date.isoformat(),
                "dayOfWeek": r.day_of_week,
                "checkIn": r.check_in,
                "checkOut": r.check_out,
                "status": r.status.value,
                "error": r.error,
            }
            for r in rows
        ]
    )


def rows_from_json(payload: str | None) -> list[IngestedRow]:
    if not payload:
        raise SessionLoadError("No attendance data found. Please upload the file again.")

    try:
        items = json.loads(payload)
    except (TypeError, ValueError):
        raise SessionLoadError("Stored attendance data is corrupted. Please upload the file again.")

    if not isinstance(items, list) or not items:
        raise SessionLoadError("Stored attendance data is empty. Please upload the file again.")

    rows: list[IngestedRow] = []
    for idx, item in enumerate(items, start=1):
        try:
            rows.append(
                IngestedRow(
                    person_id=str(item["personId"]),
                    name=str(item.get("name") or ""),
                    department=str(item.get("department") or ""),
                    position=str(item.get("position") or ""),
                    date=parse_iso_date(item["date"]),
                    day_of_week=str(item.get("dayOfWeek") or ""),
                    check_in=item.get("checkIn") or None,
                    check_out=item.get("checkOut") or None,
                    status=AttendanceStatus(item.get("status") or AttendanceStatus.PRESENT.value),
                    error=item.get("error") or None,
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise SessionLoadError(f"Stored attendance row {idx} is invalid: {e}")
    return rows
