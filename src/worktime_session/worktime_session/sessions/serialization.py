"""Plain-dict form of a WorkSession.

The same shape is written to the session files and returned by the JSON API,
so recovery tooling can read a session file without importing this package.
"""
from __future__ import annotations

from typing import Any, Dict

from ..common.datetime_utils import format_iso_datetime, parse_iso_datetime
from ..core.enums import SessionStatus
from ..core.exceptions import InconsistentStateError
from .model import CompletedStop, InProgressStop, TemporaryStop, WorkSession

STOP_COMPLETED = "completed"
STOP_IN_PROGRESS = "in_progress"


def stop_to_dict(stop: TemporaryStop) -> Dict[str, Any]:
    if isinstance(stop, CompletedStop):
        return {
            "state": STOP_COMPLETED,
            "start": format_iso_datetime(stop.start),
            "end": format_iso_datetime(stop.end),
            "duration_minutes": stop.duration_minutes,
        }
    return {"state": STOP_IN_PROGRESS, "start": format_iso_datetime(stop.start)}


def stop_from_dict(data: Dict[str, Any]) -> TemporaryStop:
    state = data.get("state")
    if state == STOP_COMPLETED:
        return CompletedStop(
            start=parse_iso_datetime(data["start"]),
            end=parse_iso_datetime(data["end"]),
            duration_minutes=int(data.get("duration_minutes") or 0),
        )
    if state == STOP_IN_PROGRESS:
        return InProgressStop(start=parse_iso_datetime(data["start"]))
    raise InconsistentStateError(f"Unknown temporary stop state: {state!r}")


def session_to_dict(session: WorkSession) -> Dict[str, Any]:
    return {
        "user_id": session.user_id,
        "username": session.username,
        "status": session.status.value,
        "day_start_time": format_iso_datetime(session.day_start_time),
        "current_start_time": format_iso_datetime(session.current_start_time),
        "last_activity": format_iso_datetime(session.last_activity),
        "temporary_stops": [stop_to_dict(s) for s in session.temporary_stops],
        "temporary_stop_count": session.temporary_stop_count,
        "total_temporary_stop_minutes": session.total_temporary_stop_minutes,
        "total_worked_minutes": session.total_worked_minutes,
        "final_worked_minutes": session.final_worked_minutes,
        "total_overtime_minutes": session.total_overtime_minutes,
        "lunch_break_deducted": session.lunch_break_deducted,
        "day_end_time": format_iso_datetime(session.day_end_time),
        "workday_completed": session.workday_completed,
    }


def session_from_dict(data: Dict[str, Any]) -> WorkSession:
    return WorkSession(
        user_id=int(data["user_id"]),
        username=str(data["username"]),
        status=SessionStatus(data.get("status", SessionStatus.OFFLINE.value)),
        day_start_time=parse_iso_datetime(data.get("day_start_time")),
        current_start_time=parse_iso_datetime(data.get("current_start_time")),
        last_activity=parse_iso_datetime(data.get("last_activity")),
        temporary_stops=tuple(stop_from_dict(s) for s in data.get("temporary_stops") or []),
        temporary_stop_count=int(data.get("temporary_stop_count") or 0),
        total_temporary_stop_minutes=int(data.get("total_temporary_stop_minutes") or 0),
        total_worked_minutes=int(data.get("total_worked_minutes") or 0),
        final_worked_minutes=int(data.get("final_worked_minutes") or 0),
        total_overtime_minutes=int(data.get("total_overtime_minutes") or 0),
        lunch_break_deducted=bool(data.get("lunch_break_deducted", False)),
        day_end_time=parse_iso_datetime(data.get("day_end_time")),
        workday_completed=bool(data.get("workday_completed", False)),
    )
