from __future__ import annotations

import logging
from typing import List

from ..core.enums import SessionStatus
from ..core.exceptions import InconsistentStateError, OwnershipError
from .model import CompletedStop, InProgressStop, WorkSession
from .serialization import session_to_dict

logger = logging.getLogger(__name__)


def find_inconsistencies(session: WorkSession) -> List[str]:
    problems: List[str] = []

    open_stops = [i for i, s in enumerate(session.temporary_stops) if isinstance(s, InProgressStop)]
    if len(open_stops) > 1:
        problems.append(f"{len(open_stops)} temporary stops are in progress")
    if open_stops and open_stops[-1] != len(session.temporary_stops) - 1:
        problems.append("in-progress temporary stop is not the last stop")
    if open_stops and session.status != SessionStatus.TEMPORARY_STOP:
        problems.append(f"in-progress temporary stop while status is {session.status.value}")
    if session.status == SessionStatus.TEMPORARY_STOP and not open_stops:
        problems.append("status is TEMPORARY_STOP but no stop is in progress")

    for stop in session.temporary_stops:
        if isinstance(stop, CompletedStop) and stop.end < stop.start:
            problems.append(f"temporary stop ends ({stop.end}) before it starts ({stop.start})")
        if session.day_start_time and stop.start < session.day_start_time:
            problems.append(f"temporary stop starts ({stop.start}) before the day ({session.day_start_time})")
        stop_end = stop.end if isinstance(stop, CompletedStop) else stop.start
        if session.day_end_time and stop_end > session.day_end_time:
            problems.append(f"temporary stop ends ({stop_end}) after the day ends ({session.day_end_time})")

    if session.is_active and session.day_start_time is None:
        problems.append(f"status is {session.status.value} without a day start time")
    if session.day_end_time and session.day_start_time and session.day_end_time < session.day_start_time:
        problems.append("day end time is before day start time")
    if (session.day_end_time is not None) != session.workday_completed:
        problems.append("day end time and workday completed flag disagree")

    return problems


def ensure_consistent(session: WorkSession) -> None:
    problems = find_inconsistencies(session)
    if problems:
        logger.error(
            "Inconsistent session for %s: %s; snapshot=%s",
            session.username,
            "; ".join(problems),
            session_to_dict(session),
        )
        raise InconsistentStateError("; ".join(problems))


def ensure_owned_by(session: WorkSession, username: str, user_id: int) -> None:
    if session.username != username or int(session.user_id) != int(user_id):
        logger.warning(
            "Ownership violation: %s (id=%s) tried to act on session of %s (id=%s)",
            username,
            user_id,
            session.username,
            session.user_id,
        )
        raise OwnershipError(f"Session does not belong to {username}")
