"""Time calculation engine.

Every function here is pure: it takes a session snapshot (plus schedule,
rules and a reference instant) and returns new values. Persisting the result
is the caller's job.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional, Tuple

from ..common.datetime_utils import minutes_between
from ..core.enums import SessionStatus
from ..core.exceptions import InconsistentStateError
from ..sessions.model import CompletedStop, InProgressStop, WorkSession
from .rules import WorkRules


@dataclass(frozen=True)
class DerivedTotals:
    elapsed_minutes: int
    break_minutes: int
    stop_count: int
    worked_minutes: int
    final_worked_minutes: int
    lunch_break_deducted: bool
    overtime_minutes: int
    schedule_minutes: int
    previous_day_session: bool


def calculate_current_work(
    session: WorkSession,
    schedule_hours: int,
    rules: WorkRules,
    as_of: datetime,
) -> DerivedTotals:
    schedule_minutes = rules.schedule_minutes(schedule_hours)
    if session.day_start_time is None:
        return DerivedTotals(0, 0, 0, 0, 0, False, 0, schedule_minutes, False)

    # Clock skew can put as_of before the start; minutes_between clamps to 0.
    elapsed = minutes_between(session.day_start_time, as_of)

    break_minutes = sum(s.duration_minutes for s in session.completed_stops)
    current = session.in_progress_stop
    if current is not None:
        break_minutes += minutes_between(current.start, as_of)
    break_minutes = min(max(break_minutes, 0), elapsed)

    worked = elapsed - break_minutes

    lunch_deducted = rules.has_lunch_break(schedule_hours) and worked >= schedule_minutes
    final_worked = worked - rules.lunch_break_minutes if lunch_deducted else worked

    return DerivedTotals(
        elapsed_minutes=elapsed,
        break_minutes=break_minutes,
        stop_count=len(session.temporary_stops),
        worked_minutes=worked,
        final_worked_minutes=final_worked,
        lunch_break_deducted=lunch_deducted,
        overtime_minutes=rules.overtime_for(final_worked, schedule_hours),
        schedule_minutes=schedule_minutes,
        previous_day_session=session.day_start_time.date() != as_of.date(),
    )


def apply_totals(session: WorkSession, totals: DerivedTotals) -> WorkSession:
    return replace(
        session,
        temporary_stop_count=totals.stop_count,
        total_temporary_stop_minutes=totals.break_minutes,
        total_worked_minutes=totals.worked_minutes,
        final_worked_minutes=totals.final_worked_minutes,
        total_overtime_minutes=totals.overtime_minutes,
        lunch_break_deducted=totals.lunch_break_deducted,
    )


def close_in_progress_stop(session: WorkSession, at: datetime) -> WorkSession:
    """Turn the open stop (if any) into a CompletedStop ending at `at`."""
    current = session.in_progress_stop
    if current is None:
        return session
    end = max(at, current.start)
    closed = CompletedStop(start=current.start, end=end, duration_minutes=minutes_between(current.start, end))
    return replace(session, temporary_stops=session.temporary_stops[:-1] + (closed,))


def open_stop(session: WorkSession, at: datetime) -> WorkSession:
    return replace(session, temporary_stops=session.temporary_stops + (InProgressStop(start=at),))


def fit_to_schedule(
    session: WorkSession,
    schedule_hours: int,
    rules: WorkRules,
    *,
    overtime_minutes: int = 0,
) -> Tuple[WorkSession, datetime]:
    """Place the day end so net worked time is the full day plus `overtime_minutes`.

    An open stop is closed at its own start. Stops that begin at or after the
    resulting end lie outside the day and are dropped.
    """
    current = session.in_progress_stop
    if current is not None:
        session = close_in_progress_stop(session, current.start)

    end = session.day_start_time + timedelta(minutes=rules.full_day_minutes(schedule_hours) + overtime_minutes)
    kept = []
    for stop in session.temporary_stops:
        if stop.start >= end:
            break
        kept.append(stop)
        end += timedelta(minutes=stop.duration_minutes)
    return replace(session, temporary_stops=tuple(kept)), end


def expected_end_time(session: WorkSession, schedule_hours: int, rules: WorkRules) -> Optional[datetime]:
    """Day start + scheduled minutes (+ lunch) + breaks taken inside the day."""
    if session.day_start_time is None:
        return None
    return fit_to_schedule(session, schedule_hours, rules)[1]


def finalize_session(
    session: WorkSession,
    end_time: datetime,
    schedule_hours: int,
    rules: WorkRules,
    *,
    now: datetime,
    overtime_override: Optional[int] = None,
) -> WorkSession:
    """Close the day at `end_time` and mark it completed.

    `overtime_override` replaces the computed overtime tier; resolution uses
    it for the skip and chosen-overtime paths. Overtime is only granted on top
    of a day that went past its schedule.
    """
    closed = close_in_progress_stop(session, end_time)
    totals = calculate_current_work(closed, schedule_hours, rules, end_time)
    finalized = apply_totals(closed, totals)
    if overtime_override is not None:
        overtime = int(overtime_override)
        if overtime > 0 and totals.final_worked_minutes <= totals.schedule_minutes:
            raise InconsistentStateError(
                f"{overtime} overtime minutes on a day of {totals.final_worked_minutes} worked minutes"
            )
        finalized = replace(finalized, total_overtime_minutes=overtime)
    return replace(
        finalized,
        status=SessionStatus.OFFLINE,
        day_end_time=end_time,
        workday_completed=True,
        last_activity=now,
    )
