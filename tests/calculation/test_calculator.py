from datetime import datetime, timedelta

import pytest

from src.worktime_session.worktime_session.calculation.calculator import (
    calculate_current_work,
    expected_end_time,
    fit_to_schedule,
    finalize_session,
)
from src.worktime_session.worktime_session.calculation.rules import WorkRules
from src.worktime_session.worktime_session.core.enums import SessionStatus
from src.worktime_session.worktime_session.core.exceptions import InconsistentStateError
from src.worktime_session.worktime_session.sessions.model import CompletedStop, InProgressStop, WorkSession

START = datetime(2026, 3, 2, 8, 0)


def _online(**kwargs) -> WorkSession:
    return WorkSession(
        user_id=1,
        username="alice",
        status=kwargs.pop("status", SessionStatus.ONLINE),
        day_start_time=START,
        current_start_time=START,
        last_activity=START,
        **kwargs,
    )


@pytest.mark.parametrize(
    "worked, overtime",
    [
        (480, 0),
        (510, 0),
        (570, 0),
        (571, 60),
        (630, 60),
        (631, 120),
        (690, 120),
        (691, 180),
    ],
)
def test_overtime_tiers_for_eight_hour_schedule(worked, overtime):
    totals = calculate_current_work(_online(), 8, WorkRules(), START + timedelta(minutes=worked))

    assert totals.worked_minutes == worked
    assert totals.lunch_break_deducted is True
    assert totals.final_worked_minutes == worked - 30
    assert totals.overtime_minutes == overtime


def test_overtime_is_capped():
    totals = calculate_current_work(_online(), 8, WorkRules(), START + timedelta(hours=20))
    assert totals.overtime_minutes == 480


def test_no_lunch_deduction_below_schedule():
    totals = calculate_current_work(_online(), 8, WorkRules(), START + timedelta(minutes=479))

    assert totals.lunch_break_deducted is False
    assert totals.final_worked_minutes == 479
    assert totals.overtime_minutes == 0


def test_six_hour_schedule_has_no_lunch_break():
    rules = WorkRules()
    at_400 = calculate_current_work(_online(), 6, rules, START + timedelta(minutes=400))
    at_421 = calculate_current_work(_online(), 6, rules, START + timedelta(minutes=421))

    assert at_400.lunch_break_deducted is False
    assert at_400.final_worked_minutes == 400
    assert at_400.overtime_minutes == 0
    assert at_421.overtime_minutes == 60


def test_clock_skew_never_gives_negative_minutes():
    totals = calculate_current_work(_online(), 8, WorkRules(), START - timedelta(minutes=5))

    assert totals.elapsed_minutes == 0
    assert totals.worked_minutes == 0
    assert totals.break_minutes == 0


def test_in_progress_stop_counts_up_to_as_of():
    session = _online(
        status=SessionStatus.TEMPORARY_STOP,
        temporary_stops=(
            CompletedStop(start=datetime(2026, 3, 2, 9, 0), end=datetime(2026, 3, 2, 9, 15), duration_minutes=15),
            InProgressStop(start=datetime(2026, 3, 2, 10, 0)),
        ),
    )

    totals = calculate_current_work(session, 8, WorkRules(), datetime(2026, 3, 2, 10, 45))

    assert totals.elapsed_minutes == 165
    assert totals.break_minutes == 60
    assert totals.worked_minutes == 105
    assert totals.stop_count == 2


def test_break_never_exceeds_elapsed():
    session = _online(
        temporary_stops=(
            CompletedStop(start=START, end=START + timedelta(hours=3), duration_minutes=180),
        ),
    )

    totals = calculate_current_work(session, 8, WorkRules(), START + timedelta(hours=1))

    assert totals.break_minutes == 60
    assert totals.worked_minutes == 0


def test_previous_day_flag():
    rules = WorkRules()
    assert calculate_current_work(_online(), 8, rules, START + timedelta(hours=2)).previous_day_session is False
    assert calculate_current_work(_online(), 8, rules, START + timedelta(days=1)).previous_day_session is True


def test_expected_end_time_includes_lunch_and_completed_breaks():
    rules = WorkRules()
    assert expected_end_time(_online(), 8, rules) == datetime(2026, 3, 2, 16, 30)
    assert expected_end_time(_online(), 6, rules) == datetime(2026, 3, 2, 14, 0)

    with_break = _online(
        temporary_stops=(
            CompletedStop(start=datetime(2026, 3, 2, 12, 0), end=datetime(2026, 3, 2, 12, 20), duration_minutes=20),
        ),
    )
    assert expected_end_time(with_break, 8, rules) == datetime(2026, 3, 2, 16, 50)


def test_finalize_closes_open_stop_and_completes_day():
    session = _online(
        status=SessionStatus.TEMPORARY_STOP,
        temporary_stops=(InProgressStop(start=datetime(2026, 3, 2, 12, 0)),),
    )
    end = datetime(2026, 3, 2, 13, 0)
    now = datetime(2026, 3, 3, 9, 0)

    done = finalize_session(session, end, 8, WorkRules(), now=now)

    assert done.status == SessionStatus.OFFLINE
    assert done.workday_completed is True
    assert done.day_end_time == end
    assert done.last_activity == now
    assert done.in_progress_stop is None
    assert done.temporary_stops[-1] == CompletedStop(start=datetime(2026, 3, 2, 12, 0), end=end, duration_minutes=60)
    assert done.total_temporary_stop_minutes == 60
    assert done.total_worked_minutes == 240


def test_finalize_overtime_override():
    done = finalize_session(
        _online(),
        START + timedelta(hours=12),
        8,
        WorkRules(),
        now=START + timedelta(days=1),
        overtime_override=0,
    )

    assert done.total_worked_minutes == 720
    assert done.total_overtime_minutes == 0


def test_rules_from_settings():
    class Settings:
        OVERTIME_GRACE_MINUTES = 30
        STALE_CONTINUATION_MINUTES = 90
        MAX_TEMP_STOP_HOURS = 10
        OVERTIME_POLICY = "continuation_count"

    rules = WorkRules.from_settings(Settings)

    assert rules.overtime_grace_minutes == 30
    assert rules.stale_continuation_minutes == 90
    assert rules.max_temp_stop_hours == 10
    assert rules.overtime_policy.value == "continuation_count"
    assert rules.overtime_tiers() == [60, 120, 180, 240, 300, 360, 420, 480]


def test_fit_to_schedule_closes_open_stop_at_its_start():
    session = _online(
        status=SessionStatus.TEMPORARY_STOP,
        temporary_stops=(InProgressStop(start=datetime(2026, 3, 2, 11, 0)),),
    )

    fitted, end = fit_to_schedule(session, 8, WorkRules(), overtime_minutes=60)

    assert end == datetime(2026, 3, 2, 17, 30)
    assert fitted.in_progress_stop is None
    assert fitted.temporary_stops[-1].duration_minutes == 0
    assert expected_end_time(session, 8, WorkRules()) == datetime(2026, 3, 2, 16, 30)


def test_fit_to_schedule_drops_stops_outside_the_day():
    session = _online(
        temporary_stops=(
            CompletedStop(start=datetime(2026, 3, 2, 12, 0), end=datetime(2026, 3, 2, 12, 30), duration_minutes=30),
            CompletedStop(start=datetime(2026, 3, 2, 17, 30), end=datetime(2026, 3, 2, 18, 0), duration_minutes=30),
        ),
    )

    fitted, end = fit_to_schedule(session, 8, WorkRules())

    assert end == datetime(2026, 3, 2, 17, 0)
    assert len(fitted.temporary_stops) == 1
    assert calculate_current_work(fitted, 8, WorkRules(), end).final_worked_minutes == 480


def test_overtime_override_needs_time_past_the_schedule():
    session = _online(
        status=SessionStatus.TEMPORARY_STOP,
        temporary_stops=(InProgressStop(start=datetime(2026, 3, 2, 11, 0)),),
    )

    with pytest.raises(InconsistentStateError):
        finalize_session(
            session,
            datetime(2026, 3, 2, 18, 30),
            8,
            WorkRules(),
            now=datetime(2026, 3, 3, 9, 0),
            overtime_override=120,
        )
