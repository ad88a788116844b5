from datetime import date, datetime

import pytest

from src.worktime_session.worktime_session.core.enums import SessionStatus
from src.worktime_session.worktime_session.core.exceptions import (
    InconsistentStateError,
    OwnershipError,
    PersistenceError,
    PreviousDaySessionError,
    ValidationError,
)
from src.worktime_session.worktime_session.sessions.model import CompletedStop, WorkSession
from src.worktime_session.worktime_session.sessions.operations import EndDay, Pause, Resume, StartDay
from src.worktime_session.worktime_session.sessions.validation import find_inconsistencies

DAY_ONE = date(2026, 3, 2)
DAY_TWO = date(2026, 3, 3)


def at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute)


def test_full_day_round_trip(container, worktime_repo):
    svc = container.session_service

    svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 8))
    svc.execute(Pause(), "alice", 1, at=at(DAY_ONE, 12))
    svc.execute(Resume(), "alice", 1, at=at(DAY_ONE, 12, 45))
    result = svc.execute(EndDay(), "alice", 1, at=at(DAY_ONE, 17, 30))

    done = result.session
    assert result.operation == "end"
    assert done.status == SessionStatus.OFFLINE
    assert done.workday_completed is True
    assert done.day_end_time == at(DAY_ONE, 17, 30)
    assert done.total_temporary_stop_minutes == 45
    # 570 elapsed minus the 45 minute stop, then lunch
    assert done.total_worked_minutes == 525
    assert done.final_worked_minutes == 495
    assert done.lunch_break_deducted is True
    assert done.total_overtime_minutes == 0

    entry = worktime_repo.get_for_user_and_date(1, DAY_ONE)
    assert entry is not None
    assert result.ledger_entry == entry
    assert entry.total_worked_minutes == 525
    assert entry.temporary_stop_count == 1


def test_get_current_session_is_idempotent(container):
    svc = container.session_service
    svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 8))
    svc.execute(Pause(), "alice", 1, at=at(DAY_ONE, 9))

    first = svc.get_current_session("alice", 1)
    second = svc.get_current_session("alice", 1)

    assert first == second
    assert first.status == SessionStatus.TEMPORARY_STOP


def test_break_minutes_never_decrease_within_a_day(container):
    svc = container.session_service
    seen = [svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 8)).session.total_temporary_stop_minutes]

    steps = [
        (Pause(), at(DAY_ONE, 9)),
        (Resume(), at(DAY_ONE, 9, 20)),
        (Pause(), at(DAY_ONE, 12)),
        (Resume(), at(DAY_ONE, 12, 30)),
        (EndDay(), at(DAY_ONE, 17)),
    ]
    for op, when in steps:
        seen.append(svc.execute(op, "alice", 1, at=when).session.total_temporary_stop_minutes)

    assert seen == sorted(seen)
    assert seen[-1] == 50


def test_new_day_starts_with_clean_breaks(container):
    svc = container.session_service
    svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 8))
    svc.execute(Pause(), "alice", 1, at=at(DAY_ONE, 9))
    svc.execute(Resume(), "alice", 1, at=at(DAY_ONE, 9, 30))
    svc.execute(EndDay(), "alice", 1, at=at(DAY_ONE, 17))

    started = svc.execute(StartDay(), "alice", 1, at=at(DAY_TWO, 8)).session

    assert started.status == SessionStatus.ONLINE
    assert started.temporary_stops == ()
    assert started.total_temporary_stop_minutes == 0
    assert started.day_start_time == at(DAY_TWO, 8)


def test_user_id_mismatch_is_rejected_and_leaves_store_unchanged(container, store):
    svc = container.session_service
    svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 8))
    before = store.load("alice")
    saves = store.saves

    with pytest.raises(OwnershipError):
        svc.execute(Pause(), "alice", 2, at=at(DAY_ONE, 9))

    assert store.load("alice") == before
    assert store.saves == saves


def test_stored_username_mismatch_is_rejected(container, store):
    store.sessions["alice"] = WorkSession(
        user_id=1,
        username="mallory",
        status=SessionStatus.ONLINE,
        day_start_time=at(DAY_ONE, 8),
        current_start_time=at(DAY_ONE, 8),
        last_activity=at(DAY_ONE, 8),
    )

    with pytest.raises(OwnershipError):
        container.session_service.get_current_session("alice", 1)


def test_previous_day_session_blocks_regular_commands(container):
    svc = container.session_service
    svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 8))

    with pytest.raises(PreviousDaySessionError):
        svc.execute(Pause(), "alice", 1, at=at(DAY_TWO, 9))
    with pytest.raises(PreviousDaySessionError):
        svc.execute(EndDay(), "alice", 1, at=at(DAY_TWO, 9))


def test_start_day_requires_resolution_of_previous_day(container):
    svc = container.session_service
    svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 8))

    with pytest.raises(ValidationError):
        svc.execute(StartDay(), "alice", 1, at=at(DAY_TWO, 8))


def test_start_day_twice_is_rejected(container):
    svc = container.session_service
    svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 8))

    with pytest.raises(ValidationError):
        svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 8, 5))


def test_start_day_after_completing_today_is_rejected(container):
    svc = container.session_service
    svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 8))
    svc.execute(EndDay(), "alice", 1, at=at(DAY_ONE, 16))

    with pytest.raises(ValidationError):
        svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 17))


def test_end_day_from_temporary_stop_is_rejected(container):
    svc = container.session_service
    svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 8))
    svc.execute(Pause(), "alice", 1, at=at(DAY_ONE, 12))

    with pytest.raises(ValidationError):
        svc.execute(EndDay(), "alice", 1, at=at(DAY_ONE, 13))


def test_invalid_transitions(container):
    svc = container.session_service

    with pytest.raises(ValidationError):
        svc.execute(Pause(), "alice", 1, at=at(DAY_ONE, 8))

    svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 8))
    with pytest.raises(ValidationError):
        svc.execute(Resume(), "alice", 1, at=at(DAY_ONE, 9))

    svc.execute(Pause(), "alice", 1, at=at(DAY_ONE, 10))
    with pytest.raises(ValidationError):
        svc.execute(Pause(), "alice", 1, at=at(DAY_ONE, 10, 5))


def test_execute_named_dispatches_and_rejects_unknown(container):
    svc = container.session_service

    result = svc.execute_named("start", "alice", 1, at=at(DAY_ONE, 8))
    assert result.session.status == SessionStatus.ONLINE

    with pytest.raises(ValidationError):
        svc.execute_named("teleport", "alice", 1, at=at(DAY_ONE, 9))


def test_blank_username_is_rejected(container):
    with pytest.raises(ValidationError):
        container.session_service.execute(StartDay(), "  ", 1, at=at(DAY_ONE, 8))


def test_inconsistent_snapshot_is_rejected(container, store):
    broken = WorkSession(
        user_id=1,
        username="alice",
        status=SessionStatus.TEMPORARY_STOP,
        day_start_time=at(DAY_ONE, 8),
        current_start_time=at(DAY_ONE, 8),
        last_activity=at(DAY_ONE, 8),
    )
    store.sessions["alice"] = broken

    with pytest.raises(InconsistentStateError):
        container.session_service.execute(Resume(), "alice", 1, at=at(DAY_ONE, 9))
    assert store.load("alice") == broken


def test_current_totals_track_the_clock(container, clock):
    svc = container.session_service
    svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 8))

    clock.now = at(DAY_ONE, 10, 30)
    totals = svc.current_totals("alice", 1)

    assert totals.worked_minutes == 150
    assert totals.previous_day_session is False
    # the stored snapshot is untouched by the query
    assert svc.get_current_session("alice", 1).total_worked_minutes == 0


def test_schedule_comes_from_user(container):
    svc = container.session_service
    svc.execute(StartDay(), "carol", 3, at=at(DAY_ONE, 8))

    done = svc.execute(EndDay(), "carol", 3, at=at(DAY_ONE, 15, 1)).session

    assert done.lunch_break_deducted is False
    assert done.final_worked_minutes == 421
    assert done.total_overtime_minutes == 60


def test_pause_records_open_stop(container):
    svc = container.session_service
    svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 8))

    paused = svc.execute(Pause(), "alice", 1, at=at(DAY_ONE, 12)).session

    assert paused.status == SessionStatus.TEMPORARY_STOP
    assert paused.in_progress_stop.start == at(DAY_ONE, 12)
    assert paused.temporary_stop_count == 1
    assert paused.total_worked_minutes == 240


def test_end_day_writes_no_ledger_entry_when_save_fails(container, store, worktime_repo, monkeypatch):
    svc = container.session_service
    svc.execute(StartDay(), "alice", 1, at=at(DAY_ONE, 8))
    before = store.load("alice")

    def refuse(username, session):
        raise PersistenceError("disk full")

    monkeypatch.setattr(store, "save", refuse)
    with pytest.raises(PersistenceError):
        svc.execute(EndDay(), "alice", 1, at=at(DAY_ONE, 16, 30))

    assert worktime_repo.entries == {}
    assert store.load("alice") == before

    monkeypatch.undo()
    result = svc.execute(EndDay(), "alice", 1, at=at(DAY_ONE, 17))

    assert result.ledger_entry.day_end_time == at(DAY_ONE, 17)
    assert result.ledger_entry.total_worked_minutes == result.session.total_worked_minutes


def test_break_after_day_end_is_inconsistent():
    done = WorkSession(
        user_id=1,
        username="alice",
        status=SessionStatus.OFFLINE,
        day_start_time=at(DAY_ONE, 8),
        day_end_time=at(DAY_ONE, 16, 30),
        workday_completed=True,
        temporary_stops=(CompletedStop(start=at(DAY_ONE, 17), end=at(DAY_ONE, 17), duration_minutes=0),),
    )

    assert find_inconsistencies(done) == [
        f"temporary stop ends ({at(DAY_ONE, 17)}) after the day ends ({at(DAY_ONE, 16, 30)})"
    ]
