from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .calculation.rules import WorkRules
from .common.datetime_utils import now_local
from .continuation.mysql_continuation_repository import MySQLContinuationPointRepository
from .continuation.repository import ContinuationPointRepository
from .continuation.service import ContinuationTracker
from .core.constants import DEFAULT_SCHEDULE_HOURS, STORE_LOCK_TIMEOUT_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .ledger.mysql_worktime_repository import MySQLWorkTimeRepository
from .ledger.repository import WorkTimeRepository
from .ledger.service import LedgerService
from .monitoring.service import SessionMonitor
from .resolution.factory import OvertimePolicyFactory
from .resolution.service import ResolutionService
from .sessions.json_session_store import JsonSessionStore
from .sessions.service import SessionService
from .sessions.store import SessionStore
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import ScheduleService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    clock: Callable[[], datetime]
    rules: WorkRules

    store: SessionStore
    users_repo: UserRepository
    worktime_repo: WorkTimeRepository
    points_repo: ContinuationPointRepository

    schedule_service: ScheduleService
    tracker: ContinuationTracker
    ledger_service: LedgerService
    resolution_service: ResolutionService
    session_service: SessionService
    monitor: SessionMonitor


def assemble_container(
    *,
    store: SessionStore,
    users_repo: UserRepository,
    worktime_repo: WorkTimeRepository,
    points_repo: ContinuationPointRepository,
    rules: Optional[WorkRules] = None,
    default_schedule_hours: int = DEFAULT_SCHEDULE_HOURS,
    clock: Callable[[], datetime] = now_local,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire the services around already-built storage backends."""
    rules = rules or WorkRules()

    schedule_service = ScheduleService(users_repo, default_hours=default_schedule_hours)
    tracker = ContinuationTracker(points_repo)
    ledger_service = LedgerService(worktime_repo)
    resolution_service = ResolutionService(
        store,
        tracker,
        ledger_service,
        schedule_service,
        rules=rules,
        policy_factory=OvertimePolicyFactory(),
    )
    session_service = SessionService(
        store,
        ledger_service,
        tracker,
        resolution_service,
        schedule_service,
        rules=rules,
        clock=clock,
    )
    monitor = SessionMonitor(store, tracker, schedule_service, rules=rules, clock=clock)

    return Container(
        conn=conn,
        clock=clock,
        rules=rules,
        store=store,
        users_repo=users_repo,
        worktime_repo=worktime_repo,
        points_repo=points_repo,
        schedule_service=schedule_service,
        tracker=tracker,
        ledger_service=ledger_service,
        resolution_service=resolution_service,
        session_service=session_service,
        monitor=monitor,
    )


def build_container(settings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
    store = JsonSessionStore(
        getattr(settings, "SESSION_DIR"),
        lock_timeout=float(getattr(settings, "STORE_LOCK_TIMEOUT_SECONDS", STORE_LOCK_TIMEOUT_SECONDS)),
    )

    return assemble_container(
        store=store,
        users_repo=MySQLUserRepository(conn),
        worktime_repo=MySQLWorkTimeRepository(conn),
        points_repo=MySQLContinuationPointRepository(conn),
        rules=WorkRules.from_settings(settings),
        default_schedule_hours=int(getattr(settings, "DEFAULT_SCHEDULE_HOURS", DEFAULT_SCHEDULE_HOURS)),
        conn=conn,
    )
