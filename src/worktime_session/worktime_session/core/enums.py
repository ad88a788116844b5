from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used by the web layer for access checks."""

    ADMIN = "admin"
    USER = "user"


class SessionStatus(str, Enum):
    """Lifecycle state of a live work session."""

    OFFLINE = "OFFLINE"
    ONLINE = "ONLINE"
    TEMPORARY_STOP = "TEMPORARY_STOP"


class ContinuationKind(str, Enum):
    """Why a continuation point was recorded."""

    SCHEDULE_END = "SCHEDULE_END"
    HOURLY = "HOURLY"
    TEMP_STOP = "TEMP_STOP"
    MIDNIGHT_END = "MIDNIGHT_END"


class SyncStatus(str, Enum):
    """Ledger entry origin. Only USER_INPUT is written by the session engine."""

    USER_INPUT = "USER_INPUT"
    USER_DONE = "USER_DONE"
    ADMIN_EDITED = "ADMIN_EDITED"


class ResolutionPath(str, Enum):
    EXPLICIT = "EXPLICIT"
    OVERTIME_CHOICE = "OVERTIME_CHOICE"
    SKIP = "SKIP"
    NO_SESSION = "NO_SESSION"


class OvertimePolicyName(str, Enum):
    """Available algorithms for recommending overtime during resolution."""

    THRESHOLD = "threshold"
    CONTINUATION_COUNT = "continuation_count"
