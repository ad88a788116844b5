"""The closed set of commands the session service accepts.

Every command is a small frozen dataclass; `SessionOperation` is their union
and `operation_from_name` maps the names used by the web layer.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..core.enums import ResolutionPath
from ..core.exceptions import ValidationError
from ..ledger.model import WorkTimeEntry
from .model import WorkSession


@dataclass(frozen=True)
class StartDay:
    name = "start"


@dataclass(frozen=True)
class Pause:
    name = "pause"


@dataclass(frozen=True)
class Resume:
    name = "resume"


@dataclass(frozen=True)
class EndDay:
    name = "end"


@dataclass(frozen=True)
class Resolve:
    """Close an unresolved session either at an explicit time or with chosen overtime."""

    name = "resolve"

    end_hour: Optional[int] = None
    end_minute: Optional[int] = None
    overtime_minutes: Optional[int] = None


@dataclass(frozen=True)
class Skip:
    name = "skip"


SessionOperation = Union[StartDay, Pause, Resume, EndDay, Resolve, Skip]


@dataclass(frozen=True)
class OperationResult:
    operation: str
    session: Optional[WorkSession]
    ledger_entry: Optional[WorkTimeEntry] = None
    resolution_path: Optional[ResolutionPath] = None


OPERATION_PARAMS = ("end_hour", "end_minute", "overtime_minutes")


def pick_params(payload) -> dict:
    """Keep only the keys commands accept from an untrusted request body."""
    if not isinstance(payload, dict):
        return {}
    return {k: payload[k] for k in OPERATION_PARAMS if k in payload}


def _optional_int(params: dict, key: str) -> Optional[int]:
    value = params.get(key)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer")


def operation_from_name(name: str, **params) -> SessionOperation:
    key = (name or "").strip().lower()
    if key == StartDay.name:
        return StartDay()
    if key == Pause.name:
        return Pause()
    if key == Resume.name:
        return Resume()
    if key == EndDay.name:
        return EndDay()
    if key == Resolve.name:
        return Resolve(
            end_hour=_optional_int(params, "end_hour"),
            end_minute=_optional_int(params, "end_minute"),
            overtime_minutes=_optional_int(params, "overtime_minutes"),
        )
    if key == Skip.name:
        return Skip()
    raise ValidationError(f"Unknown session command: {name!r}")
