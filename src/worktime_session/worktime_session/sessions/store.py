from __future__ import annotations

from typing import ContextManager, Optional, Protocol

from .model import WorkSession


class SessionStore(Protocol):
    """One durable session record per user.

    `save` must be all-or-nothing: on failure the previous snapshot stays
    readable and PersistenceError is raised. `lock` gives exclusive access to
    a user's record for the duration of a read-modify-write, among callers
    sharing the store instance.
    """

    def load(self, username: str) -> Optional[WorkSession]:
        raise NotImplementedError

    def save(self, username: str, session: WorkSession) -> None:
        raise NotImplementedError

    def lock(self, username: str) -> ContextManager[None]:
        raise NotImplementedError
