from __future__ import annotations

import json
import logging
import os
import re
import shutil
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional

from ..core.constants import STORE_LOCK_TIMEOUT_SECONDS
from ..core.exceptions import DomainError, PersistenceError
from .model import WorkSession
from .serialization import session_from_dict, session_to_dict

logger = logging.getLogger(__name__)

_SAFE_NAME = re.compile(r"[^A-Za-z0-9_.-]")


class JsonSessionStore:
    """Session records as one JSON file per user.

    Write path: temp file in the same directory, copy of the current file to
    `<name>.bak`, then `os.replace` onto the target. Readers only ever see a
    complete old or a complete new snapshot.
    """

    def __init__(self, base_dir: str | Path, *, lock_timeout: float = STORE_LOCK_TIMEOUT_SECONDS):
        self._base_dir = Path(base_dir)
        self._lock_timeout = float(lock_timeout)
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def path_for(self, username: str) -> Path:
        safe = _SAFE_NAME.sub("_", username.strip())
        return self._base_dir / f"session_{safe}.json"

    def backup_path_for(self, username: str) -> Path:
        path = self.path_for(username)
        return path.with_name(path.name + ".bak")

    def _lock_for(self, username: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(username)
            if lock is None:
                lock = threading.RLock()
                self._locks[username] = lock
            return lock

    @contextmanager
    def lock(self, username: str) -> Iterator[None]:
        """Exclusive access to one user's record within this process.

        The lock lives on this store instance. Every writer, background sync
        included, must go through the same instance; another process opening
        the same directory is not excluded.
        """
        lock = self._lock_for(username)
        if not lock.acquire(timeout=self._lock_timeout):
            raise PersistenceError(f"Timed out waiting for the session record of {username}")
        try:
            yield
        finally:
            lock.release()

    def load(self, username: str) -> Optional[WorkSession]:
        path = self.path_for(username)
        if not path.exists():
            return None
        try:
            return self._read(path)
        except (OSError, ValueError, KeyError, TypeError, DomainError) as exc:
            backup = self.backup_path_for(username)
            logger.warning("Session file %s unreadable (%s); trying backup %s", path, exc, backup)
            if not backup.exists():
                raise PersistenceError(f"Session record for {username} is unreadable") from exc
            try:
                return self._read(backup)
            except (OSError, ValueError, KeyError, TypeError, DomainError) as backup_exc:
                raise PersistenceError(f"Session record and backup for {username} are unreadable") from backup_exc

    def save(self, username: str, session: WorkSession) -> None:
        path = self.path_for(username)
        payload = json.dumps(session_to_dict(session), indent=2, ensure_ascii=False)

        with self.lock(username):
            tmp_name: Optional[str] = None
            try:
                self._base_dir.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(prefix=path.name + ".", suffix=".tmp", dir=self._base_dir)
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())

                if path.exists():
                    shutil.copy2(path, self.backup_path_for(username))

                os.replace(tmp_name, path)
                tmp_name = None
            except OSError as exc:
                logger.error("Failed to write session record for %s: %s", username, exc)
                raise PersistenceError(f"Could not save session for {username}") from exc
            finally:
                if tmp_name and os.path.exists(tmp_name):
                    os.remove(tmp_name)

        logger.debug("Saved session for %s with status %s", username, session.status.value)

    @staticmethod
    def _read(path: Path) -> WorkSession:
        with path.open("r", encoding="utf-8") as f:
            return session_from_dict(json.load(f))
