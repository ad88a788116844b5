from __future__ import annotations

import logging

from ..core.constants import DEFAULT_SCHEDULE_HOURS
from .repository import UserRepository

logger = logging.getLogger(__name__)


class ScheduleService:
    """Resolves a user's daily schedule (in hours)."""

    def __init__(self, users: UserRepository, *, default_hours: int = DEFAULT_SCHEDULE_HOURS):
        self._users = users
        self._default_hours = int(default_hours)

    def schedule_hours_for(self, user_id: int) -> int:
        user = self._users.get_by_id(int(user_id))
        if not user or not user.schedule_hours:
            logger.debug("No schedule for user %s; using default %sh", user_id, self._default_hours)
            return self._default_hours
        return int(user.schedule_hours)
