"""
Habit Tracker Backend — Habit Log Service
===========================================

What:  Owner-scoped mutations on the `habit_logs` table.
Why:   The ownership rule lives here, not in the route: every query carries
       `user_id = <caller>` taken from the verified token.

Privacy:
    A log that doesn't exist and a log owned by someone else both match zero
    rows and raise the same NotFoundError. The caller cannot test for other
    users' log ids.
"""

import logging

from habitapi.config import settings
from habitapi.exceptions import NotFoundError
from habitapi.schemas.auth import AuthenticatedUser
from habitapi.schemas.records import HabitLog
from habitapi.services.supabase_backend import SupabaseBackend

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Habit log not found or unauthorized"


class HabitLogService:

    async def delete_log(
        self,
        backend: SupabaseBackend,
        user: AuthenticatedUser,
        log_id: str,
    ) -> HabitLog:
        """
        Delete one habit log owned by `user`.

        Returns:
            The deleted row.

        Raises:
            NotFoundError: no row with this id belongs to the caller
            BackendError: the delete itself failed (→ 500)
        """
        rows = await backend.delete_owned(
            access_token=user.access_token,
            table=settings.habit_logs_table,
            row_id=log_id,
            user_id=user.id,
        )
        if not rows:
            raise NotFoundError(resource="habit log", message=NOT_FOUND_MESSAGE)

        logger.info("User %s deleted habit log %s", user.id, log_id)
        return HabitLog.model_validate(rows[0])


habit_log_service = HabitLogService()
