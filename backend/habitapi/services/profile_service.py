"""
Habit Tracker Backend — Profile Service
=========================================

What:  Mirrors a freshly signed-up auth user into the `users` profile table.
Why:   The profile row is the foreign-key target for habits and logs; it must
       exist before the user's first write.
How:   Privileged insert (service-role key). Idempotent: if the row already
       exists the insert fails with a unique violation, which counts as success,
       so the signup flow can call this as often as it likes.
"""

import logging
from typing import Optional

from habitapi.config import settings
from habitapi.exceptions import BackendError, BadRequestError, UpstreamError
from habitapi.schemas.records import UserProfile
from habitapi.services.supabase_backend import UNIQUE_VIOLATION, SupabaseBackend

logger = logging.getLogger(__name__)


class ProfileService:

    async def ensure_profile(
        self,
        backend: SupabaseBackend,
        user_id: Optional[str],
        email: Optional[str],
    ) -> bool:
        """
        Create the profile row unless it already exists.

        Returns:
            True if a row was inserted, False if it was already there.

        Raises:
            BadRequestError: user_id or email missing
            UpstreamError (500): insert failed for any reason other than a duplicate key
        """
        if not user_id or not email:
            raise BadRequestError(message="Missing userId or email")

        profile = UserProfile.blank(user_id, email)
        try:
            await backend.admin_insert(settings.users_table, profile.model_dump())
        except BackendError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.debug("Profile for %s already exists", user_id)
                return False
            logger.error("Error creating user profile %s: %s", user_id, e.message)
            raise UpstreamError(
                message="Failed to create user profile",
                error="Internal server error",
                status_code=500,
                context={"user_id": user_id, "code": e.code},
            )

        logger.info("Created profile for user %s", user_id)
        return True


profile_service = ProfileService()
