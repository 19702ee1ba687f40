"""
Business logic for user profiles.

Profiles are created lazily: the first time a user earns points a
default profile (``User<id>``, zero balances) is materialised and the
accrual applied on top of it.  Plain lookups never create anything, so
``get_profile`` and ``accrue`` deliberately use two different
accessors (``get_strict`` and ``get_or_create_default``).
"""

import logging

from ..core.codec import U64_MAX
from ..core.context import AppContext
from ..core.errors import USER, NotFound, OperationFailed
from ..schemas.profile import UserProfile

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for reading, rewarding and deleting user profiles."""

    def __init__(self, context: AppContext) -> None:
        self.store = context.profiles

    def get_strict(self, user_id: int) -> UserProfile:
        profile = self.store.get(user_id)
        if profile is None:
            raise NotFound(USER, user_id)
        return profile

    def get_or_create_default(self, user_id: int) -> UserProfile:
        """Return the stored profile, or an unsaved default one."""
        profile = self.store.get(user_id)
        if profile is None:
            return UserProfile.default_for(user_id)
        return profile

    async def accrue(self, user_id: int, points: int) -> UserProfile:
        """Credit ``points`` and one contribution to ``user_id``.

        Creates the profile if the user has none yet.  Returns the
        updated profile.  Negative ``points`` raise ``ValueError``; balances
        never decrease.
        """
        if points < 0:
            raise ValueError(f"Cannot credit negative points ({points}) to user {user_id}")
        profile = self.get_or_create_default(user_id)
        if profile.points + points > U64_MAX or profile.contributions >= U64_MAX:
            raise OperationFailed(f"Balance of user {user_id} would overflow")
        profile.points += points
        profile.contributions += 1
        self.store.insert(user_id, profile)
        logger.info(
            "User %s credited %s points (total %s, contributions %s)",
            user_id, points, profile.points, profile.contributions,
        )
        return profile

    async def get_profile(self, user_id: int) -> UserProfile:
        return self.get_strict(user_id)

    async def delete_profile(self, user_id: int) -> UserProfile:
        """Remove a profile and return it.  Reports keep their ``reporter_id``."""
        profile = self.store.remove(user_id)
        if profile is None:
            raise NotFound(USER, user_id)
        logger.info("User profile %s deleted", user_id)
        return profile
