"""Read-only profile lookups."""

from typing import TYPE_CHECKING

from .models import UserProfile


if TYPE_CHECKING:
    from cassandra.cluster import Session


class ProfileDirectory:
    """Looks up author profiles by user id."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._get_profiles = self.session.prepare(f"""
            SELECT user_id, first_name, last_name, profile_image_url
            FROM {self.keyspace}.user_profiles
            WHERE user_id IN ?
        """)

    async def get_profiles(self, user_ids: list[str]) -> dict[str, UserProfile]:
        """Map user id -> UserProfile for the ids that exist."""
        unique_ids = sorted(set(user_ids))
        if not unique_ids:
            return {}

        rows = await self.session.aexecute(self._get_profiles, [unique_ids])
        profiles = [UserProfile.from_row(row) for row in rows]
        return {profile.user_id: profile for profile in profiles}
