"""Database models for author profiles.

Profiles are written by the account service; the forum reads them to show
who asked or answered.
"""

from dataclasses import dataclass
from typing import Any


USER_PROFILE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.user_profiles (
    user_id TEXT PRIMARY KEY,
    first_name TEXT,
    last_name TEXT,
    profile_image_url TEXT
)
"""

PROFILES_TABLES_CQL = [USER_PROFILE_TABLE_CQL]


@dataclass
class UserProfile:
    """Public profile of a user."""

    user_id: str
    first_name: str | None
    last_name: str | None
    profile_image_url: str | None

    @classmethod
    def from_row(cls, row: Any) -> "UserProfile":
        """Create UserProfile from Cassandra row."""
        return cls(
            user_id=row.user_id,
            first_name=row.first_name,
            last_name=row.last_name,
            profile_image_url=row.profile_image_url,
        )
