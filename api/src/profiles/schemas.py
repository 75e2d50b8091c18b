"""Pydantic schemas for author profiles."""

from pydantic import BaseModel

from .models import UserProfile


class AuthorResponse(BaseModel):
    """Author information attached to posts and comments."""

    id: str
    first_name: str | None = None
    last_name: str | None = None
    profile_image_url: str | None = None

    @classmethod
    def placeholder(cls, user_id: str) -> "AuthorResponse":
        """Stand-in for an author whose profile cannot be found."""
        return cls(id=user_id)

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "AuthorResponse":
        """Create response from a stored profile."""
        return cls(
            id=profile.user_id,
            first_name=profile.first_name,
            last_name=profile.last_name,
            profile_image_url=profile.profile_image_url,
        )
