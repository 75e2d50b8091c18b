"""Pydantic schemas for authentication."""

from pydantic import BaseModel, Field


class AuthenticatedUser(BaseModel):
    """Identity extracted from a validated access token.

    User ids are opaque strings issued by the auth service.
    """

    id: str = Field(..., min_length=1)
