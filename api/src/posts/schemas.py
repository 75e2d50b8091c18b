"""Pydantic schemas for questions (posts)."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from src.courses.schemas import CourseSummaryResponse
from src.profiles.schemas import AuthorResponse


class PostSort(str, Enum):
    """Listing order."""

    HOT = "hot"
    NEW = "new"


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreatePostRequest(BaseModel):
    """Request to ask a question."""

    course_id: int = Field(..., ge=1)
    title: str = Field(..., min_length=5, max_length=200)
    content: str = Field(..., min_length=20, max_length=10000)

    @field_validator("title", "content", mode="before")
    @classmethod
    def strip_text(cls, v: object) -> object:
        """Strip surrounding whitespace before the length checks."""
        if isinstance(v, str):
            return v.strip()
        return v


# ==============================================================================
# Response Schemas
# ==============================================================================


class PostResponse(BaseModel):
    """Question with author, course and the viewer's vote."""

    id: int
    course_id: int
    course: CourseSummaryResponse
    author_id: str
    author: AuthorResponse
    title: str
    content: str
    vote_count: int = 0
    comment_count: int = 0
    is_answered: bool = False
    created_at: datetime
    user_vote: int | None = None
