"""Pydantic schemas for threaded answers.

Request/Response models with validation for:
- Comment creation (top-level answers and replies)
- Comment threads (forest of reply trees)
- Acceptance results
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.profiles.schemas import AuthorResponse


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateCommentRequest(BaseModel):
    """Request to create a new comment."""

    content: str = Field(..., min_length=1, max_length=10000)
    parent_id: int | None = Field(None, ge=1)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Strip whitespace and validate content."""
        v = v.strip()
        if not v:
            msg = "Content cannot be empty"
            raise ValueError(msg)
        return v


# ==============================================================================
# Response Schemas
# ==============================================================================


class CommentResponse(BaseModel):
    """Single comment with its author and the viewer's vote."""

    id: int
    post_id: int
    parent_id: int | None = None
    author_id: str
    author: AuthorResponse
    content: str
    vote_count: int = 0
    is_accepted_answer: bool = False
    created_at: datetime
    user_vote: int | None = None


class CommentNode(CommentResponse):
    """Comment positioned in a reply tree."""

    depth: int = 0
    replies: list["CommentNode"] = Field(default_factory=list)


class CommentThreadResponse(BaseModel):
    """All comments of a post as a forest of reply trees."""

    post_id: int
    total: int
    max_display_depth: int
    items: list[CommentNode]


class MessageResponse(BaseModel):
    """Simple message response."""

    success: bool = True
    message: str
