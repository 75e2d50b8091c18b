"""Comment API endpoints.

Provides routes for:
- Reading a single comment
- Comment votes
- Accepting an answer (question author only)

Listing and creating comments live under ``/v1/posts/{post_id}/comments``.
"""

from fastapi import APIRouter, Query

from src.auth.dependencies import CurrentUser, OptionalUser
from src.core.exceptions import ForumError, handle_forum_error
from src.votes.schemas import VoteRequest, VoteResponse

from .dependencies import CommentServiceDep
from .schemas import CommentResponse, MessageResponse


router = APIRouter(prefix="/v1/comments", tags=["comments"])


@router.get(
    "/{comment_id}",
    response_model=CommentResponse,
    summary="Get comment",
)
async def get_comment(
    comment_id: int,
    comment_service: CommentServiceDep,
    user: OptionalUser,
) -> CommentResponse:
    """Get a single comment with its author and the caller's vote."""
    try:
        return await comment_service.get_comment_view(
            comment_id, viewer_id=user.id if user else None
        )
    except ForumError as e:
        raise handle_forum_error(e) from e


@router.post(
    "/{comment_id}/vote",
    response_model=VoteResponse,
    summary="Vote on comment",
)
async def vote_comment(
    comment_id: int,
    data: VoteRequest,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> VoteResponse:
    """Upvote or downvote a comment.

    Repeating the current vote removes it; the opposite value flips it.
    """
    try:
        outcome = await comment_service.vote_comment(comment_id, user.id, data.value)
    except ForumError as e:
        raise handle_forum_error(e) from e

    return VoteResponse.from_outcome(outcome)


@router.post(
    "/{comment_id}/accept",
    response_model=MessageResponse,
    summary="Accept answer",
)
async def accept_answer(
    comment_id: int,
    comment_service: CommentServiceDep,
    user: CurrentUser,
    post_id: int | None = Query(
        default=None, ge=1, description="Post the comment is expected to belong to"
    ),
) -> MessageResponse:
    """Mark a comment as the accepted answer of its question.

    Only the question's author may accept. Any previously accepted answer
    on the same question is un-accepted.
    """
    try:
        await comment_service.accept_answer_as(comment_id, user.id, post_id=post_id)
    except ForumError as e:
        raise handle_forum_error(e) from e

    return MessageResponse(message="Answer accepted")
