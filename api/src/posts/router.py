"""Question API endpoints.

Provides routes for:
- Asking, reading and listing questions
- Post votes
- A question's comment thread (read as a forest, add answers/replies)
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from src.auth.dependencies import CurrentUser, OptionalUser
from src.comments.dependencies import CommentServiceDep
from src.comments.schemas import (
    CommentResponse,
    CommentThreadResponse,
    CreateCommentRequest,
)
from src.comments.tree import count_nodes
from src.config import get_settings
from src.core.exceptions import ForumError, handle_forum_error
from src.votes.schemas import VoteRequest, VoteResponse

from .dependencies import PostServiceDep
from .schemas import CreatePostRequest, PostResponse, PostSort


router = APIRouter(prefix="/v1/posts", tags=["posts"])


@router.get(
    "",
    response_model=list[PostResponse],
    summary="List questions",
)
async def list_posts(
    post_service: PostServiceDep,
    user: OptionalUser,
    course_id: Annotated[int | None, Query(ge=1)] = None,
    university_id: Annotated[int | None, Query(ge=1)] = None,
    sort: PostSort = PostSort.HOT,
    limit: Annotated[int, Query(ge=1)] = 50,
) -> list[PostResponse]:
    """List questions, optionally for one course or one university.

    ``hot`` orders by vote count, ``new`` by creation time.
    """
    limit = min(limit, get_settings().posts_page_size_max)
    return await post_service.list_posts(
        course_id=course_id,
        university_id=university_id,
        sort=sort,
        viewer_id=user.id if user else None,
        limit=limit,
    )


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Ask question",
)
async def create_post(
    data: CreatePostRequest,
    post_service: PostServiceDep,
    user: CurrentUser,
) -> PostResponse:
    """Ask a new question in a course."""
    try:
        return await post_service.create_post(
            course_id=data.course_id,
            author_id=user.id,
            title=data.title,
            content=data.content,
        )
    except ForumError as e:
        raise handle_forum_error(e) from e


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    summary="Get question",
)
async def get_post(
    post_id: int,
    post_service: PostServiceDep,
    user: OptionalUser,
) -> PostResponse:
    """Get a question with author, course and the caller's vote."""
    try:
        return await post_service.get_post(post_id, viewer_id=user.id if user else None)
    except ForumError as e:
        raise handle_forum_error(e) from e


@router.post(
    "/{post_id}/vote",
    response_model=VoteResponse,
    summary="Vote on question",
)
async def vote_post(
    post_id: int,
    data: VoteRequest,
    post_service: PostServiceDep,
    user: CurrentUser,
) -> VoteResponse:
    """Upvote or downvote a question.

    Repeating the current vote removes it; the opposite value flips it.
    """
    try:
        outcome = await post_service.vote_post(post_id, user.id, data.value)
    except ForumError as e:
        raise handle_forum_error(e) from e

    return VoteResponse.from_outcome(outcome)


@router.get(
    "/{post_id}/comments",
    response_model=CommentThreadResponse,
    summary="Get comment thread",
)
async def get_comment_thread(
    post_id: int,
    comment_service: CommentServiceDep,
    user: OptionalUser,
) -> CommentThreadResponse:
    """Get every comment of a question as a forest of reply trees.

    The tree is complete; ``max_display_depth`` is only a nesting hint for
    clients.
    """
    try:
        forest = await comment_service.get_comment_tree(
            post_id, viewer_id=user.id if user else None
        )
    except ForumError as e:
        raise handle_forum_error(e) from e

    return CommentThreadResponse(
        post_id=post_id,
        total=count_nodes(forest),
        max_display_depth=get_settings().comment_display_max_depth,
        items=forest,
    )


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Answer or reply",
)
async def create_comment(
    post_id: int,
    data: CreateCommentRequest,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> CommentResponse:
    """Add a top-level answer, or a reply when ``parent_id`` is given."""
    try:
        return await comment_service.create_comment(
            post_id=post_id,
            author_id=user.id,
            content=data.content,
            parent_id=data.parent_id,
        )
    except ForumError as e:
        raise handle_forum_error(e) from e
