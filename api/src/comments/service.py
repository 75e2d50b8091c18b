"""Comment service layer.

Business logic for:
- Creating answers and replies (parent must belong to the same post)
- Reading a post's comments as a reply forest
- Comment votes
- Accepting an answer on behalf of the post's author

A post's flat comment list (viewer-independent) is cached in Redis when a
client is configured and invalidated on every write that changes it.
"""

import json
from typing import TYPE_CHECKING

import structlog

from src.core.exceptions import (
    AuthorizationError,
    CommentNotFoundError,
    ConsistencyError,
    InvalidParentError,
    PostNotFoundError,
)
from src.votes.models import SubjectKind, VoteOutcome

from .models import Comment, create_comment
from .schemas import CommentNode, CommentResponse
from .tree import CommentTreeBuilder


if TYPE_CHECKING:
    from redis.asyncio import Redis

    from src.core.sequences import IdAllocator
    from src.posts.store import PostStore
    from src.posts.views import PostAggregateView
    from src.profiles.service import ProfileDirectory
    from src.votes.ledger import VoteLedger

    from .acceptance import AnswerAcceptance
    from .store import CommentStore


logger = structlog.get_logger(__name__)

COMMENT_SEQUENCE = "comments"


class CommentService:
    """Service for threaded answers."""

    def __init__(
        self,
        store: "CommentStore",
        posts: "PostStore",
        profiles: "ProfileDirectory",
        ledger: "VoteLedger",
        ids: "IdAllocator",
        acceptance: "AnswerAcceptance",
        view: "PostAggregateView",
        redis: "Redis | None" = None,
        cache_ttl_seconds: int = 300,
    ):
        self.store = store
        self.posts = posts
        self.profiles = profiles
        self.ledger = ledger
        self.ids = ids
        self.acceptance = acceptance
        self.view = view
        self.builder = CommentTreeBuilder()
        self.redis = redis
        self.cache_ttl_seconds = cache_ttl_seconds

    # ==========================================================================
    # Comment CRUD
    # ==========================================================================

    async def create_comment(
        self,
        post_id: int,
        author_id: str,
        content: str,
        parent_id: int | None = None,
    ) -> CommentResponse:
        """Create a top-level answer or a reply.

        Raises:
            PostNotFoundError: If the post does not exist
            InvalidParentError: If the parent is missing or on another post
        """
        post = await self.posts.get_post(post_id)
        if post is None:
            raise PostNotFoundError

        if parent_id is not None:
            parent = await self.store.get_comment(parent_id)
            if parent is None or parent.post_id != post_id:
                raise InvalidParentError

        comment_id = await self.ids.next_id(COMMENT_SEQUENCE)
        comment = create_comment(
            comment_id=comment_id,
            post_id=post_id,
            author_id=author_id,
            content=content,
            parent_id=parent_id,
        )

        await self.store.insert_comment(comment)
        await self.posts.increment_comment_count(post_id)
        await self.invalidate_cache(post_id)

        logger.info(
            "comment_created",
            post_id=post_id,
            comment_id=comment_id,
            parent_id=parent_id,
        )

        authors = await self.profiles.get_profiles([author_id])
        return self.view.compose_comment(comment, authors.get(author_id))

    async def get_comment(self, comment_id: int) -> Comment:
        """Get a comment by id.

        Raises:
            CommentNotFoundError: If the comment does not exist
        """
        comment = await self.store.get_comment(comment_id)
        if comment is None:
            raise CommentNotFoundError
        return comment

    async def get_comment_view(
        self, comment_id: int, viewer_id: str | None = None
    ) -> CommentResponse:
        """Get a single comment with author and the viewer's vote."""
        comment = await self.get_comment(comment_id)
        authors = await self.profiles.get_profiles([comment.author_id])
        votes = await self.ledger.get_viewer_votes(
            SubjectKind.COMMENT, [comment_id], viewer_id
        )
        return self.view.compose_comment(
            comment, authors.get(comment.author_id), votes.get(comment_id)
        )

    async def get_comment_tree(
        self, post_id: int, viewer_id: str | None = None
    ) -> list[CommentNode]:
        """All comments of a post as an ordered forest.

        Raises:
            PostNotFoundError: If the post does not exist
        """
        post = await self.posts.get_post(post_id)
        if post is None:
            raise PostNotFoundError

        cache_key = await self._cache_key(post_id)
        comments = await self._get_cached_comments(cache_key)
        if comments is None:
            comments = await self.store.list_comments(post_id)
            await self._cache_comments(cache_key, comments)

        authors = await self.profiles.get_profiles([c.author_id for c in comments])
        votes = await self.ledger.get_viewer_votes(
            SubjectKind.COMMENT, [c.comment_id for c in comments], viewer_id
        )
        nodes = self.view.compose_comments(comments, authors, votes)
        return self.builder.build(nodes)

    # ==========================================================================
    # Votes
    # ==========================================================================

    async def vote_comment(
        self, comment_id: int, user_id: str, value: int
    ) -> VoteOutcome:
        """Toggle a user's vote on a comment."""
        outcome = await self.ledger.apply_vote(
            SubjectKind.COMMENT, comment_id, user_id, value
        )
        await self.invalidate_cache(outcome.post_id)
        return outcome

    # ==========================================================================
    # Accepted answer
    # ==========================================================================

    async def accept_answer_as(
        self, comment_id: int, requester_id: str, post_id: int | None = None
    ) -> int:
        """Accept a comment as the answer of a post, as ``requester_id``.

        ``post_id`` defaults to the post the comment is stored under.

        Returns:
            The id of the post that is now answered

        Raises:
            CommentNotFoundError: If the comment does not exist
            PostNotFoundError: If the comment's post does not exist
            AuthorizationError: If the requester did not write the post
            ConsistencyError: If the comment does not belong to ``post_id``
        """
        comment = await self.get_comment(comment_id)

        target_post_id = comment.post_id if post_id is None else post_id
        post = await self.posts.get_post(target_post_id)
        if post is None:
            raise PostNotFoundError

        if post.author_id != requester_id:
            logger.warning(
                "accept_answer_denied",
                post_id=post.post_id,
                comment_id=comment_id,
            )
            raise AuthorizationError("Only the question author can accept an answer")

        if comment.post_id != post.post_id:
            raise ConsistencyError

        await self.acceptance.accept_answer(comment_id, post.post_id)
        await self.invalidate_cache(post.post_id)
        return post.post_id

    # ==========================================================================
    # Cache Management
    # ==========================================================================

    def _generation_key(self, post_id: int) -> str:
        return f"comments:{post_id}:gen"

    async def _cache_key(self, post_id: int) -> str | None:
        """Key of the current cached list of a post (None without Redis).

        The key embeds the post's cache generation. Invalidation bumps the
        generation, so a list read before a write can only ever be stored
        under a generation nobody reads anymore.
        """
        if not self.redis:
            return None

        generation = await self.redis.get(self._generation_key(post_id)) or "0"
        return f"comments:{post_id}:v{generation}"

    async def _get_cached_comments(self, key: str | None) -> list[Comment] | None:
        """Get a cached flat comment list."""
        if key is None:
            return None

        cached = await self.redis.get(key)
        if cached:
            data = json.loads(cached)
            return [Comment.from_dict(item) for item in data]

        return None

    async def _cache_comments(self, key: str | None, comments: list[Comment]) -> None:
        """Cache a flat comment list."""
        if key is None:
            return

        await self.redis.setex(
            key,
            self.cache_ttl_seconds,
            json.dumps([comment.to_dict() for comment in comments]),
        )

    async def invalidate_cache(self, post_id: int) -> None:
        """Move a post's cache to a new generation; older lists expire by TTL."""
        if not self.redis:
            return

        await self.redis.incr(self._generation_key(post_id))
