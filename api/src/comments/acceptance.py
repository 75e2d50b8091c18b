"""Accepted-answer state transition.

At most one comment per post carries ``is_accepted_answer``. Accepting a
comment runs three writes in a fixed order:

1. clear the flag on every other comment of the post
2. set the flag on the accepted comment
3. mark the post as answered

Steps 1 and 2 never leave two comments accepted at once, and the post is only
flagged answered after an accepted comment exists.
"""

from typing import TYPE_CHECKING

import structlog

from src.core.exceptions import CommentNotFoundError


if TYPE_CHECKING:
    from src.posts.store import PostStore

    from .store import CommentStore


logger = structlog.get_logger(__name__)


class AnswerAcceptance:
    """Marks a single comment per post as the accepted answer."""

    def __init__(self, comments: "CommentStore", posts: "PostStore"):
        self.comments = comments
        self.posts = posts

    async def accept_answer(self, comment_id: int, post_id: int) -> None:
        """Make ``comment_id`` the accepted answer of ``post_id``.

        The caller has already checked that the comment belongs to the post
        and that the requester is the post's author.

        Raises:
            CommentNotFoundError: If the comment does not exist
        """
        comment = await self.comments.get_comment(comment_id)
        if comment is None:
            raise CommentNotFoundError

        await self.comments.clear_accepted(post_id, keep=comment_id)
        await self.comments.set_accepted(post_id, comment_id)
        await self.posts.mark_answered(post_id)

        logger.info("answer_accepted", post_id=post_id, comment_id=comment_id)
