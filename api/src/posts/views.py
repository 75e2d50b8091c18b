"""Read views for posts and comments.

Combines stored entities with their author profile, course summary and the
viewer's own vote. A reference that no longer resolves is replaced by a
placeholder and logged; composition never fails because of it.
"""

import structlog

from src.comments.models import Comment
from src.comments.schemas import CommentNode
from src.courses.models import Course
from src.courses.schemas import CourseSummaryResponse
from src.profiles.models import UserProfile
from src.profiles.schemas import AuthorResponse

from .models import Post
from .schemas import PostResponse


logger = structlog.get_logger(__name__)


class PostAggregateView:
    """Composes API-facing views without touching storage."""

    def compose_post(
        self,
        post: Post,
        author: UserProfile | None,
        course: Course | None,
        viewer_vote: int | None = None,
    ) -> PostResponse:
        """Build the read view of a post."""
        return PostResponse(
            id=post.post_id,
            course_id=post.course_id,
            course=self._course_summary(post.course_id, course, post_id=post.post_id),
            author_id=post.author_id,
            author=self._author(post.author_id, author, post_id=post.post_id),
            title=post.title,
            content=post.content,
            vote_count=post.vote_count,
            comment_count=post.comment_count,
            is_answered=post.is_answered,
            created_at=post.created_at,
            user_vote=viewer_vote,
        )

    def compose_comment(
        self,
        comment: Comment,
        author: UserProfile | None,
        viewer_vote: int | None = None,
    ) -> CommentNode:
        """Build the read view of a comment (not yet placed in a tree)."""
        return CommentNode(
            id=comment.comment_id,
            post_id=comment.post_id,
            parent_id=comment.parent_id,
            author_id=comment.author_id,
            author=self._author(
                comment.author_id, author, comment_id=comment.comment_id
            ),
            content=comment.content,
            vote_count=comment.vote_count,
            is_accepted_answer=comment.is_accepted_answer,
            created_at=comment.created_at,
            user_vote=viewer_vote,
        )

    def compose_posts(
        self,
        posts: list[Post],
        authors: dict[str, UserProfile],
        courses: dict[int, Course],
        viewer_votes: dict[int, int],
    ) -> list[PostResponse]:
        """Compose a list of posts from batched lookups."""
        return [
            self.compose_post(
                post,
                authors.get(post.author_id),
                courses.get(post.course_id),
                viewer_votes.get(post.post_id),
            )
            for post in posts
        ]

    def compose_comments(
        self,
        comments: list[Comment],
        authors: dict[str, UserProfile],
        viewer_votes: dict[int, int],
    ) -> list[CommentNode]:
        """Compose a flat list of comments from batched lookups."""
        return [
            self.compose_comment(
                comment,
                authors.get(comment.author_id),
                viewer_votes.get(comment.comment_id),
            )
            for comment in comments
        ]

    def _author(
        self, author_id: str, profile: UserProfile | None, **ref: int
    ) -> AuthorResponse:
        if profile is None:
            logger.warning("dangling_author_reference", author_id=author_id, **ref)
            return AuthorResponse.placeholder(author_id)
        return AuthorResponse.from_profile(profile)

    def _course_summary(
        self, course_id: int, course: Course | None, **ref: int
    ) -> CourseSummaryResponse:
        if course is None:
            logger.warning("dangling_course_reference", course_id=course_id, **ref)
            return CourseSummaryResponse.placeholder(course_id)
        return CourseSummaryResponse.from_course(course)
