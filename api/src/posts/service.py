"""Post service layer.

Business logic for asking, reading, listing and voting on questions.
"""

from typing import TYPE_CHECKING, TypeVar

import structlog

from src.core.exceptions import CourseNotFoundError, PostNotFoundError
from src.votes.models import SubjectKind, VoteOutcome

from .models import Post, PostRef, create_post
from .schemas import PostResponse, PostSort


if TYPE_CHECKING:
    from src.core.sequences import IdAllocator
    from src.courses.service import CourseDirectory
    from src.profiles.service import ProfileDirectory
    from src.votes.ledger import VoteLedger

    from .store import PostStore
    from .views import PostAggregateView


logger = structlog.get_logger(__name__)

POST_SEQUENCE = "posts"

P = TypeVar("P", Post, PostRef)


def sort_posts(posts: list[P], sort: PostSort) -> list[P]:
    """Order posts (or listing refs) for a listing.

    ``hot`` is highest vote count first, ``new`` is newest first. Ties fall
    back to the newer post.
    """
    if sort == PostSort.HOT:
        return sorted(
            posts, key=lambda p: (p.vote_count, p.created_at, p.post_id), reverse=True
        )
    return sorted(posts, key=lambda p: (p.created_at, p.post_id), reverse=True)


class PostService:
    """Service for questions."""

    def __init__(
        self,
        store: "PostStore",
        courses: "CourseDirectory",
        profiles: "ProfileDirectory",
        ledger: "VoteLedger",
        ids: "IdAllocator",
        view: "PostAggregateView",
    ):
        self.store = store
        self.courses = courses
        self.profiles = profiles
        self.ledger = ledger
        self.ids = ids
        self.view = view

    async def create_post(
        self, course_id: int, author_id: str, title: str, content: str
    ) -> PostResponse:
        """Ask a question in a course.

        Raises:
            CourseNotFoundError: If the course does not exist
        """
        course = await self.courses.get_course(course_id)
        if course is None:
            raise CourseNotFoundError

        post_id = await self.ids.next_id(POST_SEQUENCE)
        post = create_post(
            post_id=post_id,
            course_id=course_id,
            author_id=author_id,
            title=title,
            content=content,
        )
        await self.store.insert_post(post)

        logger.info("post_created", post_id=post_id, course_id=course_id)

        authors = await self.profiles.get_profiles([author_id])
        return self.view.compose_post(post, authors.get(author_id), course)

    async def get_post(
        self, post_id: int, viewer_id: str | None = None
    ) -> PostResponse:
        """Get a question with author, course and the viewer's vote.

        Raises:
            PostNotFoundError: If the post does not exist
        """
        post = await self.store.get_post(post_id)
        if post is None:
            raise PostNotFoundError

        composed = await self._compose([post], viewer_id)
        return composed[0]

    async def list_posts(
        self,
        course_id: int | None = None,
        university_id: int | None = None,
        sort: PostSort = PostSort.HOT,
        viewer_id: str | None = None,
        limit: int = 50,
    ) -> list[PostResponse]:
        """List questions, optionally restricted to a course and/or university.

        The whole filtered set is ranked before the first ``limit`` posts are
        loaded, so an older post with many votes still leads a ``hot`` list.
        """
        course_ids = await self._course_scope(course_id, university_id)
        refs = await self.store.list_post_refs(
            course_ids, with_vote_counts=sort == PostSort.HOT
        )
        page = [ref.post_id for ref in sort_posts(refs, sort)[:limit]]

        loaded = {post.post_id: post for post in await self.store.get_posts(page)}
        posts = [loaded[post_id] for post_id in page if post_id in loaded]
        return await self._compose(posts, viewer_id)

    async def vote_post(self, post_id: int, user_id: str, value: int) -> VoteOutcome:
        """Toggle a user's vote on a post."""
        return await self.ledger.apply_vote(SubjectKind.POST, post_id, user_id, value)

    async def _course_scope(
        self, course_id: int | None, university_id: int | None
    ) -> list[int] | None:
        """Course ids a listing is restricted to (None means every course)."""
        if university_id is None:
            return None if course_id is None else [course_id]

        course_ids = await self.courses.list_course_ids(university_id)
        if course_id is None:
            return course_ids
        return [course_id] if course_id in course_ids else []

    async def _compose(
        self, posts: list[Post], viewer_id: str | None
    ) -> list[PostResponse]:
        authors = await self.profiles.get_profiles([p.author_id for p in posts])
        courses = await self.courses.get_courses([p.course_id for p in posts])
        votes = await self.ledger.get_viewer_votes(
            SubjectKind.POST, [p.post_id for p in posts], viewer_id
        )
        return self.view.compose_posts(posts, authors, courses, votes)
