"""Shared fixtures.

Service-level tests run against in-memory stores that implement the same
async methods as the Cassandra stores. Store-level tests use a mocked
``cassandra.cluster.Session`` instead (see the per-module tests).
"""

from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi.testclient import TestClient

from src.auth.security import create_access_token
from src.comments.acceptance import AnswerAcceptance
from src.comments.models import Comment
from src.comments.service import CommentService
from src.courses.models import Course
from src.posts.models import Post, PostRef
from src.posts.service import PostService
from src.posts.views import PostAggregateView
from src.profiles.models import UserProfile
from src.votes.ledger import VoteLedger
from src.votes.models import SubjectKind, Vote


BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


# ==============================================================================
# In-memory stores
# ==============================================================================


class ForumState:
    """Rows shared by the in-memory stores."""

    def __init__(self) -> None:
        self.posts: dict[int, Post] = {}
        self.comments: dict[int, Comment] = {}
        self.votes: dict[SubjectKind, dict[tuple[int, str], int]] = {
            SubjectKind.POST: {},
            SubjectKind.COMMENT: {},
        }
        self.vote_counts: dict[SubjectKind, dict[int, int]] = {
            SubjectKind.POST: {},
            SubjectKind.COMMENT: {},
        }
        self.comment_counts: dict[int, int] = {}


class InMemoryPostStore:
    def __init__(self, state: ForumState) -> None:
        self.state = state

    async def insert_post(self, post: Post) -> None:
        self.state.posts[post.post_id] = replace(post)

    async def get_post(self, post_id: int) -> Post | None:
        post = self.state.posts.get(post_id)
        if post is None:
            return None
        return self._with_counters(post)

    async def list_post_refs(
        self, course_ids: list[int] | None, with_vote_counts: bool = False
    ) -> list[PostRef]:
        counts = self.state.vote_counts[SubjectKind.POST]
        return [
            PostRef(
                post_id=post.post_id,
                created_at=post.created_at,
                vote_count=counts.get(post.post_id, 0) if with_vote_counts else 0,
            )
            for post in self.state.posts.values()
            if course_ids is None or post.course_id in course_ids
        ]

    async def get_posts(self, post_ids: list[int]) -> list[Post]:
        return [
            self._with_counters(self.state.posts[post_id])
            for post_id in post_ids
            if post_id in self.state.posts
        ]

    async def increment_comment_count(self, post_id: int, delta: int = 1) -> None:
        counts = self.state.comment_counts
        counts[post_id] = counts.get(post_id, 0) + delta

    async def mark_answered(self, post_id: int) -> None:
        self.state.posts[post_id].is_answered = True

    def _with_counters(self, post: Post) -> Post:
        return replace(
            post,
            vote_count=self.state.vote_counts[SubjectKind.POST].get(post.post_id, 0),
            comment_count=self.state.comment_counts.get(post.post_id, 0),
        )


class InMemoryCommentStore:
    def __init__(self, state: ForumState) -> None:
        self.state = state
        self.list_calls = 0

    async def insert_comment(self, comment: Comment) -> None:
        self.state.comments[comment.comment_id] = replace(comment)

    async def get_comment(self, comment_id: int) -> Comment | None:
        comment = self.state.comments.get(comment_id)
        if comment is None:
            return None
        return self._with_votes(comment)

    async def list_comments(self, post_id: int) -> list[Comment]:
        self.list_calls += 1
        comments = [c for c in self.state.comments.values() if c.post_id == post_id]
        comments.sort(key=lambda c: c.comment_id)
        return [self._with_votes(c) for c in comments]

    async def clear_accepted(self, post_id: int, keep: int | None = None) -> None:
        for comment in self.state.comments.values():
            if comment.post_id == post_id and comment.comment_id != keep:
                comment.is_accepted_answer = False

    async def set_accepted(self, post_id: int, comment_id: int) -> None:
        self.state.comments[comment_id].is_accepted_answer = True

    def _with_votes(self, comment: Comment) -> Comment:
        counts = self.state.vote_counts[SubjectKind.COMMENT]
        return replace(comment, vote_count=counts.get(comment.comment_id, 0))


class InMemoryVoteStore:
    """Vote rows with compare-and-set semantics.

    ``before_write`` hooks run (one per conditional write, in order) right
    before the condition is evaluated, to simulate a concurrent request.
    """

    def __init__(self, state: ForumState) -> None:
        self.state = state
        self.before_write: list[Callable[[], None]] = []
        self.fail_counter_updates = False

    async def find_subject_post(self, kind: SubjectKind, subject_id: int) -> int | None:
        if kind == SubjectKind.POST:
            return subject_id if subject_id in self.state.posts else None
        comment = self.state.comments.get(subject_id)
        return comment.post_id if comment else None

    async def get_vote(
        self, kind: SubjectKind, subject_id: int, user_id: str
    ) -> int | None:
        return self.state.votes[kind].get((subject_id, user_id))

    async def list_votes(self, kind: SubjectKind, subject_id: int) -> list[Vote]:
        return [
            Vote(kind=kind, subject_id=sid, user_id=uid, value=value)
            for (sid, uid), value in self.state.votes[kind].items()
            if sid == subject_id
        ]

    async def get_user_votes(
        self, kind: SubjectKind, subject_ids: list[int], user_id: str
    ) -> dict[int, int]:
        rows = self.state.votes[kind]
        return {
            sid: rows[(sid, user_id)] for sid in subject_ids if (sid, user_id) in rows
        }

    async def insert_vote(
        self, kind: SubjectKind, subject_id: int, user_id: str, value: int
    ) -> bool:
        self._run_hook()
        rows = self.state.votes[kind]
        if (subject_id, user_id) in rows:
            return False
        rows[(subject_id, user_id)] = value
        return True

    async def delete_vote(
        self, kind: SubjectKind, subject_id: int, user_id: str, expected: int
    ) -> bool:
        self._run_hook()
        rows = self.state.votes[kind]
        if rows.get((subject_id, user_id)) != expected:
            return False
        del rows[(subject_id, user_id)]
        return True

    async def update_vote(
        self,
        kind: SubjectKind,
        subject_id: int,
        user_id: str,
        value: int,
        expected: int,
    ) -> bool:
        self._run_hook()
        rows = self.state.votes[kind]
        if rows.get((subject_id, user_id)) != expected:
            return False
        rows[(subject_id, user_id)] = value
        return True

    async def increment_vote_count(
        self, kind: SubjectKind, subject_id: int, delta: int
    ) -> None:
        if self.fail_counter_updates:
            raise ConnectionError("counter write timed out")
        counts = self.state.vote_counts[kind]
        counts[subject_id] = counts.get(subject_id, 0) + delta

    async def get_vote_count(self, kind: SubjectKind, subject_id: int) -> int:
        return self.state.vote_counts[kind].get(subject_id, 0)

    def _run_hook(self) -> None:
        if self.before_write:
            self.before_write.pop(0)()


class InMemoryIdAllocator:
    def __init__(self) -> None:
        self.values: dict[str, int] = {}

    async def next_id(self, name: str) -> int:
        self.values[name] = self.values.get(name, 0) + 1
        return self.values[name]


class InMemoryCourseDirectory:
    def __init__(self, courses: list[Course]) -> None:
        self.courses = {course.course_id: course for course in courses}

    async def get_courses(self, course_ids: list[int]) -> dict[int, Course]:
        return {cid: self.courses[cid] for cid in course_ids if cid in self.courses}

    async def get_course(self, course_id: int) -> Course | None:
        return self.courses.get(course_id)

    async def list_course_ids(self, university_id: int) -> list[int]:
        return sorted(
            cid
            for cid, course in self.courses.items()
            if course.university_id == university_id
        )


class InMemoryProfileDirectory:
    def __init__(self, profiles: list[UserProfile]) -> None:
        self.profiles = {profile.user_id: profile for profile in profiles}

    async def get_profiles(self, user_ids: list[str]) -> dict[str, UserProfile]:
        return {uid: self.profiles[uid] for uid in user_ids if uid in self.profiles}


class InMemoryRedis:
    """Subset of ``redis.asyncio.Redis`` used by the comment cache."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self.data[key] = value
        self.ttls[key] = ttl

    async def incr(self, key: str) -> int:
        value = int(self.data.get(key, "0")) + 1
        self.data[key] = str(value)
        return value

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed


# ==============================================================================
# Fixtures
# ==============================================================================


@pytest.fixture
def state() -> ForumState:
    return ForumState()


@pytest.fixture
def post_store(state: ForumState) -> InMemoryPostStore:
    return InMemoryPostStore(state)


@pytest.fixture
def comment_store(state: ForumState) -> InMemoryCommentStore:
    return InMemoryCommentStore(state)


@pytest.fixture
def vote_store(state: ForumState) -> InMemoryVoteStore:
    return InMemoryVoteStore(state)


@pytest.fixture
def ledger(vote_store: InMemoryVoteStore) -> VoteLedger:
    return VoteLedger(vote_store, max_attempts=3)


@pytest.fixture
def courses() -> InMemoryCourseDirectory:
    return InMemoryCourseDirectory(
        [
            Course(course_id=101, university_id=7, code="CS101", name="Intro to CS"),
            Course(course_id=102, university_id=7, code="CS102", name="Data Structures"),
            Course(course_id=301, university_id=9, code="MA301", name="Real Analysis"),
        ]
    )


@pytest.fixture
def profiles() -> InMemoryProfileDirectory:
    return InMemoryProfileDirectory(
        [
            UserProfile("alice", "Alice", "Anders", None),
            UserProfile("bob", "Bob", "Berg", "https://img.example/bob.png"),
            UserProfile("carol", "Carol", "Chen", None),
        ]
    )


@pytest.fixture
def redis_cache() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def post_service(
    post_store, courses, profiles, ledger
) -> PostService:
    return PostService(
        store=post_store,
        courses=courses,
        profiles=profiles,
        ledger=ledger,
        ids=InMemoryIdAllocator(),
        view=PostAggregateView(),
    )


@pytest.fixture
def comment_service(
    comment_store, post_store, profiles, ledger, redis_cache
) -> CommentService:
    return CommentService(
        store=comment_store,
        posts=post_store,
        profiles=profiles,
        ledger=ledger,
        ids=InMemoryIdAllocator(),
        acceptance=AnswerAcceptance(comments=comment_store, posts=post_store),
        view=PostAggregateView(),
        redis=redis_cache,
        cache_ttl_seconds=60,
    )


class Seeder:
    """Inserts posts and comments directly into the shared state."""

    def __init__(self, state: ForumState) -> None:
        self.state = state

    def post(
        self,
        post_id: int,
        author_id: str = "alice",
        course_id: int = 101,
        created_at: datetime | None = None,
        **fields: Any,
    ) -> Post:
        post = Post(
            post_id=post_id,
            course_id=course_id,
            author_id=author_id,
            title=fields.pop("title", f"Question {post_id}"),
            content=fields.pop("content", "How does this part of the course work?"),
            vote_count=0,
            comment_count=0,
            is_answered=fields.pop("is_answered", False),
            created_at=created_at or BASE_TIME + timedelta(minutes=post_id),
        )
        self.state.posts[post_id] = post
        return post

    def comment(
        self,
        comment_id: int,
        post_id: int,
        parent_id: int | None = None,
        author_id: str = "bob",
        created_at: datetime | None = None,
        is_accepted_answer: bool = False,
    ) -> Comment:
        comment = Comment(
            comment_id=comment_id,
            post_id=post_id,
            parent_id=parent_id,
            author_id=author_id,
            content=f"Answer {comment_id}",
            vote_count=0,
            is_accepted_answer=is_accepted_answer,
            created_at=created_at or BASE_TIME + timedelta(minutes=comment_id),
        )
        self.state.comments[comment_id] = comment
        counts = self.state.comment_counts
        counts[post_id] = counts.get(post_id, 0) + 1
        return comment


@pytest.fixture
def seed(state: ForumState) -> Seeder:
    return Seeder(state)


# ==============================================================================
# HTTP
# ==============================================================================


@pytest.fixture
def app(post_service: PostService, comment_service: CommentService):
    """Application with in-memory services (lifespan is not run)."""
    from src.main import create_app  # noqa: PLC0415

    application = create_app()
    application.state.post_service = post_service
    application.state.comment_service = comment_service
    application.state.redis = None
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Build an Authorization header for a user id."""

    def _headers(user_id: str) -> dict[str, str]:
        token = create_access_token({"sub": user_id})
        return {"Authorization": f"Bearer {token}"}

    return _headers
