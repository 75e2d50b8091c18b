"""Tests for PostAggregateView composition."""

from dataclasses import asdict
from datetime import UTC, datetime

import pytest

from src.comments.models import Comment
from src.courses.models import Course
from src.posts.models import Post
from src.posts.views import PostAggregateView
from src.profiles.models import UserProfile


CREATED = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def view() -> PostAggregateView:
    return PostAggregateView()


@pytest.fixture
def post() -> Post:
    return Post(
        post_id=1,
        course_id=101,
        author_id="alice",
        title="Big-O of heapify",
        content="Why is building a heap linear and not n log n?",
        vote_count=4,
        comment_count=2,
        is_answered=True,
        created_at=CREATED,
    )


@pytest.fixture
def comment() -> Comment:
    return Comment(
        comment_id=9,
        post_id=1,
        parent_id=None,
        author_id="bob",
        content="Sum the heights.",
        vote_count=2,
        is_accepted_answer=True,
        created_at=CREATED,
    )


ALICE = UserProfile("alice", "Alice", "Anders", "https://img.example/a.png")
CS101 = Course(course_id=101, university_id=7, code="CS101", name="Intro to CS")


class TestComposePost:
    def test_all_references_resolved(self, view, post) -> None:
        response = view.compose_post(post, ALICE, CS101, viewer_vote=1)

        assert response.id == 1
        assert response.author.first_name == "Alice"
        assert response.author.profile_image_url == "https://img.example/a.png"
        assert response.course.code == "CS101"
        assert response.course.university_id == 7
        assert response.vote_count == 4
        assert response.comment_count == 2
        assert response.is_answered is True
        assert response.user_vote == 1

    def test_viewer_without_vote(self, view, post) -> None:
        assert view.compose_post(post, ALICE, CS101).user_vote is None

    def test_dangling_author_gets_placeholder(self, view, post) -> None:
        response = view.compose_post(post, None, CS101)

        assert response.author.model_dump() == {
            "id": "alice",
            "first_name": None,
            "last_name": None,
            "profile_image_url": None,
        }
        assert response.course.code == "CS101"

    def test_dangling_course_gets_placeholder(self, view, post) -> None:
        response = view.compose_post(post, ALICE, None)

        assert response.course.id == 101
        assert response.course.code == "Unknown"
        assert response.course.name == "Unknown"

    def test_inputs_are_not_mutated(self, view, post) -> None:
        before = asdict(post)

        view.compose_post(post, None, None, viewer_vote=-1)

        assert asdict(post) == before


class TestComposeComment:
    def test_comment_view(self, view, comment) -> None:
        node = view.compose_comment(comment, None, viewer_vote=-1)

        assert node.id == 9
        assert node.author.id == "bob"
        assert node.author.last_name is None
        assert node.is_accepted_answer is True
        assert node.user_vote == -1
        assert node.replies == []
        assert node.depth == 0

    def test_batch_composition_uses_lookups(self, view, comment) -> None:
        other = Comment(
            comment_id=10,
            post_id=1,
            parent_id=9,
            author_id="alice",
            content="Thanks!",
            vote_count=0,
            is_accepted_answer=False,
            created_at=CREATED,
        )

        nodes = view.compose_comments(
            [comment, other], {"alice": ALICE}, {10: 1}
        )

        assert [(n.id, n.author.first_name, n.user_vote) for n in nodes] == [
            (9, None, None),
            (10, "Alice", 1),
        ]
