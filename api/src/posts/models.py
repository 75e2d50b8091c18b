"""Database models for questions (posts).

Cassandra table definitions for:
- Posts: main table keyed by integer post id
- Posts by course: listing index, newest first
- Post counters: denormalized vote/comment counts (COUNTER columns)

Counter columns cannot share a table with regular columns, so the cached
aggregates live in ``post_counters`` and are merged into ``Post`` on read.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from src.utils.datetimes import ensure_utc, utc_now


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

POST_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.posts (
    post_id INT PRIMARY KEY,
    course_id INT,
    author_id TEXT,
    title TEXT,
    content TEXT,
    is_answered BOOLEAN,
    created_at TIMESTAMP
)
"""

# Partition by course for the course feed
POSTS_BY_COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.posts_by_course (
    course_id INT,
    created_at TIMESTAMP,
    post_id INT,
    PRIMARY KEY ((course_id), created_at, post_id)
) WITH CLUSTERING ORDER BY (created_at DESC, post_id DESC)
"""

# Denormalized aggregates - updated only through counter increments
POST_COUNTERS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.post_counters (
    post_id INT PRIMARY KEY,
    vote_count COUNTER,
    comment_count COUNTER
)
"""

POSTS_TABLES_CQL = [
    POST_TABLE_CQL,
    POSTS_BY_COURSE_TABLE_CQL,
    POST_COUNTERS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Post:
    """Question entity with its cached aggregates."""

    post_id: int
    course_id: int
    author_id: str
    title: str
    content: str
    vote_count: int
    comment_count: int
    is_answered: bool
    created_at: datetime

    @classmethod
    def from_row(cls, row: Any, counters: Any = None) -> "Post":
        """Create Post from a ``posts`` row and its ``post_counters`` row."""
        return cls(
            post_id=row.post_id,
            course_id=row.course_id,
            author_id=row.author_id,
            title=row.title,
            content=row.content,
            vote_count=(counters.vote_count or 0) if counters else 0,
            comment_count=(counters.comment_count or 0) if counters else 0,
            is_answered=row.is_answered or False,
            created_at=ensure_utc(row.created_at),
        )


@dataclass
class PostRef:
    """Listing entry: enough of a post to rank it before loading it."""

    post_id: int
    created_at: datetime
    vote_count: int = 0

    @classmethod
    def from_row(cls, row: Any) -> "PostRef":
        return cls(post_id=row.post_id, created_at=ensure_utc(row.created_at))


# ==============================================================================
# Factory Functions
# ==============================================================================


def create_post(
    post_id: int,
    course_id: int,
    author_id: str,
    title: str,
    content: str,
) -> Post:
    """Create a new post with default values."""
    return Post(
        post_id=post_id,
        course_id=course_id,
        author_id=author_id,
        title=title,
        content=content,
        vote_count=0,
        comment_count=0,
        is_answered=False,
        created_at=utc_now(),
    )
