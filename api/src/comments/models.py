"""Database models for threaded answers (comments).

Cassandra table definitions for:
- Comments: every comment of a post in one partition (adjacency list via parent_id)
- Comments by ID: O(1) lookup of the owning post
- Comment counters: denormalized vote counts (COUNTER column)

Architecture: Adjacency List pattern for hierarchical comments
- parent_id references another comment of the same post (NULL for top level)
- the whole post is read in one partition query and assembled into a forest
  in memory (see ``tree.py``)
- keeping a post's comments in one partition lets the accepted-answer switch
  run as a single-partition batch
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from src.utils.datetimes import ensure_utc, utc_now


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

COMMENT_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments (
    post_id INT,
    comment_id INT,
    parent_id INT,
    author_id TEXT,
    content TEXT,
    is_accepted_answer BOOLEAN,
    created_at TIMESTAMP,
    PRIMARY KEY ((post_id), comment_id)
)
"""

# Comments by ID - O(1) lookup table
COMMENTS_BY_ID_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments_by_id (
    comment_id INT PRIMARY KEY,
    post_id INT
)
"""

# Vote counts - denormalized for fast reads
COMMENT_COUNTERS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comment_counters (
    comment_id INT PRIMARY KEY,
    vote_count COUNTER
)
"""

COMMENTS_TABLES_CQL = [
    COMMENT_TABLE_CQL,
    COMMENTS_BY_ID_TABLE_CQL,
    COMMENT_COUNTERS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Comment:
    """Comment entity with its cached vote count."""

    comment_id: int
    post_id: int
    parent_id: int | None
    author_id: str
    content: str
    vote_count: int
    is_accepted_answer: bool
    created_at: datetime

    @classmethod
    def from_row(cls, row: Any, vote_count: int = 0) -> "Comment":
        """Create Comment from Cassandra row."""
        return cls(
            comment_id=row.comment_id,
            post_id=row.post_id,
            parent_id=row.parent_id,
            author_id=row.author_id,
            content=row.content,
            vote_count=vote_count or 0,
            is_accepted_answer=row.is_accepted_answer or False,
            created_at=ensure_utc(row.created_at),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Comment":
        """Create Comment from its ``to_dict`` form (cache payloads)."""
        return cls(
            comment_id=data["comment_id"],
            post_id=data["post_id"],
            parent_id=data["parent_id"],
            author_id=data["author_id"],
            content=data["content"],
            vote_count=data["vote_count"],
            is_accepted_answer=data["is_accepted_answer"],
            created_at=ensure_utc(datetime.fromisoformat(data["created_at"])),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "comment_id": self.comment_id,
            "post_id": self.post_id,
            "parent_id": self.parent_id,
            "author_id": self.author_id,
            "content": self.content,
            "vote_count": self.vote_count,
            "is_accepted_answer": self.is_accepted_answer,
            "created_at": self.created_at.isoformat(),
        }


# ==============================================================================
# Factory Functions
# ==============================================================================


def create_comment(
    comment_id: int,
    post_id: int,
    author_id: str,
    content: str,
    parent_id: int | None = None,
) -> Comment:
    """Create a new comment with default values."""
    return Comment(
        comment_id=comment_id,
        post_id=post_id,
        parent_id=parent_id,
        author_id=author_id,
        content=content,
        vote_count=0,
        is_accepted_answer=False,
        created_at=utc_now(),
    )
