"""Database models for post and comment votes.

Cassandra table definitions for:
- Post votes: one row per (post, user)
- Comment votes: one row per (comment, user)

Vote rows are only ever written with lightweight transactions so the
read-decide-write sequence of a toggle is a compare-and-set. The cached
``vote_count`` aggregates live in the owning module's counter tables
(``post_counters`` / ``comment_counters``).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class SubjectKind(str, Enum):
    """What a vote is cast on."""

    POST = "post"
    COMMENT = "comment"


class VoteAction(str, Enum):
    """Effect of a vote request on the voter's row."""

    CAST = "cast"
    RETRACT = "retract"
    FLIP = "flip"


UPVOTE = 1
DOWNVOTE = -1
VALID_VOTE_VALUES = (UPVOTE, DOWNVOTE)


@dataclass(frozen=True)
class VoteTables:
    """Table and column names backing one subject kind."""

    votes_table: str
    subject_column: str
    counters_table: str


VOTE_TABLES: dict[SubjectKind, VoteTables] = {
    SubjectKind.POST: VoteTables("post_votes", "post_id", "post_counters"),
    SubjectKind.COMMENT: VoteTables("comment_votes", "comment_id", "comment_counters"),
}


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Partition by subject so a subject's votes can be summed in one read
POST_VOTES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.post_votes (
    post_id INT,
    user_id TEXT,
    value INT,
    PRIMARY KEY ((post_id), user_id)
)
"""

COMMENT_VOTES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comment_votes (
    comment_id INT,
    user_id TEXT,
    value INT,
    PRIMARY KEY ((comment_id), user_id)
)
"""

VOTES_TABLES_CQL = [
    POST_VOTES_TABLE_CQL,
    COMMENT_VOTES_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


@dataclass
class Vote:
    """A user's active vote on a subject."""

    kind: SubjectKind
    subject_id: int
    user_id: str
    value: int

    @classmethod
    def from_row(cls, kind: SubjectKind, row: Any) -> "Vote":
        """Create Vote from Cassandra row."""
        column = VOTE_TABLES[kind].subject_column
        return cls(
            kind=kind,
            subject_id=getattr(row, column),
            user_id=row.user_id,
            value=row.value,
        )


@dataclass(frozen=True)
class VotePlan:
    """Row change and counter delta decided for one vote request."""

    action: VoteAction
    delta: int
    new_value: int | None


@dataclass
class VoteOutcome:
    """Result of an applied vote."""

    kind: SubjectKind
    subject_id: int
    post_id: int
    action: VoteAction
    delta: int
    user_vote: int | None
    vote_count: int
