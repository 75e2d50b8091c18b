"""Cassandra persistence for vote rows and vote counters."""

from typing import TYPE_CHECKING

from .models import VOTE_TABLES, SubjectKind, Vote


if TYPE_CHECKING:
    from cassandra.cluster import Session


class VoteStore:
    """Vote rows (conditional writes) and the subjects' vote counters."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for both subject kinds."""
        ks = self.keyspace
        self._get_vote = {}
        self._get_votes = {}
        self._get_user_votes = {}
        self._insert_vote = {}
        self._delete_vote = {}
        self._update_vote = {}
        self._incr_count = {}
        self._get_count = {}

        for kind, tables in VOTE_TABLES.items():
            table = tables.votes_table
            col = tables.subject_column
            counters = tables.counters_table

            self._get_vote[kind] = self.session.prepare(f"""
                SELECT value FROM {ks}.{table}
                WHERE {col} = ? AND user_id = ?
            """)

            self._get_votes[kind] = self.session.prepare(f"""
                SELECT {col}, user_id, value FROM {ks}.{table}
                WHERE {col} = ?
            """)

            self._get_user_votes[kind] = self.session.prepare(f"""
                SELECT {col}, user_id, value FROM {ks}.{table}
                WHERE {col} IN ? AND user_id = ?
            """)

            self._insert_vote[kind] = self.session.prepare(f"""
                INSERT INTO {ks}.{table} ({col}, user_id, value)
                VALUES (?, ?, ?)
                IF NOT EXISTS
            """)

            self._delete_vote[kind] = self.session.prepare(f"""
                DELETE FROM {ks}.{table}
                WHERE {col} = ? AND user_id = ?
                IF value = ?
            """)

            self._update_vote[kind] = self.session.prepare(f"""
                UPDATE {ks}.{table}
                SET value = ?
                WHERE {col} = ? AND user_id = ?
                IF value = ?
            """)

            # Counter table - atomic increment
            self._incr_count[kind] = self.session.prepare(f"""
                UPDATE {ks}.{counters}
                SET vote_count = vote_count + ?
                WHERE {col} = ?
            """)

            self._get_count[kind] = self.session.prepare(f"""
                SELECT vote_count FROM {ks}.{counters}
                WHERE {col} = ?
            """)

        self._find_post = self.session.prepare(f"""
            SELECT post_id FROM {ks}.posts WHERE post_id = ?
        """)

        self._find_comment_post = self.session.prepare(f"""
            SELECT post_id FROM {ks}.comments_by_id WHERE comment_id = ?
        """)

    # ==========================================================================
    # Subjects
    # ==========================================================================

    async def find_subject_post(self, kind: SubjectKind, subject_id: int) -> int | None:
        """Return the post a subject belongs to, or None if it does not exist.

        For posts this is the post itself.
        """
        statement = (
            self._find_post if kind == SubjectKind.POST else self._find_comment_post
        )
        result = await self.session.aexecute(statement, [subject_id])
        row = result.one()
        return row.post_id if row else None

    # ==========================================================================
    # Vote rows
    # ==========================================================================

    async def get_vote(
        self, kind: SubjectKind, subject_id: int, user_id: str
    ) -> int | None:
        """Get a user's vote value on a subject, if any."""
        result = await self.session.aexecute(
            self._get_vote[kind], [subject_id, user_id]
        )
        row = result.one()
        return row.value if row else None

    async def list_votes(self, kind: SubjectKind, subject_id: int) -> list[Vote]:
        """All active votes on a subject."""
        rows = await self.session.aexecute(self._get_votes[kind], [subject_id])
        return [Vote.from_row(kind, row) for row in rows]

    async def get_user_votes(
        self, kind: SubjectKind, subject_ids: list[int], user_id: str
    ) -> dict[int, int]:
        """Map subject id -> the user's vote value for the given subjects."""
        if not subject_ids:
            return {}

        rows = await self.session.aexecute(
            self._get_user_votes[kind], [list(subject_ids), user_id]
        )
        votes = [Vote.from_row(kind, row) for row in rows]
        return {vote.subject_id: vote.value for vote in votes}

    async def insert_vote(
        self, kind: SubjectKind, subject_id: int, user_id: str, value: int
    ) -> bool:
        """Insert a vote if the user has none. Returns whether it was applied."""
        result = await self.session.aexecute(
            self._insert_vote[kind], [subject_id, user_id, value]
        )
        return result.was_applied

    async def delete_vote(
        self, kind: SubjectKind, subject_id: int, user_id: str, expected: int
    ) -> bool:
        """Delete a vote if it still holds ``expected``."""
        result = await self.session.aexecute(
            self._delete_vote[kind], [subject_id, user_id, expected]
        )
        return result.was_applied

    async def update_vote(
        self,
        kind: SubjectKind,
        subject_id: int,
        user_id: str,
        value: int,
        expected: int,
    ) -> bool:
        """Change a vote's value if it still holds ``expected``."""
        result = await self.session.aexecute(
            self._update_vote[kind], [value, subject_id, user_id, expected]
        )
        return result.was_applied

    # ==========================================================================
    # Counters
    # ==========================================================================

    async def increment_vote_count(
        self, kind: SubjectKind, subject_id: int, delta: int
    ) -> None:
        """Apply a delta to the subject's cached vote count."""
        await self.session.aexecute(self._incr_count[kind], [delta, subject_id])

    async def get_vote_count(self, kind: SubjectKind, subject_id: int) -> int:
        """Read the subject's cached vote count (0 when never voted)."""
        result = await self.session.aexecute(self._get_count[kind], [subject_id])
        row = result.one()
        return (row.vote_count or 0) if row else 0
