"""Cassandra persistence for comments and their vote counters."""

from typing import TYPE_CHECKING

from cassandra.query import BatchStatement

from .models import Comment


if TYPE_CHECKING:
    from cassandra.cluster import Session


class CommentStore:
    """Reads and writes ``comments``, ``comments_by_id`` and ``comment_counters``."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._insert_comment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments
            (post_id, comment_id, parent_id, author_id, content,
             is_accepted_answer, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_comment_by_id = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments_by_id (comment_id, post_id)
            VALUES (?, ?)
        """)

        self._get_comment_post = self.session.prepare(f"""
            SELECT post_id FROM {self.keyspace}.comments_by_id
            WHERE comment_id = ?
        """)

        self._get_comment = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments
            WHERE post_id = ? AND comment_id = ?
        """)

        self._get_comments_by_post = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.comments
            WHERE post_id = ?
        """)

        self._get_comment_ids_by_post = self.session.prepare(f"""
            SELECT comment_id FROM {self.keyspace}.comments
            WHERE post_id = ?
        """)

        self._set_accepted = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments
            SET is_accepted_answer = ?
            WHERE post_id = ? AND comment_id = ?
        """)

        # Counters
        self._get_counters = self.session.prepare(f"""
            SELECT comment_id, vote_count FROM {self.keyspace}.comment_counters
            WHERE comment_id IN ?
        """)

    async def insert_comment(self, comment: Comment) -> None:
        """Dual-write a new comment to the post partition and the id lookup."""
        await self.session.aexecute(
            self._insert_comment,
            [
                comment.post_id,
                comment.comment_id,
                comment.parent_id,
                comment.author_id,
                comment.content,
                comment.is_accepted_answer,
                comment.created_at,
            ],
        )
        await self.session.aexecute(
            self._insert_comment_by_id,
            [comment.comment_id, comment.post_id],
        )

    async def get_comment(self, comment_id: int) -> Comment | None:
        """Find a comment by id, or None."""
        result = await self.session.aexecute(self._get_comment_post, [comment_id])
        lookup = result.one()
        if not lookup:
            return None

        result = await self.session.aexecute(
            self._get_comment, [lookup.post_id, comment_id]
        )
        row = result.one()
        if not row:
            return None

        counts = await self._load_vote_counts([comment_id])
        return Comment.from_row(row, counts.get(comment_id, 0))

    async def list_comments(self, post_id: int) -> list[Comment]:
        """Every comment of a post, with vote counts, in storage order."""
        rows = list(await self.session.aexecute(self._get_comments_by_post, [post_id]))
        counts = await self._load_vote_counts([row.comment_id for row in rows])
        return [Comment.from_row(row, counts.get(row.comment_id, 0)) for row in rows]

    async def clear_accepted(self, post_id: int, keep: int | None = None) -> None:
        """Unset ``is_accepted_answer`` on every comment of a post except ``keep``.

        Runs as one logged batch inside the post's partition.
        """
        rows = await self.session.aexecute(self._get_comment_ids_by_post, [post_id])
        batch = BatchStatement()
        cleared = 0
        for row in rows:
            if row.comment_id != keep:
                batch.add(self._set_accepted, (False, post_id, row.comment_id))
                cleared += 1

        if cleared:
            await self.session.aexecute(batch)

    async def set_accepted(self, post_id: int, comment_id: int) -> None:
        """Mark one comment as the accepted answer."""
        await self.session.aexecute(self._set_accepted, [True, post_id, comment_id])

    async def _load_vote_counts(self, comment_ids: list[int]) -> dict[int, int]:
        """Map comment id -> cached vote count."""
        if not comment_ids:
            return {}
        rows = await self.session.aexecute(self._get_counters, [comment_ids])
        return {row.comment_id: row.vote_count or 0 for row in rows}
