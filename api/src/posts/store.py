"""Cassandra persistence for posts and their counters."""

from typing import TYPE_CHECKING

from .models import Post, PostRef


if TYPE_CHECKING:
    from cassandra.cluster import Session


class PostStore:
    """Reads and writes ``posts``, ``posts_by_course`` and ``post_counters``."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._insert_post = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.posts
            (post_id, course_id, author_id, title, content, is_answered, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_post_by_course = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.posts_by_course
            (course_id, created_at, post_id)
            VALUES (?, ?, ?)
        """)

        self._get_post = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.posts WHERE post_id = ?
        """)

        self._get_posts = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.posts WHERE post_id IN ?
        """)

        self._list_refs = self.session.prepare(f"""
            SELECT post_id, created_at FROM {self.keyspace}.posts
        """)

        self._list_refs_by_course = self.session.prepare(f"""
            SELECT post_id, created_at FROM {self.keyspace}.posts_by_course
            WHERE course_id IN ?
        """)

        self._mark_answered = self.session.prepare(f"""
            UPDATE {self.keyspace}.posts
            SET is_answered = true
            WHERE post_id = ?
        """)

        # Counters
        self._get_counters = self.session.prepare(f"""
            SELECT post_id, vote_count, comment_count
            FROM {self.keyspace}.post_counters
            WHERE post_id IN ?
        """)

        self._incr_comment_count = self.session.prepare(f"""
            UPDATE {self.keyspace}.post_counters
            SET comment_count = comment_count + ?
            WHERE post_id = ?
        """)

    async def insert_post(self, post: Post) -> None:
        """Dual-write a new post to the main and by-course tables."""
        await self.session.aexecute(
            self._insert_post,
            [
                post.post_id,
                post.course_id,
                post.author_id,
                post.title,
                post.content,
                post.is_answered,
                post.created_at,
            ],
        )
        await self.session.aexecute(
            self._insert_post_by_course,
            [post.course_id, post.created_at, post.post_id],
        )

    async def get_post(self, post_id: int) -> Post | None:
        """Get a post with its counters, or None."""
        result = await self.session.aexecute(self._get_post, [post_id])
        row = result.one()
        if not row:
            return None

        counters = await self._load_counters([post_id])
        return Post.from_row(row, counters.get(post_id))

    async def list_post_refs(
        self, course_ids: list[int] | None, with_vote_counts: bool = False
    ) -> list[PostRef]:
        """Every post of the given courses (of all courses when None), unordered.

        Vote counts are only loaded when ``with_vote_counts`` is set.
        """
        if course_ids is None:
            rows = await self.session.aexecute(self._list_refs)
        elif not course_ids:
            return []
        else:
            rows = await self.session.aexecute(
                self._list_refs_by_course, [sorted(set(course_ids))]
            )
        refs = [PostRef.from_row(row) for row in rows]

        if with_vote_counts and refs:
            counters = await self._load_counters([ref.post_id for ref in refs])
            for ref in refs:
                row = counters.get(ref.post_id)
                ref.vote_count = (row.vote_count or 0) if row else 0

        return refs

    async def get_posts(self, post_ids: list[int]) -> list[Post]:
        """Posts with their counters, in no particular order (missing ids skipped)."""
        if not post_ids:
            return []

        rows = list(await self.session.aexecute(self._get_posts, [post_ids]))
        counters = await self._load_counters([row.post_id for row in rows])
        return [Post.from_row(row, counters.get(row.post_id)) for row in rows]

    async def increment_comment_count(self, post_id: int, delta: int = 1) -> None:
        """Apply a delta to the post's cached comment count."""
        await self.session.aexecute(self._incr_comment_count, [delta, post_id])

    async def mark_answered(self, post_id: int) -> None:
        """Flag a post as answered."""
        await self.session.aexecute(self._mark_answered, [post_id])

    async def _load_counters(self, post_ids: list[int]) -> dict:
        """Map post id -> counters row."""
        if not post_ids:
            return {}
        rows = await self.session.aexecute(self._get_counters, [post_ids])
        return {row.post_id: row for row in rows}
