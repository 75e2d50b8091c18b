"""Threaded answers (comments).

Provides:
- Replies forming a forest per post (parent/child)
- Reply-tree assembly with accepted-answer-first ordering
- Single accepted answer per post

Note: Router and service are not exported here to avoid circular imports.
Import directly from src.comments.router / src.comments.service when needed.
"""

from .models import COMMENTS_TABLES_CQL, Comment


__all__ = ["COMMENTS_TABLES_CQL", "Comment"]
