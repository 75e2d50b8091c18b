"""Questions (posts) tied to courses.

Note: Router and service are not exported here to avoid circular imports.
"""

from .models import POSTS_TABLES_CQL, Post


__all__ = ["POSTS_TABLES_CQL", "Post"]
