"""Database models for the course directory.

Courses are managed by the catalog service; the forum only reads the
summary it shows next to each question.
"""

from dataclasses import dataclass
from typing import Any


COURSE_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.courses (
    course_id INT PRIMARY KEY,
    university_id INT,
    code TEXT,
    name TEXT,
    description TEXT
)
"""

# Courses of one university, for the university feed
COURSES_UNIVERSITY_INDEX_CQL = """
CREATE INDEX IF NOT EXISTS courses_university_idx
ON {keyspace}.courses (university_id)
"""

COURSES_TABLES_CQL = [COURSE_TABLE_CQL, COURSES_UNIVERSITY_INDEX_CQL]


@dataclass
class Course:
    """Course summary."""

    course_id: int
    university_id: int
    code: str
    name: str

    @classmethod
    def from_row(cls, row: Any) -> "Course":
        """Create Course from Cassandra row."""
        return cls(
            course_id=row.course_id,
            university_id=row.university_id or 0,
            code=row.code or "",
            name=row.name or "",
        )
