"""Read-only course lookups."""

from typing import TYPE_CHECKING

from .models import Course


if TYPE_CHECKING:
    from cassandra.cluster import Session


class CourseDirectory:
    """Looks up course summaries by id, and course ids by university."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._get_courses = self.session.prepare(f"""
            SELECT course_id, university_id, code, name
            FROM {self.keyspace}.courses
            WHERE course_id IN ?
        """)

        # Served by courses_university_idx
        self._get_course_ids_by_university = self.session.prepare(f"""
            SELECT course_id FROM {self.keyspace}.courses
            WHERE university_id = ?
        """)

    async def get_courses(self, course_ids: list[int]) -> dict[int, Course]:
        """Map course id -> Course for the ids that exist."""
        unique_ids = sorted(set(course_ids))
        if not unique_ids:
            return {}

        rows = await self.session.aexecute(self._get_courses, [unique_ids])
        courses = [Course.from_row(row) for row in rows]
        return {course.course_id: course for course in courses}

    async def get_course(self, course_id: int) -> Course | None:
        """Get one course, or None."""
        courses = await self.get_courses([course_id])
        return courses.get(course_id)

    async def list_course_ids(self, university_id: int) -> list[int]:
        """Ids of every course offered by a university."""
        rows = await self.session.aexecute(
            self._get_course_ids_by_university, [university_id]
        )
        return sorted(row.course_id for row in rows)
