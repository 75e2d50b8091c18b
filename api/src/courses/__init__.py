"""Course directory (read-only)."""

from .models import COURSES_TABLES_CQL, Course
from .service import CourseDirectory


__all__ = ["COURSES_TABLES_CQL", "Course", "CourseDirectory"]
