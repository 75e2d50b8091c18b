"""Pydantic schemas for course summaries."""

from pydantic import BaseModel

from .models import Course


UNKNOWN_COURSE_LABEL = "Unknown"


class CourseSummaryResponse(BaseModel):
    """Course shown next to a question."""

    id: int
    code: str
    name: str
    university_id: int

    @classmethod
    def placeholder(cls, course_id: int) -> "CourseSummaryResponse":
        """Stand-in for a course reference that no longer resolves."""
        return cls(
            id=course_id,
            code=UNKNOWN_COURSE_LABEL,
            name=UNKNOWN_COURSE_LABEL,
            university_id=0,
        )

    @classmethod
    def from_course(cls, course: Course) -> "CourseSummaryResponse":
        """Create response from a stored course."""
        return cls(
            id=course.course_id,
            code=course.code,
            name=course.name,
            university_id=course.university_id,
        )
