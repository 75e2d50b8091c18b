"""Tests for CourseDirectory against a mocked Cassandra session."""

from unittest.mock import AsyncMock, Mock

import pytest
from cassandra.cluster import Session

from src.courses.service import CourseDirectory


@pytest.fixture
def mock_session():
    session = Mock(spec=Session)
    session.prepare = Mock(side_effect=lambda cql: Mock(name="prepared", cql=cql))
    session.aexecute = AsyncMock(return_value=[])
    return session


@pytest.fixture
def directory(mock_session) -> CourseDirectory:
    return CourseDirectory(session=mock_session, keyspace="test_keyspace")


class TestGetCourses:
    @pytest.mark.asyncio
    async def test_deduplicates_ids(self, directory, mock_session) -> None:
        row = Mock(course_id=101, university_id=7, code="CS101")
        row.name = "Intro to CS"
        mock_session.aexecute.return_value = [row]

        courses = await directory.get_courses([101, 101])

        assert courses[101].code == "CS101"
        mock_session.aexecute.assert_awaited_once_with(directory._get_courses, [[101]])

    @pytest.mark.asyncio
    async def test_no_ids(self, directory, mock_session) -> None:
        assert await directory.get_courses([]) == {}
        mock_session.aexecute.assert_not_awaited()


class TestListCourseIds:
    @pytest.mark.asyncio
    async def test_by_university(self, directory, mock_session) -> None:
        mock_session.aexecute.return_value = [Mock(course_id=102), Mock(course_id=101)]

        assert await directory.list_course_ids(7) == [101, 102]
        mock_session.aexecute.assert_awaited_once_with(
            directory._get_course_ids_by_university, [7]
        )

    def test_lookup_is_served_by_index(self, directory) -> None:
        assert "WHERE university_id = ?" in directory._get_course_ids_by_university.cql
