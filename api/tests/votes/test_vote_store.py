"""Tests for VoteStore against a mocked Cassandra session."""

from unittest.mock import AsyncMock, Mock

import pytest
from cassandra.cluster import Session

from src.votes.models import SubjectKind
from src.votes.store import VoteStore


@pytest.fixture
def mock_session():
    """Mock Cassandra session."""
    session = Mock(spec=Session)
    session.prepare = Mock(side_effect=lambda cql: Mock(name="prepared", cql=cql))
    session.aexecute = AsyncMock(return_value=Mock())
    return session


@pytest.fixture
def store(mock_session) -> VoteStore:
    return VoteStore(session=mock_session, keyspace="test_keyspace")


def result_with(row):
    result = Mock()
    result.one.return_value = row
    return result


def lwt_result(applied: bool):
    """Result set of a conditional statement."""
    return Mock(was_applied=applied)


class TestPreparedStatements:
    def test_vote_rows_are_written_conditionally(self, store: VoteStore) -> None:
        for kind in SubjectKind:
            assert "IF NOT EXISTS" in store._insert_vote[kind].cql
            assert "IF value = ?" in store._delete_vote[kind].cql
            assert "IF value = ?" in store._update_vote[kind].cql

    def test_statements_target_kind_tables(self, store: VoteStore) -> None:
        assert "test_keyspace.post_votes" in store._get_vote[SubjectKind.POST].cql
        assert (
            "test_keyspace.comment_counters"
            in store._incr_count[SubjectKind.COMMENT].cql
        )


class TestConditionalWrites:
    @pytest.mark.asyncio
    async def test_insert_reports_applied(self, store, mock_session) -> None:
        mock_session.aexecute.return_value = lwt_result(True)

        assert await store.insert_vote(SubjectKind.POST, 1, "bob", 1) is True
        mock_session.aexecute.assert_awaited_once_with(
            store._insert_vote[SubjectKind.POST], [1, "bob", 1]
        )

    @pytest.mark.asyncio
    async def test_insert_reports_lost_race(self, store, mock_session) -> None:
        mock_session.aexecute.return_value = lwt_result(False)

        assert await store.insert_vote(SubjectKind.COMMENT, 5, "bob", -1) is False

    @pytest.mark.asyncio
    async def test_update_binds_expected_value_last(self, store, mock_session):
        mock_session.aexecute.return_value = lwt_result(True)

        await store.update_vote(SubjectKind.POST, 1, "bob", -1, 1)

        mock_session.aexecute.assert_awaited_once_with(
            store._update_vote[SubjectKind.POST], [-1, 1, "bob", 1]
        )

    @pytest.mark.asyncio
    async def test_delete_with_empty_result_is_not_applied(
        self, store, mock_session
    ) -> None:
        mock_session.aexecute.return_value = result_with(None)

        assert await store.delete_vote(SubjectKind.POST, 1, "bob", 1) is False


class TestReads:
    @pytest.mark.asyncio
    async def test_vote_count_defaults_to_zero(self, store, mock_session) -> None:
        mock_session.aexecute.return_value = result_with(None)

        assert await store.get_vote_count(SubjectKind.POST, 1) == 0

    @pytest.mark.asyncio
    async def test_get_vote_returns_value(self, store, mock_session) -> None:
        mock_session.aexecute.return_value = result_with(Mock(value=-1))

        assert await store.get_vote(SubjectKind.COMMENT, 3, "bob") == -1

    @pytest.mark.asyncio
    async def test_user_votes_for_no_subjects_skips_query(
        self, store, mock_session
    ) -> None:
        assert await store.get_user_votes(SubjectKind.POST, [], "bob") == {}
        mock_session.aexecute.assert_not_called()

    @pytest.mark.asyncio
    async def test_user_votes_map_subject_to_value(self, store, mock_session):
        mock_session.aexecute.return_value = [
            Mock(comment_id=3, user_id="bob", value=1),
            Mock(comment_id=4, user_id="bob", value=-1),
        ]

        votes = await store.get_user_votes(SubjectKind.COMMENT, [3, 4, 5], "bob")

        assert votes == {3: 1, 4: -1}

    @pytest.mark.asyncio
    async def test_find_comment_post(self, store, mock_session) -> None:
        mock_session.aexecute.return_value = result_with(Mock(post_id=9))

        assert await store.find_subject_post(SubjectKind.COMMENT, 3) == 9
        mock_session.aexecute.assert_awaited_once_with(store._find_comment_post, [3])

    @pytest.mark.asyncio
    async def test_find_missing_post(self, store, mock_session) -> None:
        mock_session.aexecute.return_value = result_with(None)

        assert await store.find_subject_post(SubjectKind.POST, 3) is None
