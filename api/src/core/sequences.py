"""Monotonic integer id allocation backed by Cassandra.

Posts and comments use small integer ids. Cassandra has no auto-increment,
so each named sequence lives in one ``id_sequences`` row that is advanced
with a lightweight transaction (compare-and-set on the last issued value).
"""

from typing import TYPE_CHECKING

import structlog

from src.core.exceptions import SequenceExhaustedError


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)


ID_SEQUENCES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.id_sequences (
    name TEXT PRIMARY KEY,
    value BIGINT
)
"""

SEQUENCES_TABLES_CQL = [ID_SEQUENCES_TABLE_CQL]


class IdAllocator:
    """Hands out strictly increasing ids per sequence name."""

    def __init__(self, session: "Session", keyspace: str, max_attempts: int = 10):
        self.session = session
        self.keyspace = keyspace
        self.max_attempts = max_attempts
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        self._get_value = self.session.prepare(f"""
            SELECT value FROM {self.keyspace}.id_sequences WHERE name = ?
        """)

        self._init_value = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.id_sequences (name, value)
            VALUES (?, 1)
            IF NOT EXISTS
        """)

        self._advance_value = self.session.prepare(f"""
            UPDATE {self.keyspace}.id_sequences
            SET value = ?
            WHERE name = ?
            IF value = ?
        """)

    async def next_id(self, name: str) -> int:
        """Allocate the next id of a sequence (first id is 1).

        Raises:
            SequenceExhaustedError: If every attempt lost the race
        """
        for attempt in range(1, self.max_attempts + 1):
            result = await self.session.aexecute(self._get_value, [name])
            row = result.one()

            if row is None:
                applied = await self.session.aexecute(self._init_value, [name])
                if applied.was_applied:
                    return 1
                continue

            candidate = row.value + 1
            applied = await self.session.aexecute(
                self._advance_value, [candidate, name, row.value]
            )
            if applied.was_applied:
                return candidate

            logger.debug("id_sequence_contention", sequence=name, attempt=attempt)

        logger.error(
            "id_sequence_exhausted", sequence=name, attempts=self.max_attempts
        )
        raise SequenceExhaustedError
