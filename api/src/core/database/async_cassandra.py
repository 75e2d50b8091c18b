"""Async Cassandra database connection using cassandra-asyncio-driver.

Provides:
- Async connection pool management
- Session with aexecute() for non-blocking queries
- Keyspace and table initialization (async)

The cassandra-asyncio-driver extends the standard cassandra-driver
with `session.aexecute()` method for async/await support.
"""

import structlog
from cassandra.auth import PlainTextAuthProvider
from cassandra.policies import DCAwareRoundRobinPolicy, TokenAwarePolicy
from cassandra_asyncio.cluster import Cluster

from src.comments.models import COMMENTS_TABLES_CQL
from src.config.settings import get_settings
from src.core.sequences import SEQUENCES_TABLES_CQL
from src.courses.models import COURSES_TABLES_CQL
from src.posts.models import POSTS_TABLES_CQL
from src.profiles.models import PROFILES_TABLES_CQL
from src.votes.models import VOTES_TABLES_CQL


logger = structlog.get_logger(__name__)

# Table groups created on startup, in order
SCHEMA: list[tuple[str, list[str]]] = [
    ("sequences", SEQUENCES_TABLES_CQL),
    ("courses", COURSES_TABLES_CQL),
    ("profiles", PROFILES_TABLES_CQL),
    ("posts", POSTS_TABLES_CQL),
    ("comments", COMMENTS_TABLES_CQL),
    ("votes", VOTES_TABLES_CQL),
]


class AsyncCassandraConnection:
    """Async Cassandra connection manager.

    Manages cluster connection and session lifecycle with async support.
    Uses cassandra-asyncio-driver for non-blocking execute via aexecute().
    """

    _cluster: Cluster | None = None
    _session = None  # Session type from cassandra_asyncio

    @classmethod
    def connect(cls):
        """Establish connection to Cassandra cluster.

        Note: Connection is synchronous, but execute calls can be async.

        Returns:
            Active Cassandra session with aexecute() support

        Raises:
            ConnectionError: If connection fails
        """
        if cls._session is not None:
            return cls._session

        settings = get_settings()

        auth_provider = None
        if settings.cassandra_username and settings.cassandra_password:
            auth_provider = PlainTextAuthProvider(
                username=settings.cassandra_username,
                password=settings.cassandra_password,
            )

        cls._cluster = Cluster(
            contact_points=settings.cassandra_hosts,
            port=settings.cassandra_port,
            auth_provider=auth_provider,
            protocol_version=settings.cassandra_protocol_version,
            load_balancing_policy=TokenAwarePolicy(DCAwareRoundRobinPolicy()),
            connect_timeout=settings.cassandra_connect_timeout,
        )

        try:
            cls._session = cls._cluster.connect()
            logger.info(
                "async_cassandra_connected",
                hosts=settings.cassandra_hosts,
                port=settings.cassandra_port,
                protocol_version=settings.cassandra_protocol_version,
            )
        except Exception as e:
            logger.error("async_cassandra_connection_failed", error=str(e))
            raise ConnectionError(f"Failed to connect to Cassandra: {e}") from e

        return cls._session

    @classmethod
    def disconnect(cls) -> None:
        """Close connection to Cassandra."""
        if cls._session is not None:
            cls._session.shutdown()
            cls._session = None
            logger.info("async_cassandra_session_closed")

        if cls._cluster is not None:
            cls._cluster.shutdown()
            cls._cluster = None
            logger.info("async_cassandra_cluster_closed")


async def init_async_keyspace(session, keyspace: str) -> None:
    """Create keyspace if not exists (async).

    Args:
        session: Active Cassandra session with aexecute()
        keyspace: Keyspace name
    """
    settings = get_settings()

    if settings.is_production:
        replication = """
            'class': 'NetworkTopologyStrategy',
            'datacenter1': 3
        """
    else:
        replication = """
            'class': 'SimpleStrategy',
            'replication_factor': 1
        """

    cql = f"""
        CREATE KEYSPACE IF NOT EXISTS {keyspace}
        WITH replication = {{{replication}}}
        AND durable_writes = true
    """

    await session.aexecute(cql)
    logger.info("async_keyspace_created", keyspace=keyspace)


async def init_async_tables(
    session, keyspace: str, group: str, tables_cql: list[str]
) -> None:
    """Create one module's tables (async)."""
    for cql_template in tables_cql:
        cql = cql_template.format(keyspace=keyspace)
        await session.aexecute(cql)
    logger.info("async_tables_created", keyspace=keyspace, group=group)


async def init_async_cassandra():
    """Initialize async Cassandra connection and schema.

    Creates keyspace and tables if they don't exist using async operations.

    Returns:
        Configured Cassandra session with aexecute() support
    """
    settings = get_settings()

    # Connect to cluster (sync connection, but session supports aexecute)
    session = AsyncCassandraConnection.connect()

    await init_async_keyspace(session, settings.cassandra_keyspace)
    session.set_keyspace(settings.cassandra_keyspace)

    for group, tables_cql in SCHEMA:
        await init_async_tables(session, settings.cassandra_keyspace, group, tables_cql)

    logger.info(
        "async_cassandra_initialized",
        keyspace=settings.cassandra_keyspace,
    )

    return session


async def shutdown_async_cassandra() -> None:
    """Shutdown async Cassandra connection."""
    AsyncCassandraConnection.disconnect()
