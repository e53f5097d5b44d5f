"""Pooled Message DB client.

Message DB is the PostgreSQL-based message store holding one event stream
per projector. All store functions borrow a connection from the client's
pool for the duration of one statement and its commit.
"""

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from psycopg import Connection
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from projector_feed.config import MessageDBConfig

logger = structlog.get_logger(__name__)


def to_connection_string(config: MessageDBConfig) -> str:
    """Build a libpq connection string from Message DB configuration."""
    return " ".join(
        [
            f"host={config.host}",
            f"port={config.port}",
            f"dbname={config.database}",
            f"user={config.user}",
            f"password={config.password}",
        ]
    )


class MessageDBClient:
    """Connection pool wrapper for Message DB.

    Rows are returned as dicts. Use the client as a context manager to open
    and close its pool.

    Example:
        ```python
        with MessageDBClient(load_config().message_db) as client:
            client.health_check()
            messages = read_stream(client, "projector:v0-1")
        ```
    """

    def __init__(self, config: MessageDBConfig, min_size: int = 1, max_size: int = 4) -> None:
        self.config = config
        self.min_size = min_size
        self.max_size = max_size
        self._pool: ConnectionPool | None = None
        self._logger = logger.bind(db_host=config.host, db_name=config.database)

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    def connect(self) -> None:
        """Open the connection pool. Does nothing if it is already open.

        Raises:
            psycopg.OperationalError: If connection cannot be established
        """
        if self._pool is not None:
            self._logger.warning("pool_already_open")
            return
        self._pool = ConnectionPool(
            conninfo=to_connection_string(self.config),
            min_size=self.min_size,
            max_size=self.max_size,
            kwargs={"row_factory": dict_row},
        )
        self._logger.info("pool_opened", min_size=self.min_size, max_size=self.max_size)

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None
            self._logger.info("pool_closed")

    @contextmanager
    def connection(self) -> Iterator[Connection]:
        """Borrow a pooled connection for the duration of a ``with`` block.

        Raises:
            RuntimeError: If the pool has not been opened
        """
        if self._pool is None:
            raise RuntimeError("Message DB client is not connected; call connect() first")
        conn = self._pool.getconn()
        try:
            yield conn
        finally:
            self._pool.putconn(conn)

    def health_check(self) -> bool:
        """Return True if the database answers and Message DB is installed."""
        with self.connection() as conn, conn.cursor() as cur:
            cur.execute(
                "SELECT EXISTS (SELECT 1 FROM pg_proc WHERE proname = 'write_message')"
                " AS installed"
            )
            row = cur.fetchone()
        installed = bool(row and row.get("installed"))
        if not installed:
            self._logger.error("message_db_not_installed")
        return installed

    def __enter__(self) -> "MessageDBClient":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        self.close()
