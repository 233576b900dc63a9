# ============================================================================
# POSTGRESQL CONNECTION INFRASTRUCTURE
# ============================================================================
# STATUS: Infrastructure - PostgreSQL connection handling
# PURPOSE: Pooled access to the disposable database with typed failures
# CREATED: 18 OCT 2026
# ============================================================================
"""
PostgreSQL Connection Infrastructure

Provides database connectivity for the generation pipeline:
- Explicit connection parameters (no ambient environment lookup)
- A small psycopg_pool.ConnectionPool opened for the duration of one run
- Context managers for connections and transactions
- query helpers that raise DatabaseError instead of psycopg.Error

Usage:
    params = ConnectionParams(host="localhost", port=45432, dbname="setup",
                              user="setup", password="s3cr3t")
    with PostgreSQLRepository(params) as repo:
        with repo.transaction() as conn:
            conn.execute(script)
        rows = repo.fetch_all("SELECT 1 AS one")
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional
from urllib.parse import quote

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from core.config.defaults import DatabaseDefaults
from core.errors import DatabaseError

logger = logging.getLogger(__name__)


# ============================================================================
# CONNECTION PARAMETERS
# ============================================================================

@dataclass(frozen=True)
class ConnectionParams:
    """Where and how to reach the disposable database."""
    host: str
    port: int
    dbname: str
    user: str
    password: str
    connect_timeout: int = 5

    @classmethod
    def from_defaults(cls, database: DatabaseDefaults, port: int) -> "ConnectionParams":
        """Build from database defaults and the container's host port."""
        return cls(
            host=database.host,
            port=port,
            dbname=database.database,
            user=database.user,
            password=database.password,
            connect_timeout=database.connect_timeout,
        )

    @property
    def conninfo(self) -> str:
        """libpq key/value connection string."""
        return make_conninfo(
            host=self.host,
            port=self.port,
            dbname=self.dbname,
            user=self.user,
            password=self.password,
            connect_timeout=self.connect_timeout,
        )

    @property
    def url(self) -> str:
        """postgresql:// URL for tools that expect DATABASE_URL."""
        return (
            f"postgresql://{quote(self.user, safe='')}:{quote(self.password, safe='')}"
            f"@{self.host}:{self.port}/{quote(self.dbname, safe='')}"
        )

    def libpq_env(self) -> Dict[str, str]:
        """Environment variables pointing libpq-based tools at this database."""
        return {
            "PGHOST": self.host,
            "PGPORT": str(self.port),
            "PGDATABASE": self.dbname,
            "PGUSER": self.user,
            "PGPASSWORD": self.password,
            "DATABASE_URL": self.url,
        }

    def __str__(self) -> str:
        # Password masked
        return f"{self.user}@{self.host}:{self.port}/{self.dbname}"


def check_connection(params: ConnectionParams) -> None:
    """
    Open and immediately close one connection.

    Raises:
        psycopg.OperationalError: Server not reachable or not accepting
    """
    conn = psycopg.connect(params.conninfo)
    conn.close()


# ============================================================================
# POSTGRESQL REPOSITORY
# ============================================================================

class PostgreSQLRepository:
    """
    Repository for the disposable database.

    The pool is opened explicitly (or via ``with``) and closed when the run
    is done. Pool connections run in autocommit mode, so ``transaction()``
    issues an explicit BEGIN and COMMIT/ROLLBACK.
    """

    def __init__(
        self,
        params: ConnectionParams,
        min_size: int = 1,
        max_size: int = 1,
        open_timeout: float = 30.0,
    ):
        """
        Initialize PostgreSQL repository.

        Args:
            params: Connection parameters
            min_size: Minimum pooled connections
            max_size: Maximum pooled connections
            open_timeout: Seconds to wait for the first pooled connection
        """
        self.params = params
        self.min_size = min_size
        self.max_size = max_size
        self.open_timeout = open_timeout
        self._pool: Optional[ConnectionPool] = None

    # ------------------------------------------------------------------
    # POOL LIFECYCLE
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Open the connection pool, waiting for the first connection."""
        if self._pool is not None:
            return

        logger.debug(f"Opening connection pool for {self.params}")
        pool = ConnectionPool(
            conninfo=self.params.conninfo,
            min_size=self.min_size,
            max_size=self.max_size,
            kwargs={"autocommit": True, "row_factory": dict_row},
            open=False,
            name="tsooq-gen",
        )
        with self._error_context("pool open"):
            try:
                pool.open(wait=True, timeout=self.open_timeout)
            except BaseException:
                pool.close()
                raise
        self._pool = pool
        logger.debug(f"Connection pool opened (min={self.min_size}, max={self.max_size})")

    def close(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            self._pool.close()
            self._pool = None
            logger.debug("Connection pool closed")

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def __enter__(self) -> "PostgreSQLRepository":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # CONNECTIONS
    # ------------------------------------------------------------------

    @contextmanager
    def _error_context(self, operation: str) -> Iterator[None]:
        """Convert psycopg errors into DatabaseError with context."""
        try:
            yield
        except psycopg.Error as e:
            error_msg = f"{operation} failed: {e}"
            logger.error(error_msg)
            raise DatabaseError(error_msg, operation=operation) from e

    @contextmanager
    def connection(self) -> Iterator[psycopg.Connection]:
        """
        Check one connection out of the pool.

        The connection is returned to the pool on every exit path.
        """
        if self._pool is None:
            raise DatabaseError("Connection pool is not open", operation="connection")
        with self._pool.connection() as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Iterator[psycopg.Connection]:
        """
        Run a block inside BEGIN ... COMMIT on a single connection.

        Any exception raised in the block triggers ROLLBACK before it
        propagates; the connection is released afterwards.
        """
        with self.connection() as conn:
            with conn.transaction():
                yield conn

    # ------------------------------------------------------------------
    # QUERIES
    # ------------------------------------------------------------------

    def execute_script(self, script: str) -> None:
        """
        Execute a multi-statement script as one transaction.

        No parameters are passed, so the whole text goes to the server as a
        single batch.

        Raises:
            DatabaseError: Any statement failed (transaction rolled back)
        """
        with self._error_context("script execution"):
            with self.transaction() as conn:
                conn.execute(script)

    def fetch_all(self, query: str, params: Optional[tuple] = None) -> List[Dict[str, Any]]:
        """Execute query and fetch all rows as dicts."""
        with self._error_context("query"):
            with self.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, params)
                    return cur.fetchall()


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ConnectionParams",
    "PostgreSQLRepository",
    "check_connection",
]
