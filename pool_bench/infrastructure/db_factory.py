"""
Database pool factory for the pool insert benchmark.

Builds the libpq connection string from resolved settings, opens a bounded
psycopg ConnectionPool, verifies it with a time-bounded liveness probe, and wraps
it in a DatabasePool handle exposing the acquisition patterns the insertion
strategies compare:

- ``query`` / ``execute``: implicit checkout, one statement, connection returned
- ``connection``: one connection held for the duration of a ``with`` block
- ``begin``: one connection held for an explicit transaction

Pool connections run in autocommit mode, so every implicit call commits on its
own; only ``begin`` switches a connection to transactional mode, and the pool's
reset hook switches it back when the connection is returned.

Provisioning retries transient failures with tenacity (disabled by default).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional, Sequence

import psycopg
from psycopg import Connection
from psycopg.abc import Query
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool, PoolTimeout
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from pool_bench.config import Settings
from pool_bench.errors import ProvisioningError
from pool_bench.utils.logging import get_logger

log = get_logger(__name__)

APPLICATION_NAME = "pool-bench"
PROBE_TIMEOUT_SECONDS = 10.0
MAX_CONNECTION_LIFETIME_SECONDS = 5 * 60.0

Params = Sequence[Any]


def build_conninfo(settings: Settings, connect_timeout: float = PROBE_TIMEOUT_SECONDS) -> str:
    """Compose a libpq key/value connection string from settings."""
    return make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        user=settings.db_user,
        password=settings.db_password,
        dbname=settings.db_name,
        application_name=APPLICATION_NAME,
        connect_timeout=max(int(connect_timeout), 1),
    )


def _configure_connection(conn: Connection) -> None:
    conn.autocommit = True


def _reset_connection(conn: Connection) -> None:
    if not conn.autocommit:
        conn.autocommit = True


class Transaction:
    """
    A single explicit transaction on a connection checked out from the pool.

    Ends with exactly one of ``commit`` or ``rollback``; either way the
    connection goes back to the pool, even if the COMMIT/ROLLBACK itself fails.
    """

    def __init__(self, pool: ConnectionPool, conn: Connection) -> None:
        self._pool = pool
        self._conn: Optional[Connection] = conn

    @property
    def active(self) -> bool:
        return self._conn is not None

    def _connection(self) -> Connection:
        if self._conn is None:
            raise psycopg.InterfaceError("transaction already finished")
        return self._conn

    def execute(self, statement: Query, params: Optional[Params] = None) -> int:
        return self._connection().execute(statement, params).rowcount

    def commit(self) -> None:
        conn = self._connection()
        try:
            conn.commit()
        finally:
            self._release()

    def rollback(self) -> None:
        conn = self._connection()
        try:
            conn.rollback()
        finally:
            self._release()

    def _release(self) -> None:
        if self._conn is not None:
            self._pool.putconn(self._conn)
            self._conn = None


class DatabasePool:
    """
    Handle over a psycopg ConnectionPool.

    Safe for concurrent use; the pool bounds the number of open connections.
    Use as a context manager to guarantee the pool is closed.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    @property
    def name(self) -> str:
        return self._pool.name

    @property
    def max_size(self) -> int:
        return self._pool.max_size

    @property
    def closed(self) -> bool:
        return self._pool.closed

    def query(self, statement: Query, params: Optional[Params] = None) -> None:
        """Run a statement on an implicitly checked-out connection and discard any rows."""
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(statement, params)
                if cur.description is not None:
                    for _ in cur:
                        pass

    def execute(self, statement: Query, params: Optional[Params] = None) -> int:
        """Run a statement on an implicitly checked-out connection; return the row count."""
        with self._pool.connection() as conn:
            return conn.execute(statement, params).rowcount

    @contextmanager
    def connection(self, timeout: Optional[float] = None) -> Generator[Connection, None, None]:
        """Hold one connection for the duration of the block."""
        with self._pool.connection(timeout=timeout) as conn:
            yield conn

    def begin(self) -> Transaction:
        """Check out a connection and start an explicit transaction on it."""
        conn = self._pool.getconn()
        try:
            conn.autocommit = False
        except BaseException:
            self._pool.putconn(conn)
            raise
        return Transaction(self._pool, conn)

    def ping(self, timeout: float = PROBE_TIMEOUT_SECONDS) -> None:
        """Round-trip ``SELECT 1``; raises PoolTimeout or psycopg.Error on failure."""
        with self._pool.connection(timeout=timeout) as conn:
            conn.execute("SELECT 1")

    def stats(self) -> Dict[str, int]:
        return self._pool.get_stats()

    def close(self) -> None:
        if not self._pool.closed:
            self._pool.close()
            log.info("Connection pool closed", extra={"pool": self.name})

    def __enter__(self) -> "DatabasePool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def _open_pool(settings: Settings, probe_timeout: float) -> DatabasePool:
    pool = ConnectionPool(
        conninfo=build_conninfo(settings, connect_timeout=probe_timeout),
        min_size=settings.db_pool_size,
        max_size=settings.db_pool_size,
        max_lifetime=MAX_CONNECTION_LIFETIME_SECONDS,
        timeout=probe_timeout,
        configure=_configure_connection,
        reset=_reset_connection,
        name=APPLICATION_NAME,
        open=False,
    )
    handle = DatabasePool(pool)
    try:
        pool.open(wait=True, timeout=probe_timeout)
        handle.ping(timeout=probe_timeout)
    except BaseException:
        pool.close()
        raise
    return handle


def provision_pool(
    settings: Settings, probe_timeout: float = PROBE_TIMEOUT_SECONDS
) -> DatabasePool:
    """
    Open and verify a connection pool sized from ``settings``.

    Parameters
    ----------
    settings : Settings
        Resolved configuration.
    probe_timeout : float
        Upper bound in seconds for filling the pool and answering ``SELECT 1``.

    Returns
    -------
    DatabasePool
        A pool ready for up to ``settings.db_pool_size`` concurrent operations.

    Raises
    ------
    ProvisioningError
        If the pool cannot be opened or the probe fails or times out.
    """
    target = f"{settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    retrying = Retrying(
        stop=stop_after_attempt(settings.db_connect_attempts),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((PoolTimeout, psycopg.OperationalError)),
        reraise=True,
    )
    try:
        for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    log.warning(
                        f"Retrying pool provisioning for {target}",
                        extra={"attempt": attempt.retry_state.attempt_number},
                    )
                pool = _open_pool(settings, probe_timeout)
    except PoolTimeout as exc:
        raise ProvisioningError(
            f"database ping failed: {target} not reachable within {probe_timeout:g}s"
        ) from exc
    except psycopg.Error as exc:
        raise ProvisioningError(f"database ping failed for {target}: {exc}") from exc

    log.info(
        "Database connected successfully",
        extra={"target": target, "pool_size": settings.db_pool_size},
    )
    return pool


__all__ = [
    "DatabasePool",
    "Transaction",
    "build_conninfo",
    "provision_pool",
]
