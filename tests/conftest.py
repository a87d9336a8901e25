"""
Pytest configuration for the pool insert benchmark.

Provides fixtures for:
- An in-memory fake pool with failure injection (unit tests)
- Settings isolated from the developer's environment
- A real provisioned pool and a clean target table (integration tests)
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, List, Optional, Tuple

import psycopg
import pytest
from psycopg_pool import PoolTimeout

from pool_bench.config import Settings, get_settings
from pool_bench.infrastructure.db_factory import DatabasePool, provision_pool

SETTINGS_ENV_VARS = (
    "DB_HOST",
    "DB_PORT",
    "DB_USER",
    "DB_PASS",
    "DB_NAME",
    "DB_POOL_SIZE",
    "DB_CONNECT_ATTEMPTS",
    "BENCHMARK_INSERT_COUNT",
    "BENCHMARK_TABLE",
    "LOG_LEVEL",
    "LOG_JSON",
)

INTEGRATION_TABLE = "bench_users"


class FakeConnection:
    """Connection held through ``FakePool.connection()``; every execute autocommits."""

    def __init__(self, pool: "FakePool") -> None:
        self._pool = pool

    def execute(self, statement: Any, params: Optional[Tuple[str, str]] = None) -> "FakeConnection":
        self._pool.submit("connection", params)
        self._pool.committed.append(params)
        return self


class FakeTransaction:
    def __init__(self, pool: "FakePool") -> None:
        self._pool = pool
        self.pending: List[Optional[Tuple[str, str]]] = []
        self.state = "open"

    @property
    def active(self) -> bool:
        return self.state == "open"

    def execute(self, statement: Any, params: Optional[Tuple[str, str]] = None) -> int:
        self._pool.submit("transaction", params)
        self.pending.append(params)
        return 1

    def commit(self) -> None:
        self._pool.open_connections -= 1
        if self._pool.fail_commit:
            self.state = "failed"
            raise psycopg.OperationalError("injected commit failure")
        self._pool.committed.extend(self.pending)
        self.state = "committed"

    def rollback(self) -> None:
        self._pool.open_connections -= 1
        self.pending.clear()
        self.state = "rolled_back"


class FakePool:
    """
    Stand-in for DatabasePool.

    ``submitted`` records every successful statement, ``committed`` what would
    be visible in the table. ``fail_at`` makes the statement with that index
    (0-based, counted across the pool's lifetime) raise.
    """

    def __init__(
        self,
        fail_at: Optional[int] = None,
        fail_commit: bool = False,
        fail_checkout: bool = False,
        max_size: int = 5,
    ) -> None:
        self.fail_at = fail_at
        self.fail_commit = fail_commit
        self.fail_checkout = fail_checkout
        self.max_size = max_size
        self.submitted: List[Optional[Tuple[str, str]]] = []
        self.committed: List[Optional[Tuple[str, str]]] = []
        self.calls: List[str] = []
        self.transactions: List[FakeTransaction] = []
        self.checkouts = 0
        self.open_connections = 0
        self.closed = False

    def _checkout(self) -> None:
        if self.fail_checkout:
            raise PoolTimeout("couldn't get a connection after 30.00 sec")
        self.checkouts += 1

    def submit(self, kind: str, params: Optional[Tuple[str, str]]) -> None:
        if self.fail_at is not None and len(self.submitted) == self.fail_at:
            raise psycopg.OperationalError(f"injected failure at statement {self.fail_at}")
        self.calls.append(kind)
        self.submitted.append(params)

    def query(self, statement: Any, params: Optional[Tuple[str, str]] = None) -> None:
        self._checkout()
        self.submit("query", params)
        self.committed.append(params)

    def execute(self, statement: Any, params: Optional[Tuple[str, str]] = None) -> int:
        self._checkout()
        self.submit("execute", params)
        self.committed.append(params)
        return 1

    @contextmanager
    def connection(self, timeout: Optional[float] = None) -> Generator[FakeConnection, None, None]:
        self._checkout()
        self.open_connections += 1
        try:
            yield FakeConnection(self)
        finally:
            self.open_connections -= 1

    def begin(self) -> FakeTransaction:
        self._checkout()
        self.open_connections += 1
        tx = FakeTransaction(self)
        self.transactions.append(tx)
        return tx

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakePool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


@pytest.fixture
def fake_pool() -> FakePool:
    return FakePool()


@pytest.fixture
def clean_env(monkeypatch) -> None:
    """Remove benchmark settings from the environment and the settings cache."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=os.getenv("DB_PORT", "5432"),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASS", "postgres"),
        db_name=os.getenv("DB_NAME", "insert_benchmark"),
        db_pool_size=os.getenv("DB_POOL_SIZE", "4"),
        benchmark_table=INTEGRATION_TABLE,
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def db_pool(test_settings: Settings) -> Generator[DatabasePool, None, None]:
    """
    Session-scoped provisioned pool; skips when the database is unreachable.
    """
    try:
        pool = provision_pool(test_settings, probe_timeout=5.0)
    except Exception as exc:
        pytest.skip(f"Database not available for integration tests: {exc}")
    with pool:
        yield pool


@pytest.fixture(scope="session")
def bench_table(db_pool: DatabasePool) -> str:
    """Create the integration table from db/init.sql, pointed at its own name."""
    init_sql = (Path(__file__).parent.parent / "db" / "init.sql").read_text(encoding="utf-8")
    with db_pool.connection() as conn:
        conn.execute(init_sql.replace("public.users", f"public.{INTEGRATION_TABLE}").replace(
            "users_email_idx", f"{INTEGRATION_TABLE}_email_idx"
        ))
    return INTEGRATION_TABLE


@pytest.fixture
def clean_table(db_pool: DatabasePool, bench_table: str) -> Generator[str, None, None]:
    """Truncate the integration table before and after each test."""
    truncate = f"TRUNCATE TABLE public.{bench_table} RESTART IDENTITY"
    db_pool.execute(truncate)
    yield bench_table
    db_pool.execute(truncate)
