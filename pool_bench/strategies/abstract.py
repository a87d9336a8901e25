"""
Abstract strategy interfaces and result contracts for the pool insert benchmark.

Concrete strategies (pool query, dedicated connection, pool exec, transaction)
implement the InsertStrategy protocol and return a StrategyResult TypedDict so
the runner and reporter can treat them uniformly.
"""

from __future__ import annotations

import abc
import time
from typing import Iterator, Optional, Protocol, Tuple, TypedDict, runtime_checkable

from psycopg import sql

from pool_bench.domain.models import SyntheticUser
from pool_bench.errors import StrategyExecutionError
from pool_bench.infrastructure.db_factory import DatabasePool

DEFAULT_TABLE = "users"


class StrategyResult(TypedDict, total=False):
    """
    Metrics contract returned by strategies.

    ``strategy``, ``rows`` and ``duration_seconds`` are always set by
    strategies; the runner adds profiler measurements.
    """

    strategy: str
    rows: int
    duration_seconds: float
    throughput_rows_per_sec: float
    peak_rss_bytes: Optional[int]
    cpu_percent: Optional[float]
    notes: Optional[str]


@runtime_checkable
class InsertStrategy(Protocol):
    """
    Common interface all insertion strategies implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of the acquisition pattern.
    """

    name: str
    description: str

    def execute(self, pool: DatabasePool, row_count: int) -> StrategyResult:
        """
        Insert ``row_count`` synthetic rows through ``pool`` and return metrics.

        Raises
        ------
        StrategyExecutionError
            On the first failing acquisition or statement.
        """
        ...


def build_insert_statement(table: str = DEFAULT_TABLE) -> sql.Composed:
    """``INSERT INTO <table> (name, email) VALUES (%s, %s)`` with the table safely quoted."""
    return sql.SQL("INSERT INTO {} (name, email) VALUES (%s, %s)").format(
        sql.Identifier(*table.split("."))
    )


class AbstractInsertStrategy(abc.ABC):
    """
    Template for class-based strategies.

    Subclasses set ``name``, ``description`` and ``tag`` and implement
    ``_insert_rows``; timing and error wrapping live here so every strategy is
    measured the same way, acquisition overhead included.
    """

    name: str
    description: str
    tag: str

    def __init__(self, table: str = DEFAULT_TABLE) -> None:
        self.table = table
        self.statement = build_insert_statement(table)

    def rows(self, row_count: int) -> Iterator[Tuple[int, Tuple[str, str]]]:
        """Yield ``(index, (name, email))`` for this strategy's tag."""
        for index in range(row_count):
            yield index, SyntheticUser.for_index(self.tag, index).as_params()

    def row_failed(self, index: int, exc: BaseException) -> StrategyExecutionError:
        return StrategyExecutionError(self.name, f"insert of row {index} failed", index, exc)

    def execute(self, pool: DatabasePool, row_count: int) -> StrategyResult:
        start = time.perf_counter()
        try:
            inserted = self._insert_rows(pool, row_count)
        except StrategyExecutionError:
            raise
        except Exception as exc:
            # Acquisition failures outside the row loop (e.g. checkout timeout).
            raise StrategyExecutionError(self.name, "connection acquisition failed", 0, exc) from exc
        duration = time.perf_counter() - start

        return StrategyResult(
            strategy=self.name,
            rows=inserted,
            duration_seconds=duration,
            throughput_rows_per_sec=inserted / duration if duration > 0 else 0.0,
            notes=self.description,
        )

    @abc.abstractmethod
    def _insert_rows(self, pool: DatabasePool, row_count: int) -> int:  # pragma: no cover
        """Insert the rows and return how many were submitted."""
        raise NotImplementedError


__all__ = [
    "DEFAULT_TABLE",
    "AbstractInsertStrategy",
    "InsertStrategy",
    "StrategyResult",
    "build_insert_statement",
]
