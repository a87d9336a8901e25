"""
Pool query strategy: one implicit pool checkout per row, query-style call.

Each INSERT goes through ``DatabasePool.query``, which checks out a connection,
executes through a cursor, drains and discards any result set, and returns the
connection. This is the most checkout-heavy pattern and serves as the baseline.
"""

from __future__ import annotations

from pool_bench.infrastructure.db_factory import DatabasePool
from pool_bench.strategies.abstract import AbstractInsertStrategy


class PoolQueryStrategy(AbstractInsertStrategy):
    """
    Insert each row with a query-style call on the pool, ignoring returned rows.

    Rows inserted before a failure stay committed; there is no compensation.
    """

    name: str = "pool_query"
    description: str = "Implicit pool checkout per row via query(); result set discarded."
    tag: str = "Pool"

    def _insert_rows(self, pool: DatabasePool, row_count: int) -> int:
        submitted = 0
        for index, params in self.rows(row_count):
            try:
                pool.query(self.statement, params)
            except Exception as exc:
                raise self.row_failed(index, exc) from exc
            submitted += 1
        return submitted


__all__ = ["PoolQueryStrategy"]
