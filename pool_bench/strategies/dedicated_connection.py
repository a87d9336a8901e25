"""
Dedicated connection strategy: check out one connection and hold it for the loop.

Removes per-row pool checkout overhead while keeping per-row autocommit, so the
difference against ``pool_exec`` isolates the cost of acquisition.
"""

from __future__ import annotations

from pool_bench.infrastructure.db_factory import DatabasePool
from pool_bench.strategies.abstract import AbstractInsertStrategy


class DedicatedConnectionStrategy(AbstractInsertStrategy):
    """
    Execute every INSERT on a single connection checked out once.

    The connection is returned to the pool when the loop exits, on success or
    failure alike.
    """

    name: str = "dedicated_connection"
    description: str = "One pool connection held for the whole loop; execute() per row."
    tag: str = "Conn"

    def _insert_rows(self, pool: DatabasePool, row_count: int) -> int:
        submitted = 0
        with pool.connection() as conn:
            for index, params in self.rows(row_count):
                try:
                    conn.execute(self.statement, params)
                except Exception as exc:
                    raise self.row_failed(index, exc) from exc
                submitted += 1
        return submitted


__all__ = ["DedicatedConnectionStrategy"]
