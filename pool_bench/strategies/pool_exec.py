"""
Pool exec strategy: one implicit pool checkout per row, exec-style call.
"""

from __future__ import annotations

from pool_bench.infrastructure.db_factory import DatabasePool
from pool_bench.strategies.abstract import AbstractInsertStrategy


class PoolExecStrategy(AbstractInsertStrategy):
    """Insert each row with ``DatabasePool.execute``; no cursor iteration at all."""

    name: str = "pool_exec"
    description: str = "Implicit pool checkout per row via execute()."
    tag: str = "Exec"

    def _insert_rows(self, pool: DatabasePool, row_count: int) -> int:
        submitted = 0
        for index, params in self.rows(row_count):
            try:
                pool.execute(self.statement, params)
            except Exception as exc:
                raise self.row_failed(index, exc) from exc
            submitted += 1
        return submitted


__all__ = ["PoolExecStrategy"]
