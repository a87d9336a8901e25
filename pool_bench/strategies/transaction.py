"""
Transaction strategy: every INSERT inside one explicit transaction.

A row failure rolls the whole batch back, so a failed run leaves the table as it
was before the transaction started. A failed COMMIT is reported separately as
TransactionCommitError.
"""

from __future__ import annotations

from pool_bench.errors import StrategyExecutionError, TransactionCommitError
from pool_bench.infrastructure.db_factory import DatabasePool
from pool_bench.strategies.abstract import AbstractInsertStrategy
from pool_bench.utils.logging import get_logger

log = get_logger(__name__)


class TransactionStrategy(AbstractInsertStrategy):
    """Execute all rows in one transaction and commit once at the end."""

    name: str = "transaction"
    description: str = "Single transaction for the whole loop; one COMMIT at the end."
    tag: str = "Tx"

    def _insert_rows(self, pool: DatabasePool, row_count: int) -> int:
        tx = pool.begin()
        submitted = 0
        try:
            for index, params in self.rows(row_count):
                tx.execute(self.statement, params)
                submitted += 1
        except Exception as exc:
            self._rollback(tx, submitted)
            raise StrategyExecutionError(
                self.name,
                f"insert of row {submitted} failed, transaction rolled back",
                submitted,
                exc,
            ) from exc
        except BaseException:
            # Interrupted mid-loop (e.g. KeyboardInterrupt): roll back and let it propagate.
            self._rollback(tx, submitted)
            raise

        try:
            tx.commit()
        except Exception as exc:
            raise TransactionCommitError(
                self.name, "transaction commit failed", submitted, exc
            ) from exc
        return submitted

    def _rollback(self, tx, submitted: int) -> None:
        try:
            tx.rollback()
        except Exception:
            # The row error is what gets raised; the connection is already back in the pool.
            log.exception(
                "[ROLLBACK FAILED] transaction",
                extra={"strategy": self.name, "rows_submitted": submitted},
            )


__all__ = ["TransactionStrategy"]
