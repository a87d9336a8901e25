"""
Exception hierarchy for the pool insert benchmark.

Everything raised on purpose by the benchmark derives from BenchmarkError so the
CLI can map failures to a non-zero exit status in one place. Driver exceptions
(psycopg, psycopg_pool) are chained as ``__cause__`` rather than re-typed.
"""

from __future__ import annotations

from typing import Optional


class BenchmarkError(Exception):
    """Base class for benchmark failures."""


class ProvisioningError(BenchmarkError):
    """The pool could not be opened or did not answer the liveness probe in time."""


class StrategyExecutionError(BenchmarkError):
    """
    A strategy failed while inserting rows.

    Attributes
    ----------
    strategy : str
        Name of the strategy that failed.
    rows_submitted : int
        Rows that were successfully submitted before the failing call.
    """

    def __init__(
        self,
        strategy: str,
        message: str,
        rows_submitted: int = 0,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.strategy = strategy
        self.rows_submitted = rows_submitted
        self.cause = cause
        detail = f"{strategy} strategy failed after {rows_submitted} row(s): {message}"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)


class TransactionCommitError(StrategyExecutionError):
    """All rows were executed inside the transaction but COMMIT failed."""


__all__ = [
    "BenchmarkError",
    "ProvisioningError",
    "StrategyExecutionError",
    "TransactionCommitError",
]
