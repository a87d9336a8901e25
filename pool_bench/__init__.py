"""
Pool Insert Benchmark - compares row-insert strategies over a PostgreSQL pool.

Four acquisition/execution patterns are measured against the same
psycopg connection pool, one after another:

- Implicit checkout per row with a query-style call
- One dedicated connection held for the whole loop
- Implicit checkout per row with an exec-style call
- One transaction for the whole loop

The first failing strategy aborts the run.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from pool_bench.config import Settings, get_settings, load_settings
from pool_bench.errors import (
    BenchmarkError,
    ProvisioningError,
    StrategyExecutionError,
    TransactionCommitError,
)
from pool_bench.infrastructure.db_factory import DatabasePool, provision_pool
from pool_bench.orchestrator import RunConfig, available_strategies, run_strategies
from pool_bench.strategies.abstract import (
    AbstractInsertStrategy,
    InsertStrategy,
    StrategyResult,
)
from pool_bench.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    "load_settings",
    # Errors
    "BenchmarkError",
    "ProvisioningError",
    "StrategyExecutionError",
    "TransactionCommitError",
    # Pool
    "DatabasePool",
    "provision_pool",
    # Orchestration
    "RunConfig",
    "available_strategies",
    "run_strategies",
    # Strategy abstractions
    "InsertStrategy",
    "AbstractInsertStrategy",
    "StrategyResult",
    # Logging
    "configure_logging",
    "get_logger",
]
