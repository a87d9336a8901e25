"""
Strategies package for the pool insert benchmark.

Re-exports the abstract interfaces and the concrete insertion strategies so
downstream code can import from `pool_bench.strategies` directly.
"""

from pool_bench.strategies.abstract import (
    AbstractInsertStrategy,
    InsertStrategy,
    StrategyResult,
    build_insert_statement,
)
from pool_bench.strategies.dedicated_connection import DedicatedConnectionStrategy
from pool_bench.strategies.pool_exec import PoolExecStrategy
from pool_bench.strategies.pool_query import PoolQueryStrategy
from pool_bench.strategies.transaction import TransactionStrategy

__all__ = [
    # Abstracts
    "AbstractInsertStrategy",
    "InsertStrategy",
    "StrategyResult",
    "build_insert_statement",
    # Concrete strategies
    "DedicatedConnectionStrategy",
    "PoolExecStrategy",
    "PoolQueryStrategy",
    "TransactionStrategy",
]
