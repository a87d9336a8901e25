"""
Infrastructure package for the pool insert benchmark.

Centralizes database connectivity concerns (connection string, pool
provisioning, acquisition helpers). Keep this layer focused on I/O and resource
management, decoupled from strategy/runner logic.
"""

from pool_bench.infrastructure.db_factory import (
    DatabasePool,
    Transaction,
    build_conninfo,
    provision_pool,
)

__all__ = [
    "DatabasePool",
    "Transaction",
    "build_conninfo",
    "provision_pool",
]
