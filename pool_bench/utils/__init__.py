"""
Utilities package for the pool insert benchmark.

Exports shared helpers for logging and profiling. Keep this package lightweight
and free of benchmark-specific logic.
"""

from pool_bench.utils.logging import configure_logging, get_logger
from pool_bench.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
