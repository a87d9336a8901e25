"""
Domain package for the pool insert benchmark.

Exports the synthetic row model shared by the insertion strategies.
"""

from pool_bench.domain.models import SyntheticUser

__all__ = [
    "SyntheticUser",
]
