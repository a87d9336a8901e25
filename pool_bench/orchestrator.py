"""
Runner for the insertion strategies: executes them in a fixed order over one
shared pool, profiles each run, and optionally persists the results.

Usage:
    from pool_bench.orchestrator import RunConfig, run_strategies

    with provision_pool(settings) as pool:
        results = run_strategies(pool, RunConfig(row_count=1000))

Strategies run strictly one after another. The first failure aborts the run:
the error is re-raised and later strategies never start. Pool state is not
reset between strategies.

When persistence is enabled, outputs go to `results/`:
- `results/latest.json` (last run)
- `results/run-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from pool_bench.errors import StrategyExecutionError
from pool_bench.infrastructure.db_factory import DatabasePool
from pool_bench.strategies.abstract import DEFAULT_TABLE, InsertStrategy, StrategyResult
from pool_bench.strategies.dedicated_connection import DedicatedConnectionStrategy
from pool_bench.strategies.pool_exec import PoolExecStrategy
from pool_bench.strategies.pool_query import PoolQueryStrategy
from pool_bench.strategies.transaction import TransactionStrategy
from pool_bench.utils.logging import get_logger
from pool_bench.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)


@dataclass(frozen=True)
class RunConfig:
    """Parameters for a single benchmark run."""

    row_count: int
    table: str = DEFAULT_TABLE
    strategy_names: Optional[Sequence[str]] = None
    persist: bool = False
    results_dir: Path | str = "results"
    extra: Dict[str, object] = field(default_factory=dict)


def _round_float(value: float, decimals: int = 3) -> float:
    """Round a float to specified decimal places for human-readable output."""
    return round(value, decimals)


def _strategy_factories() -> Dict[str, Callable[[str], InsertStrategy]]:
    """Registry of available strategies, in run order."""
    return {
        PoolQueryStrategy.name: PoolQueryStrategy,
        DedicatedConnectionStrategy.name: DedicatedConnectionStrategy,
        PoolExecStrategy.name: PoolExecStrategy,
        TransactionStrategy.name: TransactionStrategy,
    }


def available_strategies() -> List[str]:
    """List available strategy names in the order they run."""
    return list(_strategy_factories().keys())


def build_strategies(
    table: str = DEFAULT_TABLE, names: Optional[Sequence[str]] = None
) -> List[InsertStrategy]:
    """
    Instantiate strategies for ``table``.

    ``names`` selects a subset; the canonical run order is kept regardless of
    the order the names are given in.
    """
    factories = _strategy_factories()
    wanted = set(names) if names else set(factories)
    unknown = wanted - set(factories)
    if unknown:
        raise ValueError(
            f"Unknown strategy '{', '.join(sorted(unknown))}'. Available: {', '.join(factories)}"
        )
    return [factory(table) for name, factory in factories.items() if name in wanted]


def _persist_results(payload: dict, results_dir: Path) -> None:
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"run-{timestamp}.json"

    for path in (latest_path, archive_path):
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, sort_keys=True)

    log.info("Results persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})


def _merge_result(result: StrategyResult, stats: ProfileStats) -> StrategyResult:
    """Attach profiler measurements; the strategy's own timing is kept."""
    merged = StrategyResult(**result)
    merged["duration_seconds"] = _round_float(merged.get("duration_seconds", stats.duration_seconds))
    merged["throughput_rows_per_sec"] = _round_float(
        merged.get("throughput_rows_per_sec", 0.0), 2
    )
    merged["peak_rss_bytes"] = stats.peak_rss_bytes
    merged["cpu_percent"] = (
        _round_float(stats.cpu_percent, 1) if stats.cpu_percent is not None else None
    )
    return merged


def _profiled_execute(
    strategy: InsertStrategy, pool: DatabasePool, row_count: int
) -> StrategyResult:
    log.info(f"[STRATEGY START] {strategy.name}", extra={"strategy": strategy.name})
    with profile_block(strategy.name) as stats:
        try:
            result = strategy.execute(pool, row_count)
        except StrategyExecutionError as exc:
            log.error(
                f"[STRATEGY FAILED] {strategy.name}: {exc}",
                extra={"strategy": strategy.name, "rows_submitted": exc.rows_submitted},
            )
            raise
    return _merge_result(result, stats)


def run_strategies(
    pool: DatabasePool,
    config: RunConfig,
    strategies: Optional[Sequence[InsertStrategy]] = None,
) -> List[StrategyResult]:
    """
    Run the insertion strategies sequentially against ``pool``.

    Parameters
    ----------
    pool : DatabasePool
        An open, verified pool. The caller owns it and closes it.
    config : RunConfig
        Row count, target table, optional subset and persistence options.
    strategies : sequence of InsertStrategy, optional
        Explicit strategies to run instead of the registry.

    Returns
    -------
    List[StrategyResult]
        One result per strategy, in run order.

    Raises
    ------
    StrategyExecutionError
        The first strategy failure; no later strategy is executed.
    """
    selected = (
        list(strategies)
        if strategies is not None
        else build_strategies(config.table, config.strategy_names)
    )
    names = [s.name for s in selected]

    log.info(
        f"[BENCHMARK START] {len(selected)} strategies x {config.row_count} rows",
        extra={"strategies": names, "row_count": config.row_count, "table": config.table},
    )

    results: List[StrategyResult] = []
    for strategy in selected:
        result = _profiled_execute(strategy, pool, config.row_count)
        log.info(
            f"[STRATEGY RESULT] {result['strategy']}: {result['rows']} rows "
            f"in {result['duration_seconds']:.3f}s",
            extra={
                "strategy": result["strategy"],
                "rows": result["rows"],
                "duration": result["duration_seconds"],
                "throughput_rps": result["throughput_rows_per_sec"],
            },
        )
        results.append(result)

    if config.persist:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "row_count": config.row_count,
            "table": config.table,
            "strategies": names,
            "results": results,
            **config.extra,
        }
        _persist_results(payload, Path(config.results_dir))

    log.info(
        f"[BENCHMARK COMPLETE] All {len(selected)} strategies executed successfully",
        extra={"strategies": names},
    )
    return results


__all__ = [
    "RunConfig",
    "available_strategies",
    "build_strategies",
    "run_strategies",
]
