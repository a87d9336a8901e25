from __future__ import annotations

import sys
from typing import List, Optional

import typer

from pool_bench.config import Settings, get_settings
from pool_bench.errors import ProvisioningError, StrategyExecutionError
from pool_bench.infrastructure.db_factory import provision_pool
from pool_bench.orchestrator import RunConfig, available_strategies, build_strategies, run_strategies
from pool_bench.reporter import print_results
from pool_bench.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Connection pool insert benchmark CLI.")
log = get_logger(__name__)


def _apply_overrides(settings: Settings, **overrides: object) -> Settings:
    update = {key: value for key, value in overrides.items() if value is not None}
    return settings.model_copy(update=update) if update else settings


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    typer.echo(get_settings().describe())


@app.command()
def strategies() -> None:
    """
    List strategies in the order they run.
    """
    typer.echo("Available strategies: " + ", ".join(available_strategies()))


@app.command()
def run(
    rows: Optional[int] = typer.Option(
        None,
        "--rows",
        "-r",
        min=0,
        help="Rows each strategy inserts (default BENCHMARK_INSERT_COUNT).",
    ),
    pool_size: Optional[int] = typer.Option(
        None,
        "--pool-size",
        "-p",
        min=1,
        help="Maximum open/idle pool connections (default DB_POOL_SIZE).",
    ),
    table: Optional[str] = typer.Option(
        None, "--table", "-t", help="Target table (default BENCHMARK_TABLE)."
    ),
    strategy: Optional[List[str]] = typer.Option(
        None,
        "--strategy",
        "-s",
        help="Strategy to run; repeat for several. Defaults to all, in canonical order.",
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON."),
    persist: bool = typer.Option(False, "--persist", help="Write results JSON to --results-dir."),
    results_dir: str = typer.Option("results", "--results-dir", help="Directory for results JSON."),
) -> None:
    """
    Provision the pool and run the insertion strategies sequentially.
    """
    settings = _apply_overrides(
        get_settings(),
        benchmark_insert_count=rows,
        db_pool_size=pool_size,
        benchmark_table=table,
    )
    configure_logging(level=settings.log_level, json_logs=json_logs or settings.log_json)

    try:
        selected = build_strategies(settings.benchmark_table, strategy)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--strategy") from exc

    try:
        pool = provision_pool(settings)
    except ProvisioningError as exc:
        log.error(f"Failed to create connection pool: {exc}")
        raise typer.Exit(code=1) from exc

    config = RunConfig(
        row_count=settings.benchmark_insert_count,
        table=settings.benchmark_table,
        persist=persist,
        results_dir=results_dir,
        extra={"pool_size": settings.db_pool_size},
    )
    with pool:
        try:
            results = run_strategies(pool, config, strategies=selected)
        except StrategyExecutionError as exc:
            log.error(f"Benchmark failed: {exc}")
            raise typer.Exit(code=1) from exc

    print_results(results, pool_size=settings.db_pool_size)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
