import asyncio
from typing import NoReturn, Optional

import click
from rich.console import Console
from rich.table import Table

from pullgen.bench import BenchResult, bench_callback, bench_drain, bench_join, busy_work
from pullgen.config.environment import Environment
from pullgen.config.logging_config import get_logger
from pullgen.errors import ConfigurationError
from pullgen.types import FrameStrategy

console = Console()
log = get_logger(__name__)


def _get_version() -> str:
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("pullgen")
    except PackageNotFoundError:
        return "0.0.0+local"


def _parse_sizes(ctx, param, value: str) -> list[int]:
    try:
        sizes = [int(part) for part in value.split(",") if part.strip()]
    except ValueError as e:
        raise click.BadParameter(f"expected comma-separated integers, got {value!r}") from e
    if not sizes or any(n < 0 for n in sizes):
        raise click.BadParameter("sizes must be non-negative integers")
    return sizes


def _invalid_configuration(error: ConfigurationError) -> NoReturn:
    console.print(f"[red]❌ Invalid configuration: {error}[/]")
    raise SystemExit(1)


def _resolve_repeat(repeat: Optional[int]) -> int:
    if repeat is not None:
        return repeat
    try:
        return Environment.get_bench_repeat()
    except ConfigurationError as e:
        _invalid_configuration(e)


def _print_results(title: str, results: list[BenchResult]) -> None:
    table = Table(title=title)
    table.add_column("Benchmark", style="cyan")
    table.add_column("Variant", style="green")
    table.add_column("Runs", justify="right")
    table.add_column("Mean (µs)", justify="right", style="yellow")
    table.add_column("Values/s", justify="right", style="magenta")

    for result in results:
        table.add_row(
            result.name,
            result.variant,
            str(result.runs),
            f"{result.mean_us:.2f}",
            f"{result.values_per_second:,.0f}",
        )

    console.print(table)


@click.group()
@click.version_option(_get_version(), prog_name="pullgen", message="%(prog)s, version %(version)s")
def cli():
    """pullgen CLI - benchmarks and settings for pull-based async generators."""
    pass


@cli.group()
def bench():
    """Run generator micro-benchmarks."""
    pass


@bench.command("drain")
@click.option(
    "--sizes",
    default="1,2,3,5,10,100",
    show_default=True,
    callback=_parse_sizes,
    help="Comma-separated generator lengths.",
)
@click.option("--repeat", type=click.IntRange(min=1), default=None, help="Runs per size.")
def bench_drain_cmd(sizes: list[int], repeat: Optional[int]):
    """Measure the cost of draining generators of various lengths."""
    results = asyncio.run(bench_drain(sizes, _resolve_repeat(repeat)))
    _print_results("Generator draining", results)


@bench.command("callback")
@click.option("--repeat", type=click.IntRange(min=1), default=None, help="Runs per variant.")
@click.option("--busy", is_flag=True, help="Only measure work that awaits the event loop.")
def bench_callback_cmd(repeat: Optional[int], busy: bool):
    """Compare generator-driven work with the equivalent callback."""
    works = {"busy work": busy_work} if busy else None
    results = asyncio.run(bench_callback(_resolve_repeat(repeat), works))
    _print_results("Generator vs callback", results)


@bench.command("join")
@click.option("--children", type=click.IntRange(min=0), default=50, show_default=True)
@click.option("--items", type=click.IntRange(min=0), default=100, show_default=True)
@click.option(
    "--strategy",
    type=click.Choice(FrameStrategy.list_values()),
    default=None,
    help="Frame strategy to measure (default: both).",
)
@click.option("--repeat", type=click.IntRange(min=1), default=None, help="Runs per strategy.")
def bench_join_cmd(children: int, items: int, strategy: Optional[str], repeat: Optional[int]):
    """Measure fan-in throughput for each frame strategy."""
    strategies = [FrameStrategy(strategy)] if strategy else None
    results = asyncio.run(bench_join(children, items, _resolve_repeat(repeat), strategies))
    _print_results("Join throughput", results)


@cli.group()
def settings():
    """Commands for inspecting pullgen settings."""
    pass


@settings.command("show")
def show_settings():
    """Show registered settings and their resolved values."""
    from pullgen.config.configuration import get_settings_registry

    try:
        resolved = Environment.get_generator_settings()
    except ConfigurationError as e:
        _invalid_configuration(e)

    values = {
        "PULLGEN_JOIN_STRATEGY": resolved.join_strategy.value,
        "PULLGEN_LOG_LEVEL": resolved.log_level,
        "PULLGEN_BENCH_REPEAT": str(resolved.bench_repeat),
    }

    table = Table(title="Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Description", style="yellow")

    for setting in get_settings_registry():
        table.add_row(setting.env_var, values.get(setting.env_var, ""), setting.description)

    console.print(table)


if __name__ == "__main__":
    cli()
