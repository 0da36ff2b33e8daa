"""CLI for container-stats.

Provides a command-line interface using Typer for:
- Reporting memory and CPU usage of running containers
- Generating a sample configuration file
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape

from container_stats.core.config import build_options, load_config, validate_backend
from container_stats.core.constants import EXIT_CONFIG_ERROR, EXIT_RUNTIME_ERROR
from container_stats.core.exceptions import ConfigurationError, RuntimeUnavailable
from container_stats.core.schemas import StatsOptions
from container_stats.monitoring.collector import StatsCollector
from container_stats.monitoring.psutil_source import PsutilProcessSource
from container_stats.pipeline import apply_pipeline
from container_stats.results.render import print_result
from container_stats.runners.docker_runtime import DockerRuntime
from container_stats.utils.logging import get_logger, setup_logging

app = typer.Typer(
    name="container-stats",
    help="Memory and CPU usage of running containers",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)


@app.command()
def stats(
    total: bool | None = typer.Option(
        None, "--total/--no-total", "-t", help="Prints total memory used by containers"
    ),
    sort: bool | None = typer.Option(
        None, "--sort/--no-sort", "-s", help="Sorts containers by memory used"
    ),
    group_by_prefix: bool | None = typer.Option(
        None, "--group-by-prefix/--no-group-by-prefix", help="Group containers by prefix"
    ),
    group_by_suffix: bool | None = typer.Option(
        None, "--group-by-suffix/--no-group-by-suffix", help="Group containers by suffix"
    ),
    delimiter: str | None = typer.Option(
        None, "--delimiter", "-d", help="Delimiter for grouping (default: -)"
    ),
    top: bool | None = typer.Option(
        None,
        "--top/--no-top",
        help="Use docker top. Significantly slower, but detects multiple processes per container",
    ),
    json_output: bool | None = typer.Option(
        None, "--json/--no-json", help="Print as json instead of a table"
    ),
    regex: str | None = typer.Option(
        None, "--regex", "-r", help="Filters container names by a regular expression"
    ),
    memory_backend: str | None = typer.Option(
        None,
        "--memory-backend",
        "-m",
        help='How used memory is calculated: "procmaps" (cross-platform), "rss" and "vsz" '
        "(both linux) (default: procmaps)",
    ),
    workers: int | None = typer.Option(
        None, "--workers", "-w", help="Containers collected in parallel (default: 1)"
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Options file (YAML/JSON); flags take precedence"
    ),
    log_level: str = typer.Option("WARNING", "--log-level", "-l", help="Logging level"),
    debug: str | None = typer.Option(
        None, "--debug", help="Logging level, alias for --log-level"
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file in addition to the console"
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Output logs in JSON format (for programmatic parsing)"
    ),
) -> None:
    """Report memory and CPU usage of running containers."""
    try:
        setup_logging(
            level=debug or log_level,
            log_file=log_file,
            json_format=json_logs,
            rich_console=not json_logs,
        )
    except ValueError as e:
        err_console.print(f"[bold red]Error: {escape(str(e))}[/]")
        raise typer.Exit(EXIT_CONFIG_ERROR) from e

    overrides = _collect_overrides(
        memory_backend=memory_backend,
        use_top=top,
        regex_filter=regex,
        group_by_prefix=group_by_prefix,
        group_by_suffix=group_by_suffix,
        group_delimiter=delimiter,
        sort=sort,
        show_total=total,
        output_json=json_output,
        workers=workers,
    )

    try:
        options = load_config(config, overrides) if config else build_options(**overrides)
        validate_backend(options.memory_backend)
    except ConfigurationError as e:
        err_console.print(f"[bold red]Error: {escape(str(e))}[/]")
        raise typer.Exit(EXIT_CONFIG_ERROR) from e

    logger.debug(f"Running with options: {options!r}")

    try:
        run(options)
    except RuntimeUnavailable as e:
        logger.error(str(e))
        err_console.print(f"[bold red]Error: {escape(str(e))}[/]")
        raise typer.Exit(EXIT_RUNTIME_ERROR) from e


def run(options: StatsOptions) -> None:
    """Discover containers, collect their stats, transform and print them.

    Raises:
        RuntimeUnavailable: If the Docker daemon cannot be reached
    """
    runtime = DockerRuntime()
    if not runtime.is_available():
        raise RuntimeUnavailable(f"{runtime.name} daemon is not responding")
    logger.info(f"Connected to {runtime.name} runtime")
    containers = runtime.list_running_containers()

    collector = StatsCollector(
        runtime,
        PsutilProcessSource(),
        backend=options.memory_backend,
        use_top=options.use_top,
        workers=options.workers,
    )
    all_stats = collector.collect(containers)
    logger.debug(f"All stats gathered: {all_stats}")

    result = apply_pipeline(all_stats, options)
    print_result(result, console, as_json=options.output_json)


@app.command()
def init_config(
    output: Path = typer.Option(
        Path("container-stats.yaml"), "--output", "-o", help="Output configuration file"
    ),
) -> None:
    """Generate a sample configuration file."""
    sample_config = """\
# container-stats configuration
# Flags given on the command line take precedence over these values.

# How used memory is calculated: procmaps (cross-platform), rss or vsz (linux)
memory_backend: procmaps

# Use docker top to measure every process of a container (slower)
use_top: false

# Only report containers whose name matches this regular expression
# regex_filter: "^app"

# Group containers by the first (prefix) or last (suffix) name segment
group_by_prefix: false
group_by_suffix: false
group_delimiter: "-"

# Sort by memory, descending
sort: false

# Only print the total memory used
show_total: false

# Print JSON instead of a table
output_json: false

# Containers collected in parallel
workers: 1
"""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(sample_config)
    console.print(f"[bold green]Sample configuration written to {output}[/]")


def _collect_overrides(**values: Any) -> dict[str, Any]:
    """Keep only options that were given on the command line."""
    return {k: v for k, v in values.items() if v is not None}


if __name__ == "__main__":
    app()
