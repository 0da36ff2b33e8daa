"""Rendering of pipeline results as rich tables or JSON."""

from __future__ import annotations

import json
import logging
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from container_stats.core.schemas import ContainerGroup, ContainerStats, PipelineResult

logger = logging.getLogger(__name__)

_UNITS = ["KB", "MB", "GB", "TB", "PB", "EB"]


def format_bytes(num_bytes: int) -> str:
    """Human-readable size with decimal units, e.g. ``1.5 MB``."""
    if num_bytes < 1000:
        return f"{num_bytes} B"
    value = float(num_bytes)
    for unit in _UNITS:
        value /= 1000
        if value < 1000 or unit == _UNITS[-1]:
            return f"{value:.1f} {unit}"
    return f"{num_bytes} B"


def result_to_data(result: PipelineResult) -> Any:
    """JSON-serialisable form of a pipeline result."""
    if result.is_total:
        return {"total_bytes": result.total}
    return [r.model_dump() for r in result.records]


def render_json(result: PipelineResult) -> str:
    return json.dumps(result_to_data(result), indent=2)


def render_total(total: int) -> str:
    return f"Total: {format_bytes(total)} ({total} B)"


def build_table(
    records: list[ContainerStats] | list[ContainerGroup], grouped: bool = False
) -> Table:
    """Build a rich table for plain or grouped records."""
    table = Table(title="Container Groups" if grouped else "Container Stats")
    table.add_column("Memory", style="green", justify="right")
    table.add_column("Avg CPU %", style="yellow", justify="right")

    if grouped:
        table.add_column("Containers", justify="right")
        table.add_column("Group", style="cyan")
        for group in records:
            table.add_row(
                format_bytes(group.memory_bytes),
                f"{group.average_cpu_percent:.2f}",
                str(group.containers),
                escape(group.fix),
            )
    else:
        table.add_column("Name", style="cyan")
        table.add_column("ID", style="dim")
        for stats in records:
            table.add_row(
                format_bytes(stats.memory_bytes),
                f"{stats.average_cpu_percent:.2f}",
                escape(stats.name),
                stats.id[:12],
            )
    return table


def print_result(result: PipelineResult, console: Console, as_json: bool = False) -> None:
    """Write a pipeline result to ``console``."""
    if as_json:
        logger.debug("Printing as json")
        console.print(render_json(result), markup=False, highlight=False, soft_wrap=True)
    elif result.is_total:
        console.print(render_total(result.total))
    else:
        logger.debug("Printing as table")
        console.print(build_table(result.records, grouped=result.groups is not None))
