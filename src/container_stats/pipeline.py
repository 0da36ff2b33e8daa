"""Record transform pipeline.

Applies, in this order and each only when configured:

1. regex filter on container names
2. total memory (terminal: grouping and sorting are skipped)
3. grouping by name prefix or suffix
4. descending sort by memory
"""

from __future__ import annotations

import logging
import re

from container_stats.core.schemas import (
    ContainerGroup,
    ContainerStats,
    GroupMode,
    PipelineResult,
    StatsOptions,
)

logger = logging.getLogger(__name__)


def filter_stats(
    stats: list[ContainerStats], pattern: re.Pattern[str] | str
) -> list[ContainerStats]:
    """Keep records whose name matches ``pattern`` anywhere."""
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    return [s for s in stats if regex.search(s.name)]


def total_memory(stats: list[ContainerStats]) -> int:
    return sum(s.memory_bytes for s in stats)


def grouping_key(name: str, mode: GroupMode, delimiter: str) -> str:
    """Return the first or last ``delimiter``-separated segment of ``name``.

    A name without the delimiter is its own key.
    """
    segments = name.split(delimiter)
    if mode is GroupMode.PREFIX:
        return segments[0]
    return segments[-1]


def group_stats(
    stats: list[ContainerStats], mode: GroupMode, delimiter: str
) -> list[ContainerGroup]:
    """Fold records sharing a grouping key, in first-seen key order."""
    groups: dict[str, ContainerGroup] = {}
    for stat in stats:
        fix = grouping_key(stat.name, mode, delimiter)
        if fix not in groups:
            groups[fix] = ContainerGroup(fix=fix)
        groups[fix].add(stat)
    return list(groups.values())


def sort_by_memory(
    records: list[ContainerStats] | list[ContainerGroup],
) -> list[ContainerStats] | list[ContainerGroup]:
    # sorted() is stable, so ties keep their prior order
    return sorted(records, key=lambda r: r.memory_bytes, reverse=True)


def apply_pipeline(stats: list[ContainerStats], options: StatsOptions) -> PipelineResult:
    """Run the configured transforms over collected stats."""
    pattern = options.compile_filter()
    if pattern is not None:
        logger.debug(f"Filtering {len(stats)} stats by regex {pattern.pattern}")
        stats = filter_stats(stats, pattern)
        logger.debug(f"Remaining: {len(stats)} stats")

    if options.show_total:
        logger.debug("Calculating total memory usage")
        return PipelineResult(total=total_memory(stats))

    mode = options.group_mode
    if mode is not None:
        logger.info(f"Grouping {len(stats)} stats (by {mode.value})")
        groups = group_stats(stats, mode, options.group_delimiter)
        if options.sort:
            logger.debug(f"Sorting {len(groups)} groups")
            groups = sort_by_memory(groups)
        return PipelineResult(groups=groups)

    if options.sort:
        logger.debug(f"Sorting {len(stats)} stats")
        stats = sort_by_memory(stats)
    return PipelineResult(stats=stats)
