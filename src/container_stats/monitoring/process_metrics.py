"""Per-process memory and CPU metrics.

Memory is measured with one of the MemoryBackend strategies. CPU is the
lifetime average since process start, not instantaneous usage.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from container_stats.core.schemas import MemoryBackend
from container_stats.monitoring.base import ProcessStatsSource

logger = logging.getLogger(__name__)


def get_memory_bytes(backend: MemoryBackend, pid: int, source: ProcessStatsSource) -> int:
    """Return the memory footprint of a process in bytes.

    Args:
        backend: Measurement strategy
        pid: Host process id
        source: OS statistics source

    Raises:
        ProcessUnavailable: If the process cannot be inspected
    """
    if backend is MemoryBackend.PROCMAPS:
        return sum(region.size for region in source.get_memory_maps(pid))

    counters = source.get_process_counters(pid)
    if backend is MemoryBackend.RSS:
        return counters.rss
    return counters.vsz


def get_average_cpu_percent(
    pid: int, source: ProcessStatsSource, now: datetime | None = None
) -> float:
    """Return the average CPU utilisation of a process since it started.

    Counts user and system ticks of the process and its reaped children.
    Elapsed time is truncated to whole seconds; a process younger than one
    second (or a start time in the future) reports 0.0. ``now`` and the
    process start time are timezone-aware, so DST changes do not skew it.

    Raises:
        ProcessUnavailable: If the process cannot be inspected
    """
    counters = source.get_process_counters(pid)
    now = now or datetime.now(timezone.utc)

    elapsed_seconds = int((now - counters.start_time).total_seconds())
    if elapsed_seconds <= 0:
        logger.debug(f"Process {pid} started {elapsed_seconds}s ago, reporting 0% CPU")
        return 0.0

    cpu_seconds = counters.total_ticks / source.ticks_per_second()
    return 100.0 * cpu_seconds / elapsed_seconds
