"""PsutilProcessSource - ProcessStatsSource implementation using psutil.

On linux psutil reads procfs (/proc/<pid>/smaps, /proc/<pid>/stat), which is
where the rss, vsz and CPU tick counters come from. Memory maps are available
on every platform psutil supports them on.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone

import psutil

from container_stats.core.exceptions import ProcessUnavailable
from container_stats.monitoring.base import MemoryRegion, ProcessCounters, ProcessStatsSource

logger = logging.getLogger(__name__)

# Linux default USER_HZ; used only where sysconf is not available.
DEFAULT_TICKS_PER_SECOND = 100


def get_clock_ticks() -> int:
    """Return the kernel clock tick rate (SC_CLK_TCK)."""
    try:
        ticks = os.sysconf("SC_CLK_TCK")
    except (AttributeError, ValueError, OSError):
        logger.debug(f"SC_CLK_TCK unavailable, using {DEFAULT_TICKS_PER_SECOND}")
        return DEFAULT_TICKS_PER_SECOND
    return ticks if ticks > 0 else DEFAULT_TICKS_PER_SECOND


def _region_size(region: object) -> int:
    """Size of a psutil memory map entry in bytes.

    Linux entries carry ``size`` directly. BSD entries only carry a
    ``start-end`` hex address range. Windows entries carry a bare base
    address, and psutil reports the region size there as ``rss``.
    """
    size = getattr(region, "size", None)
    if size is not None:
        return int(size)
    start, _, end = getattr(region, "addr", "").partition("-")
    if start and end:
        return int(end, 16) - int(start, 16)
    return int(getattr(region, "rss", 0))


class PsutilProcessSource(ProcessStatsSource):
    """Process statistics backed by psutil.

    Example:
        ```python
        source = PsutilProcessSource()
        counters = source.get_process_counters(1234)
        print(counters.rss, counters.total_ticks)
        ```
    """

    def __init__(self) -> None:
        self._ticks_per_second = get_clock_ticks()

    def ticks_per_second(self) -> int:
        return self._ticks_per_second

    def get_memory_maps(self, pid: int) -> list[MemoryRegion]:
        try:
            maps = psutil.Process(pid).memory_maps(grouped=False)
        except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
            raise ProcessUnavailable(pid, type(e).__name__) from e
        except (AttributeError, NotImplementedError) as e:
            raise ProcessUnavailable(pid, "memory maps not supported on this platform") from e

        return [MemoryRegion(size=_region_size(m)) for m in maps]

    def get_process_counters(self, pid: int) -> ProcessCounters:
        try:
            proc = psutil.Process(pid)
            with proc.oneshot():
                mem = proc.memory_info()
                cpu = proc.cpu_times()
                created = proc.create_time()
        except (psutil.NoSuchProcess, psutil.AccessDenied) as e:
            raise ProcessUnavailable(pid, type(e).__name__) from e

        return ProcessCounters(
            rss=mem.rss,
            vsz=mem.vms,
            utime=self._to_ticks(cpu.user),
            stime=self._to_ticks(cpu.system),
            cutime=self._to_ticks(getattr(cpu, "children_user", 0.0)),
            cstime=self._to_ticks(getattr(cpu, "children_system", 0.0)),
            start_time=datetime.fromtimestamp(created, tz=timezone.utc),
        )

    def _to_ticks(self, seconds: float) -> int:
        return round(seconds * self._ticks_per_second)
