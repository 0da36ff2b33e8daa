"""Monitoring module - per-process metrics and per-container collection.

Provides:
- process_metrics: memory (procmaps/rss/vsz) and lifetime CPU of one process
- StatsCollector: sums process metrics into one record per container
- PsutilProcessSource: psutil-backed OS statistics source
"""

from __future__ import annotations

from container_stats.monitoring.base import (
    ContainerHandle,
    ContainerRuntime,
    MemoryRegion,
    ProcessCounters,
    ProcessStatsSource,
)
from container_stats.monitoring.collector import ProcessFailure, StatsCollector
from container_stats.monitoring.process_metrics import get_average_cpu_percent, get_memory_bytes
from container_stats.monitoring.psutil_source import PsutilProcessSource

__all__ = [
    "ContainerHandle",
    "ContainerRuntime",
    "get_average_cpu_percent",
    "get_memory_bytes",
    "MemoryRegion",
    "ProcessCounters",
    "ProcessFailure",
    "ProcessStatsSource",
    "PsutilProcessSource",
    "StatsCollector",
]
