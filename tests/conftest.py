"""Shared fixtures: in-memory runtime and process statistics source."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from container_stats.core.exceptions import ContainerUnavailable, ProcessUnavailable
from container_stats.core.schemas import ContainerStats
from container_stats.monitoring.base import (
    ContainerHandle,
    ContainerRuntime,
    MemoryRegion,
    ProcessCounters,
    ProcessStatsSource,
)


def make_counters(
    rss: int = 0,
    vsz: int = 0,
    ticks: int = 0,
    started_seconds_ago: int = 1000,
) -> ProcessCounters:
    """Counters with all CPU ticks booked as user time."""
    return ProcessCounters(
        rss=rss,
        vsz=vsz,
        utime=ticks,
        stime=0,
        cutime=0,
        cstime=0,
        start_time=datetime.now(timezone.utc) - timedelta(seconds=started_seconds_ago),
    )


class FakeRuntime(ContainerRuntime):
    """ContainerRuntime backed by dictionaries."""

    def __init__(
        self,
        containers: list[ContainerHandle] | None = None,
        processes: dict[str, list[int]] | None = None,
        primary_pids: dict[str, int] | None = None,
        available: bool = True,
    ) -> None:
        self.containers = containers or []
        self.processes = processes or {}
        self.primary_pids = primary_pids or {}
        self.available = available
        self.calls: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return "fake"

    def is_available(self) -> bool:
        self.calls.append(("ping", ""))
        return self.available

    def list_running_containers(self) -> list[ContainerHandle]:
        self.calls.append(("list", ""))
        return list(self.containers)

    def list_container_processes(self, container_id: str) -> list[int]:
        self.calls.append(("top", container_id))
        if container_id not in self.processes:
            raise ContainerUnavailable(container_id, "no such container")
        return self.processes[container_id]

    def get_container_primary_pid(self, container_id: str) -> int:
        self.calls.append(("inspect", container_id))
        if container_id not in self.primary_pids:
            raise ContainerUnavailable(container_id, "no such container")
        return self.primary_pids[container_id]


class FakeSource(ProcessStatsSource):
    """ProcessStatsSource backed by dictionaries; unknown pids are unavailable."""

    def __init__(
        self,
        maps: dict[int, list[int]] | None = None,
        counters: dict[int, ProcessCounters] | None = None,
        ticks: int = 100,
    ) -> None:
        self.maps = maps or {}
        self.counters = counters or {}
        self.ticks = ticks

    def get_memory_maps(self, pid: int) -> list[MemoryRegion]:
        if pid not in self.maps:
            raise ProcessUnavailable(pid, "NoSuchProcess")
        return [MemoryRegion(size=size) for size in self.maps[pid]]

    def get_process_counters(self, pid: int) -> ProcessCounters:
        if pid not in self.counters:
            raise ProcessUnavailable(pid, "NoSuchProcess")
        return self.counters[pid]

    def ticks_per_second(self) -> int:
        return self.ticks


@pytest.fixture
def sample_stats() -> list[ContainerStats]:
    """The app-1 / app-2 / db-1 set used across pipeline tests."""
    return [
        ContainerStats(id="a1", name="app-1", memory_bytes=100, average_cpu_percent=1.0),
        ContainerStats(id="a2", name="app-2", memory_bytes=50, average_cpu_percent=2.0),
        ContainerStats(id="d1", name="db-1", memory_bytes=200, average_cpu_percent=4.0),
    ]
