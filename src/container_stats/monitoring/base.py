"""Collaborator interfaces for stats collection.

The collector never talks to Docker or the OS directly. It goes through a
ContainerRuntime (container discovery and pid resolution) and a
ProcessStatsSource (per-process counters), so either side can be swapped or
faked in tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ContainerHandle:
    """A running container as reported by the runtime."""

    id: str
    names: list[str] = field(default_factory=list)
    # None means the runtime must be asked for it at collection time.
    primary_process_id: int | None = None
    is_running: bool = True

    @property
    def short_id(self) -> str:
        return self.id[:12]


@dataclass(frozen=True)
class MemoryRegion:
    """One memory-mapped region of a process."""

    size: int  # Bytes


@dataclass(frozen=True)
class ProcessCounters:
    """Raw per-process counters.

    CPU times are in clock ticks, matching /proc/<pid>/stat.
    """

    rss: int  # Resident set size, bytes
    vsz: int  # Virtual size, bytes
    utime: int
    stime: int
    cutime: int  # Reaped children, user
    cstime: int  # Reaped children, system
    start_time: datetime  # Timezone-aware

    @property
    def total_ticks(self) -> int:
        return self.utime + self.stime + self.cutime + self.cstime


class ContainerRuntime(ABC):
    """Abstract container runtime.

    Implementations:
    - DockerRuntime: Docker Engine API via the docker SDK
    """

    @abstractmethod
    def list_running_containers(self) -> list[ContainerHandle]:
        """Return every running container.

        Raises:
            RuntimeUnavailable: If the runtime cannot be reached
        """

    @abstractmethod
    def list_container_processes(self, container_id: str) -> list[int]:
        """Return the host pids of every process in a container.

        Raises:
            ContainerUnavailable: If the container no longer exists
            RuntimeUnavailable: If the runtime cannot be reached
        """

    @abstractmethod
    def get_container_primary_pid(self, container_id: str) -> int:
        """Return the host pid of the container's top-level process.

        Raises:
            ContainerUnavailable: If the container no longer exists
            RuntimeUnavailable: If the runtime cannot be reached
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the runtime answers requests."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of this runtime."""


class ProcessStatsSource(ABC):
    """Abstract source of OS-level process statistics.

    Implementations:
    - PsutilProcessSource: psutil (procfs on linux)
    """

    @abstractmethod
    def get_memory_maps(self, pid: int) -> list[MemoryRegion]:
        """Return the memory-mapped regions of a process.

        Raises:
            ProcessUnavailable: If the process cannot be inspected
        """

    @abstractmethod
    def get_process_counters(self, pid: int) -> ProcessCounters:
        """Return raw memory and CPU counters of a process.

        Raises:
            ProcessUnavailable: If the process cannot be inspected
        """

    @abstractmethod
    def ticks_per_second(self) -> int:
        """Clock ticks per second used by the CPU counters."""
