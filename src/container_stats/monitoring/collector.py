"""Stats collector: one ContainerStats record per container.

Each container is resolved to one or more host pids, every pid is measured
with the configured memory backend and the lifetime CPU average, and the
results are summed. A pid that cannot be measured is logged, recorded in
``failures`` and left out of the sums; it never aborts the container or run.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone

from container_stats.core.constants import NAME_SEPARATOR
from container_stats.core.exceptions import ContainerUnavailable, ProcessUnavailable
from container_stats.core.schemas import ContainerStats, MemoryBackend
from container_stats.monitoring.base import ContainerHandle, ContainerRuntime, ProcessStatsSource
from container_stats.monitoring.process_metrics import get_average_cpu_percent, get_memory_bytes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessFailure:
    """A measurement that was skipped during collection."""

    container_id: str
    pid: int | None  # None when the container's pids could not be resolved
    metric: str  # "memory", "cpu" or "pids"
    reason: str


class StatsCollector:
    """Collects memory and CPU usage for a list of containers.

    Example:
        ```python
        collector = StatsCollector(DockerRuntime(), PsutilProcessSource())
        stats = collector.collect(runtime.list_running_containers())
        for failure in collector.failures:
            print(failure.pid, failure.reason)
        ```
    """

    def __init__(
        self,
        runtime: ContainerRuntime,
        source: ProcessStatsSource,
        backend: MemoryBackend = MemoryBackend.PROCMAPS,
        use_top: bool = False,
        workers: int = 1,
        log: logging.Logger | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            runtime: Container runtime used to resolve pids
            source: OS statistics source used to measure pids
            backend: Memory measurement strategy
            use_top: Measure every process of a container instead of only
                the primary one (slower, not supported everywhere)
            workers: Number of containers collected concurrently
            log: Logger that receives per-process warnings
        """
        self._runtime = runtime
        self._source = source
        self.backend = MemoryBackend(backend)
        self.use_top = use_top
        self.workers = max(1, workers)
        self._log = log or logger
        self.failures: list[ProcessFailure] = []

    def collect(self, containers: list[ContainerHandle]) -> list[ContainerStats]:
        """Collect one record per container, in input order.

        Raises:
            RuntimeUnavailable: If the runtime stops answering
        """
        self.failures = []
        self._log.info(f"Processing {len(containers)} containers")

        if self.workers > 1 and len(containers) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                results = list(pool.map(self._collect_container, containers))
        else:
            results = [self._collect_container(c) for c in containers]

        all_stats = []
        for stats, failures in results:
            all_stats.append(stats)
            self.failures.extend(failures)

        if self.failures:
            self._log.warning(
                f"{len(self.failures)} measurements failed across {len(containers)} containers"
            )
        return all_stats

    def resolve_pids(self, container: ContainerHandle) -> list[int]:
        """Return the host pids to measure for a container.

        Raises:
            ContainerUnavailable: If the container vanished
            RuntimeUnavailable: If the runtime cannot be reached
        """
        if self.use_top:
            return self._runtime.list_container_processes(container.id)
        if container.primary_process_id is not None:
            return [container.primary_process_id]
        return [self._runtime.get_container_primary_pid(container.id)]

    def _collect_container(
        self, container: ContainerHandle
    ) -> tuple[ContainerStats, list[ProcessFailure]]:
        self._log.info(f"Gathering stats for container with ID {container.id}")
        failures: list[ProcessFailure] = []
        memory = 0
        cpu = 0.0

        try:
            pids = self.resolve_pids(container)
        except ContainerUnavailable as e:
            self._log.error(f"Failed to resolve processes of container {container.short_id}: {e}")
            failures.append(ProcessFailure(container.id, None, "pids", e.reason))
            pids = []

        self._log.debug(f"Found {len(pids)} processes: {pids}")
        now = datetime.now(timezone.utc)

        for pid in pids:
            try:
                memory += get_memory_bytes(self.backend, pid, self._source)
            except ProcessUnavailable as e:
                self._log.error(
                    f"Failed to get memory for process {pid} (from container {container.id}) "
                    f"due to {e.reason}"
                )
                failures.append(ProcessFailure(container.id, pid, "memory", e.reason))

            try:
                cpu += get_average_cpu_percent(pid, self._source, now=now)
            except ProcessUnavailable as e:
                self._log.error(
                    f"Failed to get average CPU for process {pid} (from container {container.id}) "
                    f"due to {e.reason}"
                )
                failures.append(ProcessFailure(container.id, pid, "cpu", e.reason))

        stats = ContainerStats(
            id=container.id,
            name=NAME_SEPARATOR.join(container.names),
            memory_bytes=memory,
            average_cpu_percent=cpu,
        )
        return stats, failures
