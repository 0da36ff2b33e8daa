"""Exception hierarchy for container-stats.

Configuration and runtime errors are fatal for the whole run. Container and
process errors are recovered locally by the collector.
"""

from __future__ import annotations


class ContainerStatsError(Exception):
    """Base class for all container-stats errors."""


class ConfigurationError(ContainerStatsError):
    """Invalid options, reported before any collection work starts."""


class RuntimeUnavailable(ContainerStatsError):
    """The container runtime cannot be reached or rejected a request."""


class ContainerUnavailable(ContainerStatsError):
    """A container disappeared between discovery and pid resolution."""

    def __init__(self, container_id: str, reason: str = "") -> None:
        self.container_id = container_id
        self.reason = reason
        super().__init__(f"Container {container_id[:12]} unavailable: {reason}")


class ProcessUnavailable(ContainerStatsError):
    """A process cannot be inspected (exited, access denied)."""

    def __init__(self, pid: int, reason: str = "") -> None:
        self.pid = pid
        self.reason = reason
        super().__init__(f"Process {pid} unavailable: {reason}")
