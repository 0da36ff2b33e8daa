"""container-stats - memory and CPU usage of running containers."""

from __future__ import annotations

from container_stats.core.schemas import (
    ContainerGroup,
    ContainerStats,
    MemoryBackend,
    PipelineResult,
    StatsOptions,
)
from container_stats.pipeline import apply_pipeline

__version__ = "0.1.0"

__all__ = [
    "apply_pipeline",
    "ContainerGroup",
    "ContainerStats",
    "MemoryBackend",
    "PipelineResult",
    "StatsOptions",
    "__version__",
]
