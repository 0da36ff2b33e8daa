"""Core module - configuration, schemas and errors."""

from __future__ import annotations

from container_stats.core.config import build_options, load_config, validate_backend
from container_stats.core.exceptions import (
    ConfigurationError,
    ContainerStatsError,
    ContainerUnavailable,
    ProcessUnavailable,
    RuntimeUnavailable,
)
from container_stats.core.schemas import (
    ContainerGroup,
    ContainerStats,
    GroupMode,
    MemoryBackend,
    PipelineResult,
    StatsOptions,
)

__all__ = [
    "build_options",
    "ConfigurationError",
    "ContainerGroup",
    "ContainerStats",
    "ContainerStatsError",
    "ContainerUnavailable",
    "GroupMode",
    "load_config",
    "MemoryBackend",
    "PipelineResult",
    "ProcessUnavailable",
    "RuntimeUnavailable",
    "StatsOptions",
    "validate_backend",
]
