"""Pydantic schemas for container-stats.

This module defines the data contracts shared by the collector, the transform
pipeline and the output adapter: run options, per-container records, grouped
records and the pipeline result.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from container_stats.core.constants import DEFAULT_GROUP_DELIMITER, LINUX_PLATFORM_PREFIX


class MemoryBackend(str, Enum):
    """Strategy used to measure a single process's memory footprint."""

    PROCMAPS = "procmaps"  # Sum of mapped region sizes (cross-platform)
    RSS = "rss"  # Resident set size (linux)
    VSZ = "vsz"  # Virtual size (linux)

    @property
    def linux_only(self) -> bool:
        return self is not MemoryBackend.PROCMAPS

    def is_supported_on(self, platform: str) -> bool:
        """Return True if this backend can measure processes on ``platform``."""
        if self.linux_only:
            return platform.startswith(LINUX_PLATFORM_PREFIX)
        return True


class GroupMode(str, Enum):
    """Which segment of a container name is used as the grouping key."""

    PREFIX = "prefix"
    SUFFIX = "suffix"


class StatsOptions(BaseModel):
    """Options for a single stats run.

    Produced from CLI flags and/or a YAML/JSON config file. Every field is
    validated here so that bad input fails before the runtime is contacted.
    """

    memory_backend: MemoryBackend = Field(
        default=MemoryBackend.PROCMAPS, description="Memory measurement backend"
    )
    use_top: bool = Field(
        default=False, description="Resolve every process of a container via the runtime"
    )
    regex_filter: str | None = Field(default=None, description="Filter container names")
    group_by_prefix: bool = Field(default=False)
    group_by_suffix: bool = Field(default=False)
    group_delimiter: str = Field(default=DEFAULT_GROUP_DELIMITER)
    sort: bool = Field(default=False, description="Sort descending by memory")
    show_total: bool = Field(default=False, description="Only report total memory")
    output_json: bool = Field(default=False, description="Render JSON instead of a table")
    workers: int = Field(default=1, ge=1, le=64, description="Containers collected in parallel")

    model_config = {"extra": "forbid"}

    @field_validator("regex_filter")
    @classmethod
    def validate_regex(cls, v: str | None) -> str | None:
        """Ensure the filter pattern compiles."""
        if v is None:
            return v
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid regular expression {v!r}: {e}") from e
        return v

    @field_validator("group_delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        """Grouping splits on exactly one character."""
        if len(v) != 1:
            raise ValueError(f"Delimiter must be a single character, got {v!r}")
        return v

    @property
    def group_mode(self) -> GroupMode | None:
        """Active grouping mode; prefix wins when both flags are set."""
        if self.group_by_prefix:
            return GroupMode.PREFIX
        if self.group_by_suffix:
            return GroupMode.SUFFIX
        return None

    def compile_filter(self) -> re.Pattern[str] | None:
        if self.regex_filter is None:
            return None
        return re.compile(self.regex_filter)


class ContainerStats(BaseModel):
    """Memory and CPU usage of one container, summed over its processes."""

    id: str
    name: str
    memory_bytes: int = Field(default=0, ge=0, description="Sum over measured processes")
    average_cpu_percent: float = Field(
        default=0.0, ge=0, description="Sum of per-process lifetime CPU averages"
    )

    model_config = {"frozen": True}


class ContainerGroup(BaseModel):
    """Additive fold of the containers that share a grouping key."""

    fix: str = Field(..., description="Grouping key (name prefix or suffix)")
    memory_bytes: int = Field(default=0, ge=0)
    containers: int = Field(default=0, ge=0)
    average_cpu_percent: float = Field(default=0.0, ge=0)

    def add(self, stats: ContainerStats) -> None:
        self.memory_bytes += stats.memory_bytes
        self.average_cpu_percent += stats.average_cpu_percent
        self.containers += 1


class PipelineResult(BaseModel):
    """Output of the transform pipeline: a total, groups, or plain stats."""

    total: int | None = Field(default=None, ge=0)
    groups: list[ContainerGroup] | None = None
    stats: list[ContainerStats] | None = None

    @model_validator(mode="after")
    def check_exactly_one(self) -> PipelineResult:
        """Exactly one of total, groups and stats must be set."""
        populated = [v for v in (self.total, self.groups, self.stats) if v is not None]
        if len(populated) != 1:
            raise ValueError("PipelineResult needs exactly one of total, groups or stats")
        return self

    @property
    def is_total(self) -> bool:
        return self.total is not None

    @property
    def records(self) -> list[ContainerGroup] | list[ContainerStats]:
        """Grouped or plain records; empty for a total."""
        if self.groups is not None:
            return self.groups
        return self.stats or []
