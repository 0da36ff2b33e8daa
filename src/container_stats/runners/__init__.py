"""Runners module - container runtime adapters."""

from __future__ import annotations

from container_stats.runners.docker_runtime import DockerRuntime, parse_top_pids

__all__ = ["DockerRuntime", "parse_top_pids"]
