"""Shared constants for container-stats."""

from __future__ import annotations

# Separator used when a container has more than one name.
NAME_SEPARATOR = ", "

# Default single-character delimiter for prefix/suffix grouping.
DEFAULT_GROUP_DELIMITER = "-"

# Container state requested from the runtime during discovery.
RUNNING_STATE = "running"

# Platforms on which the rss and vsz backends are available.
LINUX_PLATFORM_PREFIX = "linux"

# Exit codes used by the CLI.
EXIT_RUNTIME_ERROR = 1
EXIT_CONFIG_ERROR = 2
