"""Configuration loading and validation.

Options come from YAML or JSON files and/or CLI flags. Every failure here is
surfaced as a ConfigurationError before any container is queried.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import psutil
import yaml
from pydantic import ValidationError

from container_stats.core.exceptions import ConfigurationError
from container_stats.core.schemas import MemoryBackend, StatsOptions


def build_options(**values: Any) -> StatsOptions:
    """Validate raw option values into StatsOptions.

    Raises:
        ConfigurationError: If any value is invalid
    """
    try:
        return StatsOptions.model_validate(values)
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e)) from e


def load_config(path: Path | str, overrides: dict[str, Any] | None = None) -> StatsOptions:
    """Load and validate a stats configuration file.

    Args:
        path: Path to YAML or JSON configuration file
        overrides: Values that take precedence over the file (e.g. CLI flags)

    Returns:
        Validated StatsOptions object

    Raises:
        ConfigurationError: If the file is missing, has an unsupported format,
            cannot be parsed or contains invalid options
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()
    try:
        with open(path, encoding="utf-8") as f:
            if suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            elif suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigurationError(
                    f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json"
                )
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to parse {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {path} must be a mapping")

    data.update(overrides or {})
    return build_options(**data)


def validate_backend(backend: MemoryBackend | str, platform: str | None = None) -> MemoryBackend:
    """Ensure ``backend`` names a known backend that runs on ``platform``.

    ``platform`` defaults to ``sys.platform``. ``procmaps`` also needs psutil
    to expose process memory maps, which it does not on every platform.

    Raises:
        ConfigurationError: If the backend is unknown or unsupported here
    """
    try:
        backend = MemoryBackend(backend)
    except ValueError as e:
        valid = ", ".join(b.value for b in MemoryBackend)
        raise ConfigurationError(
            f"Unsupported memory backend {backend!r}. Options are: {valid}"
        ) from e

    platform = platform or sys.platform
    if not backend.is_supported_on(platform):
        raise ConfigurationError(
            f"Memory backend {backend.value!r} is only available on linux (running on {platform})"
        )
    if backend is MemoryBackend.PROCMAPS and not hasattr(psutil.Process, "memory_maps"):
        raise ConfigurationError(
            f"Memory backend {backend.value!r} is not supported on {platform}: "
            "psutil cannot read process memory maps here"
        )
    return backend


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        location = ".".join(str(loc) for loc in err["loc"]) or "options"
        parts.append(f"{location}: {err['msg']}")
    return "Invalid configuration: " + "; ".join(parts)
