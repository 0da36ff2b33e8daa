"""Results module - rendering of pipeline output."""

from __future__ import annotations

from container_stats.results.render import (
    build_table,
    format_bytes,
    print_result,
    render_json,
    render_total,
)

__all__ = ["build_table", "format_bytes", "print_result", "render_json", "render_total"]
