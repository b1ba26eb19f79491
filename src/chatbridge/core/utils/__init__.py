"""
Core utilities module.

Provides shared utility functions used across all layers.
"""

from chatbridge.core.utils.paths import (
    ensure_directory,
    path_exists,
    sanitize_component,
    validate_within_boundary,
)
from chatbridge.core.utils.time import IsoClock, format_iso_ms, parse_iso, utc_now

__all__ = [
    "IsoClock",
    "ensure_directory",
    "format_iso_ms",
    "parse_iso",
    "path_exists",
    "sanitize_component",
    "utc_now",
    "validate_within_boundary",
]
