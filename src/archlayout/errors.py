"""Exceptions raised by archlayout.

The layout pipeline itself never raises on malformed graphs; these errors
come from its collaborators (model loading, configuration, view selection).
"""

from __future__ import annotations


class ArchLayoutError(Exception):
    """Base class for all archlayout errors."""


class ModelError(ArchLayoutError):
    """The architecture model is missing, malformed, or lacks the requested element."""


class ConfigError(ArchLayoutError):
    """A layout configuration value is invalid."""
