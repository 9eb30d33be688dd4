"""Base renderer protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from archlayout.types import Diagram


@runtime_checkable
class Renderer(Protocol):
    """Protocol that all renderers must implement."""

    def render(self, diagram: Diagram) -> str:
        """Render a positioned diagram to an output string."""
        ...
