"""Renderers that consume the positioned Diagram IR."""

from archlayout.renderers.base import Renderer
from archlayout.renderers.layout_json import JsonRenderer, diagram_to_dict

__all__ = ["JsonRenderer", "Renderer", "diagram_to_dict"]
