"""Pane layout renderer module."""

from .compositor import Compositor, Layer, render
from .geometry import PixelLayout, map_panes
from .output import write_png
from .pipeline import RenderPipeline, RenderResult

__all__ = [
    "Compositor",
    "Layer",
    "PixelLayout",
    "RenderPipeline",
    "RenderResult",
    "map_panes",
    "render",
    "write_png",
]
