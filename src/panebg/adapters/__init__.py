"""External collaborators: pane listing, terminal geometry, background."""

from .base import (
    BackgroundSink,
    GeometrySource,
    PaneSource,
    StaticGeometrySource,
    StaticPaneSource,
)

__all__ = [
    "BackgroundSink",
    "GeometrySource",
    "PaneSource",
    "StaticGeometrySource",
    "StaticPaneSource",
]
