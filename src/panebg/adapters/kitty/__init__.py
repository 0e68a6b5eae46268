"""Kitty adapter for kitty-pane-bg."""

from .client import KittyClient
from .discovery import discover_kitty_pid, discover_target, find_kitty_in_process_tree
from .source import KittyBackgroundSink, KittyGeometrySource, parse_window_geometry

__all__ = [
    "KittyBackgroundSink",
    "KittyClient",
    "KittyGeometrySource",
    "discover_kitty_pid",
    "discover_target",
    "find_kitty_in_process_tree",
    "parse_window_geometry",
]
