"""Tmux adapter for kitty-pane-bg."""

from .client import TmuxClient
from .source import TmuxPaneSource, make_pane_key, sanitize_id

__all__ = ["TmuxClient", "TmuxPaneSource", "make_pane_key", "sanitize_id"]
