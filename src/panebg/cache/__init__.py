"""Persisted pane color cache."""

from .document import CacheDocument, ColorAssignment
from .store import ColorCacheStore

__all__ = ["CacheDocument", "ColorAssignment", "ColorCacheStore"]
