"""Pastel color model and distinct hue allocation."""

from .allocator import Allocation, AllocationSlot, HueAllocator, TieBreak, allocate, draw_envelope
from .space import hue_distance, pastel_envelope, to_pixel, to_rgb

__all__ = [
    "Allocation",
    "AllocationSlot",
    "HueAllocator",
    "TieBreak",
    "allocate",
    "draw_envelope",
    "hue_distance",
    "pastel_envelope",
    "to_pixel",
    "to_rgb",
]
