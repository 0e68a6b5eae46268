"""Tests for geometry mapping."""

import pytest

from panebg.errors import InvalidConfiguration
from panebg.models import PaneGeometry, PixelRect
from panebg.render.geometry import cell_to_pixel, derive_canvas_size, map_panes
from panebg.telemetry import metrics


class TestCellToPixel:
    """Tests for cell_to_pixel."""

    def test_integer_cells(self):
        pane = PaneGeometry(pane_id="p", left=41, top=0, width=39, height=24)
        assert cell_to_pixel(pane, (10.0, 20.0)) == PixelRect(410, 0, 390, 480)

    def test_truncates_fractional_pixels(self):
        pane = PaneGeometry(pane_id="p", left=3, top=1, width=5, height=2)
        assert cell_to_pixel(pane, (7.5, 15.5)) == PixelRect(22, 15, 37, 31)


class TestMapPanes:
    """Tests for map_panes."""

    def test_uses_reported_window_size(self, two_panes):
        layout = map_panes(two_panes, (1600, 960), (20.0, 40.0))
        assert layout.canvas_size == (1600, 960)
        assert layout.estimated is False
        assert layout.rects[0] == PixelRect(0, 0, 800, 960)
        assert layout.rects[1] == PixelRect(820, 0, 780, 960)
        assert metrics.get_counter("geometry.fallback") == 0

    def test_fallback_estimates_from_extents(self, two_panes):
        """No window size: derive canvas from pane extents and default cell size"""
        layout = map_panes(two_panes)
        assert layout.estimated is True
        assert layout.cell_size == (10.0, 20.0)
        assert layout.canvas_size == (800, 480)
        assert metrics.get_counter("geometry.fallback") == 1

    def test_fallback_with_known_cell_size(self, two_panes):
        layout = map_panes(two_panes, None, (8.0, 16.0))
        assert layout.canvas_size == (640, 384)

    def test_rects_not_clamped(self):
        pane = PaneGeometry(pane_id="p", left=50, top=0, width=50, height=10)
        layout = map_panes([pane], (600, 200), (10.0, 20.0))
        assert layout.rects[0].right == 1000

    def test_no_panes_no_window_is_invalid(self):
        with pytest.raises(InvalidConfiguration):
            map_panes([])

    def test_oversized_canvas_is_invalid(self, two_panes):
        with pytest.raises(InvalidConfiguration):
            map_panes(two_panes, (40000, 100))

    def test_zero_window_is_invalid(self, two_panes):
        with pytest.raises(InvalidConfiguration):
            map_panes(two_panes, (0, 480))

    def test_invalid_cell_size(self, two_panes):
        with pytest.raises(InvalidConfiguration):
            map_panes(two_panes, None, (0.0, 20.0))


def test_derive_canvas_size_empty():
    assert derive_canvas_size([], (10.0, 20.0)) == (0, 0)
