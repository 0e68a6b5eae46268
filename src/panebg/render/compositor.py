"""Compositor.

Paints pane rectangles onto a transparent RGBA canvas and outlines the active
pane. Fills are straight overwrites (no blending between panes); tmux panes
never overlap, so large canvases are filled in parallel across panes.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np
from PIL import Image

from panebg import config
from panebg.cache.document import ColorAssignment
from panebg.color.space import RGBA, to_pixel
from panebg.errors import InvalidConfiguration
from panebg.models import PixelRect
from panebg.telemetry import get_logger, metrics

logger = get_logger(__name__)


@dataclass(frozen=True)
class Layer:
    """One pane to paint: where, which color, how opaque."""

    rect: PixelRect
    color: ColorAssignment
    opacity: float

    @property
    def rgba(self) -> RGBA:
        return to_pixel(self.color.hue, self.color.saturation, self.color.lightness, self.opacity)


def _clip(rect: PixelRect, width: int, height: int) -> tuple[slice, slice] | None:
    """Row/column slices of the part of rect inside the canvas, None if empty."""
    x0, y0 = max(rect.x, 0), max(rect.y, 0)
    x1, y1 = min(rect.right, width), min(rect.bottom, height)
    if x0 >= x1 or y0 >= y1:
        return None
    return slice(y0, y1), slice(x0, x1)


def rects_disjoint(rects: list[PixelRect]) -> bool:
    """True when no two rectangles share a pixel."""
    for i, a in enumerate(rects):
        for b in rects[i + 1 :]:
            if a.overlaps(b):
                return False
    return True


class Compositor:
    """RGBA canvas painter"""

    def __init__(
        self,
        border_width: int = config.BORDER_WIDTH,
        border_color: RGBA = config.BORDER_COLOR,
        parallel_threshold: int = config.PARALLEL_FILL_THRESHOLD,
        max_workers: int = config.MAX_FILL_WORKERS,
    ):
        """Initialize Compositor.

        Args:
            border_width: Active pane border width in pixels
            border_color: Active pane border RGBA
            parallel_threshold: Total fill area above which panes are filled
                on a thread pool
            max_workers: Thread pool size
        """
        self._border_width = border_width
        self._border_color = np.array(border_color, dtype=np.uint8)
        self._parallel_threshold = parallel_threshold
        self._max_workers = max_workers

    def render(
        self,
        canvas_size: tuple[int, int],
        layers: list[Layer],
        active_pane_index: int | None = None,
    ) -> Image.Image:
        """Render the pane layout.

        Args:
            canvas_size: (width, height) in pixels
            layers: Panes in paint order
            active_pane_index: Index into layers of the pane to outline

        Returns:
            RGBA PIL image of canvas_size

        Raises:
            InvalidConfiguration: for non-positive canvas size or opacity
                outside [0, 1]
        """
        width, height = canvas_size
        if width <= 0 or height <= 0:
            raise InvalidConfiguration(f"Invalid canvas dimensions: {width}x{height}")
        for layer in layers:
            if not 0.0 <= layer.opacity <= 1.0:
                raise InvalidConfiguration(f"Opacity must be within [0, 1], got {layer.opacity}")

        canvas = np.zeros((height, width, 4), dtype=np.uint8)

        if self._should_parallelize(layers):
            metrics.inc("compositor.parallel")
            workers = min(self._max_workers, len(layers))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # list() re-raises any worker exception
                list(executor.map(lambda layer: self._fill(canvas, layer), layers))
        else:
            for layer in layers:
                self._fill(canvas, layer)

        if active_pane_index is not None:
            if 0 <= active_pane_index < len(layers):
                self._draw_border(canvas, layers[active_pane_index].rect)
            else:
                logger.warning(f"[Compositor] Active pane index {active_pane_index} out of range")

        return Image.fromarray(canvas)

    def _should_parallelize(self, layers: list[Layer]) -> bool:
        if len(layers) < 2 or self._max_workers < 2:
            return False
        if sum(layer.rect.area for layer in layers) <= self._parallel_threshold:
            return False
        if not rects_disjoint([layer.rect for layer in layers]):
            logger.debug("[Compositor] Overlapping panes, filling serially")
            return False
        return True

    def _fill(self, canvas: np.ndarray, layer: Layer) -> None:
        height, width = canvas.shape[:2]
        region = _clip(layer.rect, width, height)
        if region is None:
            logger.debug(f"[Compositor] Pane {layer.color.pane_id} is outside the canvas")
            return
        rows, cols = region
        canvas[rows, cols] = layer.rgba

    def _draw_border(self, canvas: np.ndarray, rect: PixelRect) -> None:
        bw = self._border_width
        if bw <= 0:
            return
        height, width = canvas.shape[:2]
        edges = [
            PixelRect(rect.x, rect.y, rect.width, bw),  # top
            PixelRect(rect.x, rect.bottom - bw, rect.width, bw),  # bottom
            PixelRect(rect.x, rect.y, bw, rect.height),  # left
            PixelRect(rect.right - bw, rect.y, bw, rect.height),  # right
        ]
        for edge in edges:
            # edges never extend outside the pane itself
            clipped = PixelRect(
                max(edge.x, rect.x),
                max(edge.y, rect.y),
                min(edge.right, rect.right) - max(edge.x, rect.x),
                min(edge.bottom, rect.bottom) - max(edge.y, rect.y),
            )
            region = _clip(clipped, width, height)
            if region is not None:
                rows, cols = region
                canvas[rows, cols] = self._border_color


_default_compositor = Compositor()


def render(
    canvas_size: tuple[int, int],
    layers: list[Layer],
    active_pane_index: int | None = None,
) -> Image.Image:
    """Render with the default Compositor."""
    return _default_compositor.render(canvas_size, layers, active_pane_index)
