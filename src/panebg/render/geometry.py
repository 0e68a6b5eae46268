"""Geometry mapping.

Converts tmux character-cell pane rectangles into pixel rectangles using the
terminal's reported window and cell pixel sizes.
"""

from dataclasses import dataclass, field

from panebg import config
from panebg.errors import InvalidConfiguration
from panebg.models import PaneGeometry, PixelRect
from panebg.telemetry import get_logger, metrics

logger = get_logger(__name__)


@dataclass
class PixelLayout:
    """Result of mapping panes to pixel space.

    Attributes:
        canvas_size: (width, height) of the output image in pixels
        rects: one PixelRect per input pane, same order
        cell_size: cell pixel size actually used
        estimated: True when the canvas size was derived from pane extents
            because the terminal did not report a window size
    """

    canvas_size: tuple[int, int]
    rects: list[PixelRect] = field(default_factory=list)
    cell_size: tuple[float, float] = config.DEFAULT_CELL_SIZE
    estimated: bool = False


def cell_to_pixel(pane: PaneGeometry, cell_size: tuple[float, float]) -> PixelRect:
    """Map one pane's character rectangle to pixels (truncating)."""
    cw, ch = cell_size
    return PixelRect(
        x=int(pane.left * cw),
        y=int(pane.top * ch),
        width=int(pane.width * cw),
        height=int(pane.height * ch),
    )


def derive_canvas_size(
    panes: list[PaneGeometry], cell_size: tuple[float, float]
) -> tuple[int, int]:
    """Canvas size covering every pane: max extents times the cell size."""
    if not panes:
        return (0, 0)
    cw, ch = cell_size
    return (
        int(max(p.right for p in panes) * cw),
        int(max(p.bottom for p in panes) * ch),
    )


def validate_canvas_size(canvas_size: tuple[int, int]) -> None:
    """Reject non-positive or oversized canvases.

    Raises:
        InvalidConfiguration: if either dimension is out of range
    """
    width, height = canvas_size
    if width <= 0 or height <= 0:
        raise InvalidConfiguration(f"Invalid canvas dimensions: {width}x{height}")
    if width > config.MAX_CANVAS_DIMENSION or height > config.MAX_CANVAS_DIMENSION:
        raise InvalidConfiguration(f"Canvas dimensions too large: {width}x{height}")


def map_panes(
    pane_geometries: list[PaneGeometry],
    window_pixel_size: tuple[int, int] | None = None,
    cell_pixel_size: tuple[float, float] | None = None,
) -> PixelLayout:
    """Map pane geometries to a pixel layout.

    Rectangles are not clamped to the canvas: a stale window size may leave a
    pane extending past the edge, and it is drawn as computed.

    Args:
        pane_geometries: Panes in character cells
        window_pixel_size: Terminal window size in pixels, None if unknown
        cell_pixel_size: Cell size in pixels, None if unknown

    Returns:
        PixelLayout

    Raises:
        InvalidConfiguration: if the resulting canvas is empty or too large
    """
    cell_size = cell_pixel_size or config.DEFAULT_CELL_SIZE
    if cell_size[0] <= 0 or cell_size[1] <= 0:
        raise InvalidConfiguration(f"Invalid cell size: {cell_size[0]}x{cell_size[1]}")

    estimated = window_pixel_size is None
    if estimated:
        canvas_size = derive_canvas_size(pane_geometries, cell_size)
        metrics.inc("geometry.fallback")
        logger.info(
            f"[Geometry] Window size unavailable, estimated {canvas_size[0]}x{canvas_size[1]} "
            f"from pane extents (cell {cell_size[0]:.1f}x{cell_size[1]:.1f})"
        )
    else:
        canvas_size = (int(window_pixel_size[0]), int(window_pixel_size[1]))

    validate_canvas_size(canvas_size)

    rects = [cell_to_pixel(pane, cell_size) for pane in pane_geometries]
    return PixelLayout(
        canvas_size=canvas_size, rects=rects, cell_size=cell_size, estimated=estimated
    )
