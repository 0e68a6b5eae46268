"""Render Pipeline

Runs one render: collect panes and terminal geometry, reconcile the color
cache, composite the image, write it, then persist the cache.
"""

from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path

from panebg import config
from panebg.adapters.base import GeometrySource, PaneSource
from panebg.cache.document import CacheDocument
from panebg.cache.store import ColorCacheStore
from panebg.errors import InvalidConfiguration, PersistenceWriteFailure
from panebg.models import PaneGeometry
from panebg.telemetry import get_logger, metrics

from .compositor import Compositor, Layer
from .geometry import PixelLayout, map_panes
from .output import validate_output_path, write_png

logger = get_logger(__name__)


@dataclass
class RenderResult:
    """Outcome of one render.

    Attributes:
        output_path: Written image
        canvas_size: Image size in pixels
        pane_count: Number of panes drawn
        newly_assigned: Pane IDs that received a new color
        estimated: Canvas size was derived from pane extents
        cache_saved: False when the image was written but the cache was not
        cache_error: Persistence error message, if any
    """

    output_path: Path
    canvas_size: tuple[int, int]
    pane_count: int
    newly_assigned: set[str] = field(default_factory=set)
    estimated: bool = False
    cache_saved: bool = True
    cache_error: str | None = None


def validate_opacity(opacity: float | None) -> None:
    """Raises InvalidConfiguration for opacity outside [0, 1]."""
    if opacity is None:
        return
    if not 0.0 <= opacity <= 1.0:
        raise InvalidConfiguration(f"Opacity must be within [0, 1], got {opacity}")


def build_layers(
    panes: list[PaneGeometry], layout: PixelLayout, doc: CacheDocument
) -> tuple[list[Layer], int | None]:
    """Pair each pane's pixel rect with its cached color.

    Returns:
        (layers, index of the active pane or None)
    """
    layers: list[Layer] = []
    active_index: int | None = None
    for pane, rect in zip(panes, layout.rects):
        assignment = doc.assignments.get(pane.pane_id)
        if assignment is None:
            logger.warning(f"[Pipeline] No color for pane {pane.pane_id}, skipping")
            continue
        if pane.is_active and active_index is None:
            active_index = len(layers)
        layers.append(Layer(rect=rect, color=assignment, opacity=doc.opacity))
    return layers, active_index


class RenderPipeline:
    """Render Pipeline

    Data flow:
        list_panes() → get_window_geometry() → map_panes()
        → [lock] load() → reconcile() → render() → write_png() → save() [unlock]
    """

    def __init__(
        self,
        pane_source: PaneSource,
        geometry_source: GeometrySource,
        store: ColorCacheStore,
        compositor: Compositor | None = None,
    ):
        """Initialize the render pipeline.

        Args:
            pane_source: Live pane provider
            geometry_source: Terminal pixel geometry provider
            store: Color cache store for this render
            compositor: Canvas painter (default settings if None)
        """
        self._pane_source = pane_source
        self._geometry_source = geometry_source
        self._store = store
        self._compositor = compositor or Compositor()

    @property
    def store(self) -> ColorCacheStore:
        return self._store

    async def collect(self) -> tuple[list[PaneGeometry], PixelLayout]:
        """Query panes and geometry and map them to pixel space.

        Raises:
            InvalidConfiguration: too many panes or an empty canvas
        """
        panes = await self._pane_source.list_panes()
        if len(panes) > config.MAX_PANES:
            raise InvalidConfiguration(f"Too many panes: {len(panes)}")

        geometry = await self._geometry_source.get_window_geometry()
        if geometry is None:
            layout = map_panes(panes)
        else:
            layout = map_panes(panes, geometry.window_pixel_size, geometry.cell_pixel_size)

        logger.info(
            f"[Pipeline] {len(panes)} panes on {layout.canvas_size[0]}x{layout.canvas_size[1]} canvas"
            + (" (estimated)" if layout.estimated else "")
        )
        return panes, layout

    async def render(self, output_path: str | Path, opacity: float | None = None) -> RenderResult:
        """Execute one render.

        Args:
            output_path: PNG file to write
            opacity: Fill opacity; None keeps the cached document's opacity

        Returns:
            RenderResult (cache_saved=False if the cache could not be locked
            or persisted; the image is still written)

        Raises:
            InvalidConfiguration: before any work for bad opacity/output/canvas
            ImageWriteFailure: if the image could not be written
        """
        validate_opacity(opacity)
        path = validate_output_path(output_path)

        panes, layout = await self.collect()

        with ExitStack() as stack:
            lock_error: str | None = None
            try:
                stack.enter_context(self._store.locked())
            except PersistenceWriteFailure as e:
                # Render anyway; the cache is left untouched
                logger.warning(f"[Pipeline] Rendering without cache lock: {e}")
                lock_error = str(e)

            doc = self._store.load()
            if opacity is not None and opacity != doc.opacity:
                doc = doc.model_copy(update={"opacity": opacity})

            doc, newly_assigned = self._store.reconcile(doc, [p.pane_id for p in panes])
            if newly_assigned:
                logger.info(f"[Pipeline] Assigned colors to {len(newly_assigned)} new panes")

            layers, active_index = build_layers(panes, layout, doc)
            metrics.gauge("render.panes", len(layers))
            image = self._compositor.render(layout.canvas_size, layers, active_index)
            written = write_png(image, path)

            result = RenderResult(
                output_path=written,
                canvas_size=layout.canvas_size,
                pane_count=len(layers),
                newly_assigned=newly_assigned,
                estimated=layout.estimated,
            )

            if lock_error is not None:
                result.cache_saved = False
                result.cache_error = lock_error
                return result

            try:
                self._store.save(doc)
            except PersistenceWriteFailure as e:
                logger.error(f"[Pipeline] Image written but cache not saved: {e}")
                result.cache_saved = False
                result.cache_error = str(e)

        return result
