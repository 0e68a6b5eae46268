"""Kitty geometry source and background sink."""

import os
from pathlib import Path

from panebg import config
from panebg.adapters.base import BackgroundSink, GeometrySource
from panebg.errors import GeometryUnavailable
from panebg.models import WindowGeometry
from panebg.telemetry import get_logger, metrics

from .client import KittyClient
from .escape import background_sequence, encode_image, write_tty

logger = get_logger(__name__)


def _pick(items: list[dict]) -> dict | None:
    """Focused item if any, else the first one."""
    if not items:
        return None
    for item in items:
        if item.get("is_focused"):
            return item
    return items[0]


def _cell_size(window: dict) -> tuple[float, float]:
    """Cell size from the window's pixel geometry, default when implausible."""
    columns = window.get("columns") or 0
    lines = window.get("lines") or 0
    geometry = window.get("geometry") or {}
    px_width = geometry.get("width") if isinstance(geometry, dict) else None
    px_height = geometry.get("height") if isinstance(geometry, dict) else None

    if columns > 0 and lines > 0 and px_width and px_height:
        cell_width = px_width / columns
        cell_height = px_height / lines
        if 0 < cell_width < config.MAX_SANE_CELL_SIZE and 0 < cell_height < config.MAX_SANE_CELL_SIZE:
            return (cell_width, cell_height)

    return config.DEFAULT_CELL_SIZE


def parse_window_geometry(os_windows: list[dict]) -> WindowGeometry:
    """Derive window pixel geometry from `kitten @ ls` output.

    Raises:
        GeometryUnavailable: if no window with a terminal grid is present
    """
    os_window = _pick(os_windows)
    if os_window is None:
        raise GeometryUnavailable("No kitty windows found")

    tab = _pick(os_window.get("tabs") or [])
    if tab is None:
        raise GeometryUnavailable("No tabs found in kitty window")

    window = _pick(tab.get("windows") or [])
    if window is None:
        raise GeometryUnavailable("No sub-windows found in kitty tab")

    columns = window.get("columns") or 0
    lines = window.get("lines") or 0
    if columns <= 0 or lines <= 0:
        raise GeometryUnavailable(f"Invalid kitty grid: {columns}x{lines}")

    cell_width, cell_height = _cell_size(window)
    return WindowGeometry(
        width=int(columns * cell_width),
        height=int(lines * cell_height),
        cell_width=cell_width,
        cell_height=cell_height,
    )


class KittyGeometrySource(GeometrySource):
    """GeometrySource backed by `kitten @ ls`."""

    def __init__(self, client: KittyClient | None = None):
        self._client = client or KittyClient()

    @property
    def client(self) -> KittyClient:
        return self._client

    async def get_window_geometry(self) -> WindowGeometry | None:
        try:
            return parse_window_geometry(await self._client.ls())
        except GeometryUnavailable as e:
            metrics.inc("kitty.geometry_unavailable")
            logger.info(f"[Kitty] Window geometry unavailable: {e}")
            return None


class KittyBackgroundSink(BackgroundSink):
    """BackgroundSink using kitty's set-background-image.

    Falls back to an OSC 20 escape sequence written to the terminal when
    remote control fails (wrapped in tmux passthrough when inside tmux).
    """

    def __init__(
        self,
        client: KittyClient | None = None,
        environ: dict[str, str] | None = None,
        tty_path: Path = config.TTY_PATH,
    ):
        self._client = client or KittyClient()
        self._environ = os.environ if environ is None else environ
        self._tty_path = tty_path

    def _send_sequence(self, payload: str) -> bool:
        in_tmux = bool(self._environ.get("TMUX"))
        method = "tmux_passthrough" if in_tmux else "osc20"
        ok = write_tty(background_sequence(payload, in_tmux), self._tty_path)
        metrics.inc("kitty.fallback", {"method": method, "ok": str(ok).lower()})
        if ok:
            logger.info(f"[Kitty] Sent background via {method}")
        return ok

    async def set_background(self, image_path: str) -> bool:
        if await self._client.set_background_image(image_path):
            return True

        logger.warning(f"[Kitty] Remote control failed for {image_path}, trying escape sequence")
        try:
            payload = encode_image(image_path)
        except OSError as e:
            logger.warning(f"[Kitty] Cannot read image {image_path}: {e}")
            return False
        return self._send_sequence(payload)

    async def clear_background(self) -> bool:
        if await self._client.clear_background_image():
            return True

        logger.warning("[Kitty] Remote control failed, clearing via escape sequence")
        return self._send_sequence("")
