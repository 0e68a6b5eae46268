"""Tests for the kitty geometry source and background sink."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from panebg.adapters.kitty.client import KittyClient
from panebg.adapters.kitty.escape import encode_image, osc20, tmux_passthrough
from panebg.adapters.kitty.source import (
    KittyBackgroundSink,
    KittyGeometrySource,
    parse_window_geometry,
)
from panebg.errors import GeometryUnavailable
from panebg.models import WindowGeometry
from panebg.telemetry import metrics


def _ls(columns=80, lines=24, geometry=None, focused=True):
    window = {"id": 1, "columns": columns, "lines": lines, "is_focused": focused}
    if geometry is not None:
        window["geometry"] = geometry
    return [{"id": 1, "is_focused": True, "tabs": [{"id": 1, "is_focused": True, "windows": [window]}]}]


class TestParseWindowGeometry:
    """Tests for parse_window_geometry."""

    def test_cell_size_from_pixel_geometry(self):
        geometry = parse_window_geometry(_ls(geometry={"width": 720, "height": 432}))
        assert geometry == WindowGeometry(width=720, height=432, cell_width=9.0, cell_height=18.0)

    def test_default_cell_size_without_pixel_geometry(self):
        geometry = parse_window_geometry(_ls())
        assert geometry == WindowGeometry(width=800, height=480, cell_width=10.0, cell_height=20.0)

    def test_implausible_cell_size_uses_default(self):
        geometry = parse_window_geometry(_ls(geometry={"width": 80 * 100, "height": 480}))
        assert geometry.cell_pixel_size == (10.0, 20.0)

    def test_prefers_focused_window(self):
        data = _ls(focused=False)
        windows = data[0]["tabs"][0]["windows"]
        windows.append({"id": 2, "columns": 100, "lines": 50, "is_focused": True})
        assert parse_window_geometry(data).window_pixel_size == (1000, 1000)

    @pytest.mark.parametrize(
        "data",
        [
            [],
            [{"tabs": []}],
            [{"tabs": [{"windows": []}]}],
            _ls(columns=0),
        ],
    )
    def test_unavailable(self, data):
        with pytest.raises(GeometryUnavailable):
            parse_window_geometry(data)


class TestKittyGeometrySource:
    """Tests for KittyGeometrySource."""

    @pytest.mark.asyncio
    async def test_returns_geometry(self):
        client = MagicMock(spec=KittyClient)
        client.ls = AsyncMock(return_value=_ls())
        geometry = await KittyGeometrySource(client).get_window_geometry()
        assert geometry.window_pixel_size == (800, 480)

    @pytest.mark.asyncio
    async def test_unavailable_returns_none(self):
        client = MagicMock(spec=KittyClient)
        client.ls = AsyncMock(side_effect=GeometryUnavailable("remote control disabled"))
        assert await KittyGeometrySource(client).get_window_geometry() is None
        assert metrics.get_counter("kitty.geometry_unavailable") == 1


class TestKittyBackgroundSink:
    """Tests for KittyBackgroundSink."""

    @pytest.fixture
    def image(self, tmp_path):
        path = tmp_path / "bg.png"
        path.write_bytes(b"\x89PNG data")
        return path

    def _sink(self, ok, tty, environ=None):
        client = MagicMock(spec=KittyClient)
        client.set_background_image = AsyncMock(return_value=ok)
        client.clear_background_image = AsyncMock(return_value=ok)
        return KittyBackgroundSink(client, environ=environ or {}, tty_path=tty)

    @pytest.mark.asyncio
    async def test_set_background(self, image, tmp_path):
        sink = self._sink(True, tmp_path / "tty")
        assert await sink.set_background(str(image)) is True
        sink._client.set_background_image.assert_awaited_once_with(str(image))
        assert not (tmp_path / "tty").exists()

    @pytest.mark.asyncio
    async def test_remote_failure_falls_back_to_osc20(self, image, tmp_path):
        tty = tmp_path / "tty"
        sink = self._sink(False, tty)
        assert await sink.set_background(str(image)) is True
        assert tty.read_text() == osc20(encode_image(image))
        assert metrics.get_counter("kitty.fallback", {"method": "osc20", "ok": "true"}) == 1

    @pytest.mark.asyncio
    async def test_remote_failure_in_tmux_uses_passthrough(self, image, tmp_path):
        tty = tmp_path / "tty"
        sink = self._sink(False, tty, environ={"TMUX": "/tmp/tmux-1000/default,1,0"})
        assert await sink.set_background(str(image)) is True
        assert tty.read_text() == tmux_passthrough(osc20(encode_image(image)))
        assert metrics.get_counter("kitty.fallback", {"method": "tmux_passthrough", "ok": "true"}) == 1

    @pytest.mark.asyncio
    async def test_set_background_failure(self, image, tmp_path):
        sink = self._sink(False, tmp_path / "missing" / "tty")
        assert await sink.set_background(str(image)) is False
        assert metrics.get_counter("kitty.fallback", {"method": "osc20", "ok": "false"}) == 1

    @pytest.mark.asyncio
    async def test_unreadable_image(self, tmp_path):
        tty = tmp_path / "tty"
        sink = self._sink(False, tty)
        assert await sink.set_background(str(tmp_path / "missing.png")) is False
        assert not tty.exists()

    @pytest.mark.asyncio
    async def test_clear_background(self, tmp_path):
        sink = self._sink(True, tmp_path / "tty")
        assert await sink.clear_background() is True
        sink._client.clear_background_image.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_clear_falls_back_to_empty_sequence(self, tmp_path):
        tty = tmp_path / "tty"
        sink = self._sink(False, tty)
        assert await sink.clear_background() is True
        assert tty.read_text() == osc20("")

    @pytest.mark.asyncio
    async def test_clear_in_tmux_uses_passthrough(self, tmp_path):
        tty = tmp_path / "tty"
        sink = self._sink(False, tty, environ={"TMUX": "/tmp/tmux"})
        assert await sink.clear_background() is True
        assert tty.read_text() == tmux_passthrough(osc20(""))
