"""Tests for TmuxPaneSource."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from panebg.adapters.tmux.client import TmuxClient
from panebg.adapters.tmux.source import TmuxPaneSource, make_pane_key, sanitize_id
from panebg.models import PaneGeometry


def _row(pane_id="%0", window_id="@1", x=0, y=0, width=80, height=24, active=False):
    return {
        "pane_id": pane_id,
        "window_id": window_id,
        "x": x,
        "y": y,
        "width": width,
        "height": height,
        "active": active,
    }


class TestPaneKey:
    """Tests for pane key helpers."""

    def test_make_pane_key(self):
        assert make_pane_key("@1", "%3") == "@1:%3"

    def test_sanitize_strips_unexpected_characters(self):
        assert sanitize_id("%3;rm -rf /") == "%3rm-rf"

    def test_sanitize_truncates(self):
        assert len(sanitize_id("%" + "9" * 100)) == 50


class TestBuild:
    """Tests for TmuxPaneSource.build."""

    def test_build(self):
        source = TmuxPaneSource(client=MagicMock(spec=TmuxClient))
        panes = source.build([_row(active=True), _row(pane_id="%1", x=81, width=79)])

        assert panes == [
            PaneGeometry(pane_id="@1:%0", left=0, top=0, width=80, height=24, is_active=True, window_id="@1"),
            PaneGeometry(pane_id="@1:%1", left=81, top=0, width=79, height=24, is_active=False, window_id="@1"),
        ]

    def test_same_pane_number_in_different_windows(self):
        source = TmuxPaneSource(client=MagicMock(spec=TmuxClient))
        panes = source.build([_row(window_id="@1"), _row(window_id="@2")])
        assert [p.pane_id for p in panes] == ["@1:%0", "@2:%0"]

    def test_skips_zero_size_and_malformed_rows(self):
        source = TmuxPaneSource(client=MagicMock(spec=TmuxClient))
        panes = source.build([
            _row(pane_id="%0", width=0),
            {"pane_id": "%1"},
            _row(pane_id="%2", height="abc"),
            _row(pane_id="%3"),
        ])
        assert [p.pane_id for p in panes] == ["@1:%3"]


class TestListPanes:
    """Tests for TmuxPaneSource.list_panes."""

    def test_name(self):
        assert TmuxPaneSource(client=MagicMock(spec=TmuxClient)).name == "tmux"

    def test_default_client_uses_socket(self):
        source = TmuxPaneSource(socket_path="/tmp/test.sock")
        assert source.client._socket_path == "/tmp/test.sock"

    @pytest.mark.asyncio
    async def test_list_panes(self):
        client = MagicMock(spec=TmuxClient)
        client.list_panes = AsyncMock(return_value=[_row(active=True)])
        source = TmuxPaneSource(client=client, all_panes=True)

        panes = await source.list_panes()

        assert [p.pane_id for p in panes] == ["@1:%0"]
        client.list_panes.assert_awaited_once_with(all_panes=True)

    @pytest.mark.asyncio
    async def test_list_panes_tmux_unavailable(self):
        client = MagicMock(spec=TmuxClient)
        client.list_panes = AsyncMock(return_value=[])

        assert await TmuxPaneSource(client=client).list_panes() == []
