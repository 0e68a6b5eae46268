"""Pytest 配置"""

import pytest

from panebg.cache.store import ColorCacheStore
from panebg.models import PaneGeometry
from panebg.telemetry import metrics


@pytest.fixture(autouse=True)
def reset_metrics():
    """每次测试前重置指标"""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def store(tmp_path):
    """临时目录中的缓存存储"""
    return ColorCacheStore(path=tmp_path / "cache" / "pane_colors.json")


@pytest.fixture
def two_panes():
    """左右分屏：%0 活动，%1 非活动"""
    return [
        PaneGeometry(pane_id="@1:%0", left=0, top=0, width=40, height=24, is_active=True, window_id="@1"),
        PaneGeometry(pane_id="@1:%1", left=41, top=0, width=39, height=24, is_active=False, window_id="@1"),
    ]
