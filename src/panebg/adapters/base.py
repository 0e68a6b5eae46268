"""外部协作者抽象接口

渲染核心只依赖以下三个窄接口，测试时可用 fixture 数据替换：
- PaneSource: 存活 pane 列表及其字符几何（tmux）
- GeometrySource: 终端窗口/字符单元像素尺寸（kitty）
- BackgroundSink: 把生成的图片设为终端背景（kitty）

设计原则：
1. 最小接口：只定义渲染所需的操作
2. 异步优先：所有外部 IO 都是 async
3. 不重试：失败直接返回给调用方
"""

from abc import ABC, abstractmethod

from ..models import PaneGeometry, WindowGeometry


class PaneSource(ABC):
    """Pane 列表来源"""

    @property
    @abstractmethod
    def name(self) -> str:
        """来源名称（如 "tmux"）"""

    @abstractmethod
    async def list_panes(self) -> list[PaneGeometry]:
        """获取存活 pane

        Returns:
            pane 几何列表（绘制顺序）
        """


class GeometrySource(ABC):
    """终端像素尺寸来源"""

    @abstractmethod
    async def get_window_geometry(self) -> WindowGeometry | None:
        """获取窗口像素信息

        Returns:
            WindowGeometry，不可用时返回 None（触发字符数 fallback）
        """


class BackgroundSink(ABC):
    """终端背景设置"""

    @abstractmethod
    async def set_background(self, image_path: str) -> bool:
        """设置背景图片

        Returns:
            是否成功
        """

    async def clear_background(self) -> bool:
        """清除背景图片"""
        return False


class StaticPaneSource(PaneSource):
    """固定 pane 列表（测试、演示用）"""

    name = "static"

    def __init__(self, panes: list[PaneGeometry]):
        self._panes = list(panes)

    async def list_panes(self) -> list[PaneGeometry]:
        return list(self._panes)


class StaticGeometrySource(GeometrySource):
    """固定窗口几何（None 表示不可用）"""

    def __init__(self, geometry: WindowGeometry | None = None):
        self._geometry = geometry

    async def get_window_geometry(self) -> WindowGeometry | None:
        return self._geometry
