"""数据模型定义"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PaneGeometry:
    """Pane 几何信息（字符单元）

    每次渲染从 tmux 重新获取，不持久化。
    """

    pane_id: str
    left: int
    top: int
    width: int
    height: int
    is_active: bool = False
    window_id: str = ""

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height


@dataclass(frozen=True)
class WindowGeometry:
    """终端窗口像素信息

    Attributes:
        width, height: 窗口像素尺寸
        cell_width, cell_height: 字符单元像素尺寸
    """

    width: int
    height: int
    cell_width: float
    cell_height: float

    @property
    def window_pixel_size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def cell_pixel_size(self) -> tuple[float, float]:
        return (self.cell_width, self.cell_height)


@dataclass(frozen=True)
class PixelRect:
    """像素矩形（不裁剪，可能超出画布）"""

    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return max(self.width, 0) * max(self.height, 0)

    def overlaps(self, other: "PixelRect") -> bool:
        """两个矩形是否有公共像素"""
        return (
            self.x < other.right
            and other.x < self.right
            and self.y < other.bottom
            and other.y < self.bottom
        )
