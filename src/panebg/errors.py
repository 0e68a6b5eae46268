"""错误类型

- CacheUnreadable: 缓存文档缺失或损坏，load() 内部恢复为新文档
- GeometryUnavailable: kitty 尺寸查询失败，几何映射走字符数 fallback
- PersistenceWriteFailure: 缓存写入失败，对本次调用致命
- InvalidConfiguration: 参数非法，渲染前拒绝

调色板耗尽不是异常，见 color.allocator.Allocation.exhausted。
"""


class PaneBgError(Exception):
    """所有 kitty-pane-bg 错误的基类"""


class CacheUnreadable(PaneBgError):
    """缓存文档无法解析"""

    def __init__(self, reason: str, detail: str = ""):
        self.reason = reason
        super().__init__(f"{reason}: {detail}" if detail else reason)


class GeometryUnavailable(PaneBgError):
    """终端像素尺寸不可用"""


class PersistenceWriteFailure(PaneBgError):
    """缓存写入失败"""


class InvalidConfiguration(PaneBgError):
    """配置参数非法"""


class ImageWriteFailure(PaneBgError):
    """图像编码或写入失败"""
