"""颜色空间

HSL 颜色限定在 "bright pastel" 子区间内，转换为 RGBA 像素。
"""

import colorsys

from .. import config

RGBA = tuple[int, int, int, int]


def pastel_envelope() -> tuple[tuple[float, float], tuple[float, float]]:
    """返回 pastel 饱和度/亮度范围

    调色板和搜索分配共用此范围。

    Returns:
        ((sat_min, sat_max), (light_min, light_max))
    """
    return config.SATURATION_RANGE, config.LIGHTNESS_RANGE


def hue_distance(a: float, b: float) -> float:
    """色环上两个色相的最短弧长（度）"""
    diff = abs(a - b) % 360.0
    return min(diff, 360.0 - diff)


def _channel(value: float) -> int:
    return max(0, min(255, round(value * 255)))


def to_rgb(hue: float, saturation: float, lightness: float) -> tuple[int, int, int]:
    """HSL → RGB

    Args:
        hue: 色相 [0, 360)
        saturation: 饱和度 [0, 1]
        lightness: 亮度 [0, 1]
    """
    # colorsys 使用 HLS 参数顺序，色相为 [0, 1)
    r, g, b = colorsys.hls_to_rgb((hue % 360.0) / 360.0, lightness, saturation)
    return _channel(r), _channel(g), _channel(b)


def to_pixel(hue: float, saturation: float, lightness: float, opacity: float = 1.0) -> RGBA:
    """HSL → RGBA，alpha 由调用方的 opacity 决定"""
    r, g, b = to_rgb(hue, saturation, lightness)
    return r, g, b, _channel(opacity)


def rgb_to_hex(rgb: tuple[int, ...]) -> str:
    return "#{:02x}{:02x}{:02x}".format(*rgb[:3])
