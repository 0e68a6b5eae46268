"""kitty-pane-bg 配置

配置分为以下几类：
- 缓存配置：颜色缓存文件位置、版本
- 颜色配置：固定调色板、色相搜索精度、最小色相距离
- 几何配置：默认字符单元尺寸、画布上限
- 合成配置：边框、并行填充阈值
- tmux 配置：自动生成背景的 hook 列表
"""

import os
from pathlib import Path

# === 缓存配置 ===
CACHE_DIR = Path(
    os.environ.get("KITTY_PANE_BG_CACHE_DIR")
    or Path(os.environ.get("XDG_CACHE_HOME") or Path.home() / ".cache") / "kitty-pane-bg"
)
CACHE_FILE = CACHE_DIR / "pane_colors.json"  # 颜色缓存文档
CACHE_VERSION = 1  # 文档 schema 版本，不匹配视为损坏

# === 颜色配置 ===
DEFAULT_OPACITY = 0.3  # 默认 pane 填充不透明度
SATURATION_RANGE = (0.70, 0.80)  # pastel 饱和度范围
LIGHTNESS_RANGE = (0.75, 0.85)  # pastel 亮度范围

# 固定调色板（按分配顺序）
PALETTE_HUES: tuple[float, ...] = (
    9.0,  # tomato
    147.0,  # sea green
    219.0,  # cornflower blue
    39.0,  # orange
    260.0,  # purple
    328.0,  # pink
    181.0,  # turquoise
    51.0,  # gold
)
PALETTE_MATCH_TOLERANCE = 8.0  # 与已有色相距离小于此值视为"已占用"（度）
HUE_RESOLUTION = 1.0  # 调色板耗尽后的候选色相采样间隔（度）
MIN_HUE_DISTANCE = 10.0  # 最小色相距离策略，低于此值记 warning

# === 几何配置 ===
DEFAULT_CELL_SIZE = (10.0, 20.0)  # kitty 查询不可用时的字符单元像素尺寸
MAX_CANVAS_DIMENSION = 32768  # 画布单边上限（像素）
MAX_PANES = 1000  # 单次渲染 pane 数量上限

# === 合成配置 ===
BORDER_WIDTH = 2  # 活动 pane 边框宽度（像素）
BORDER_COLOR = (255, 255, 255, 255)  # 不透明白色
PARALLEL_FILL_THRESHOLD = 1_000_000  # 总填充面积超过此值时并行填充
MAX_FILL_WORKERS = 8

# === 输出配置 ===
DEFAULT_OUTPUT = "pane_bg.png"
TEMP_OUTPUT_DIR = Path("/tmp")
TEMP_OUTPUT_PREFIX = "kitty-pane-bg"

# === tmux 配置 ===
# 触发自动生成背景的 tmux hook
TMUX_HOOKS = (
    # Pane 生命周期
    "after-split-window",
    "pane-exited",
    "after-resize-pane",
    # 布局和窗口
    "window-layout-changed",
    "after-select-window",
    "after-new-window",
    "after-kill-window",
    # Session
    "after-new-session",
    "session-window-changed",
    "client-session-changed",
    # Pane focus
    "after-select-pane",
)

# === kitty 配置 ===
KITTY_COMMAND = "kitten"
MAX_SANE_CELL_SIZE = 50.0  # 推算出的单元尺寸超过此值视为异常
KITTY_SOCKET_DIR = Path("/tmp")  # kitty -o listen_on=unix:/tmp/kitty-{pid}
PROC_ROOT = Path("/proc")  # 进程树查找（Linux）
PROCESS_TREE_MAX_DEPTH = 20  # 从 tmux client 向上查找 kitty 的最大层数
TTY_PATH = Path("/dev/tty")  # 远程控制失败时写入转义序列的终端

# === 日志配置 ===
LOG_LEVEL = os.environ.get("KITTY_PANE_BG_LOG_LEVEL", "WARNING")  # 日志级别

# === 指标配置 ===
METRICS_ENABLED = True  # 是否启用指标收集
