"""Telemetry - 统一日志和指标入口

提供统一的日志工厂和指标 facade。

日志格式: [Component] msg
指标示例: cache.evicted, cache.assigned, allocator.exhausted, geometry.fallback
"""

import logging

from . import config

_LOG_FORMAT = "[%(name)s] %(levelname)s %(message)s"


def get_logger(name: str) -> logging.Logger:
    """获取带模块前缀的 logger

    Args:
        name: 模块名（通常使用 __name__）

    Returns:
        Logger 实例
    """
    return logging.getLogger(name)


def setup_logging(level: str | None = None) -> None:
    """配置根 logger（仅 CLI 入口调用）

    Args:
        level: 日志级别名，默认使用 config.LOG_LEVEL
    """
    logging.basicConfig(
        level=getattr(logging, (level or config.LOG_LEVEL).upper(), logging.WARNING),
        format=_LOG_FORMAT,
    )


def format_pane_log(module: str, pane_id: str, msg: str) -> str:
    """格式化带 pane_id 的日志消息

    Returns:
        格式化的消息: [module:pane_id] msg
    """
    pane_short = pane_id[:16] if pane_id else "unknown"
    return f"[{module}:{pane_short}] {msg}"


class Metrics:
    """指标收集 facade

    提供简单的计数器和 gauge 接口，当前实现为内存存储。
    """

    def __init__(self):
        self._counters: dict[str, int] = {}
        self._gauges: dict[str, float] = {}

    def inc(self, name: str, labels: dict[str, str] | None = None, value: int = 1) -> None:
        """递增计数器

        Args:
            name: 指标名（如 "cache.evicted"）
            labels: 可选标签（如 {"reason": "json"}）
            value: 递增值，默认 1
        """
        if not config.METRICS_ENABLED:
            return
        key = self._make_key(name, labels)
        self._counters[key] = self._counters.get(key, 0) + value

    def gauge(self, name: str, value: float, labels: dict[str, str] | None = None) -> None:
        """设置 gauge 值"""
        if not config.METRICS_ENABLED:
            return
        key = self._make_key(name, labels)
        self._gauges[key] = value

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        """获取计数器值（用于测试）"""
        return self._counters.get(self._make_key(name, labels), 0)

    def get_gauge(self, name: str, labels: dict[str, str] | None = None) -> float:
        """获取 gauge 值（用于测试）"""
        return self._gauges.get(self._make_key(name, labels), 0.0)

    def reset(self) -> None:
        """重置所有指标（用于测试）"""
        self._counters.clear()
        self._gauges.clear()

    def _make_key(self, name: str, labels: dict[str, str] | None) -> str:
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"

    def get_all_counters(self) -> dict[str, int]:
        """获取所有计数器（用于调试）"""
        return dict(self._counters)


# 全局指标实例
metrics = Metrics()
