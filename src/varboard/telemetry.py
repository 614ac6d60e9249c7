"""Telemetry - 统一日志和指标入口

提供统一的日志工厂和指标 facade，便于观测性追踪。

日志格式: [Component:conn[:8]] msg
指标示例: hub.save.ok/fail, hub.update.fanout, registry.dropped, store.error
"""

import logging
from typing import Any

from . import config

# 全局日志配置
_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """进程启动时配置根 logger

    Args:
        level: 日志级别名，None 使用配置默认值
    """
    logging.basicConfig(level=(level or config.LOG_LEVEL).upper(), format=_LOG_FORMAT)


def get_logger(name: str) -> logging.Logger:
    """获取带模块前缀的 logger

    Args:
        name: 模块名（通常使用 __name__）

    Returns:
        配置好的 Logger 实例
    """
    return logging.getLogger(name)


def format_conn_log(component: str, conn_id: str, msg: str) -> str:
    """格式化带连接 id 的日志消息

    Returns:
        格式化的消息: [component:conn_id[:8]] msg
    """
    conn_short = conn_id[:8] if conn_id else "unknown"
    return f"[{component}:{conn_short}] {msg}"


def truncate_payload(payload: Any, limit: int = config.LOG_PAYLOAD_MAX_LEN) -> str:
    """截断 payload 的 repr，避免日志刷屏"""
    text = repr(payload)
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


class Metrics:
    """指标收集 facade

    提供简单的计数器和 gauge 接口。
    当前实现为内存存储，通过 /api/status 暴露。
    """

    def __init__(self):
        self._counters: dict[str, int] = {}
        self._gauges: dict[str, float] = {}

    def inc(self, name: str, labels: dict[str, str] | None = None, value: int = 1) -> None:
        """递增计数器

        Args:
            name: 指标名（如 "hub.save.ok"）
            labels: 可选标签（如 {"op": "save"}）
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
        key = self._make_key(name, labels)
        return self._counters.get(key, 0)

    def get_gauge(self, name: str, labels: dict[str, str] | None = None) -> float:
        """获取 gauge 值（用于测试）"""
        key = self._make_key(name, labels)
        return self._gauges.get(key, 0.0)

    def reset(self) -> None:
        """重置所有指标（用于测试）"""
        self._counters.clear()
        self._gauges.clear()

    def _make_key(self, name: str, labels: dict[str, str] | None) -> str:
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"

    def snapshot(self) -> dict[str, dict]:
        """导出所有指标"""
        return {"counters": dict(self._counters), "gauges": dict(self._gauges)}


# 全局指标实例
metrics = Metrics()
