"""Telemetry - 统一日志和指标入口

提供统一的日志工厂和指标 facade，便于观测性追踪。

日志格式: [Component] msg
指标示例: signals.sent, signals.suppressed, sink.errors, timer.errors
"""

import logging

from rich.logging import RichHandler

_LOG_FORMAT = "[%(name)s] %(message)s"


def get_logger(name: str) -> logging.Logger:
    """获取带模块前缀的 logger

    Args:
        name: 模块名（通常使用 __name__）

    Returns:
        Logger 实例
    """
    return logging.getLogger(name)


def setup_logging(level: str = "INFO", debug: bool = False) -> None:
    """为进程入口安装 rich 日志 handler

    Args:
        level: 日志级别名
        debug: True 时强制 DEBUG 级别
    """
    root = logging.getLogger("tavs")
    root.setLevel(logging.DEBUG if debug else level.upper())
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(handler)


class Metrics:
    """信号与会话指标（内存存储）

    计数器:
        signals.sent{state}        sink 接受的信号
        signals.suppressed{state}  被去抖的重复信号
        sink.errors{kind}          sink 失败（unavailable / invocation_failed）
        timer.errors{task}         延迟回调异常
    Gauge:
        sessions.active            注册表中的存活会话数
    """

    def __init__(self):
        self._counters: dict[str, int] = {}
        self._gauges: dict[str, float] = {}

    def inc(self, name: str, labels: dict[str, str] | None = None, value: int = 1) -> None:
        key = self._key(name, labels)
        self._counters[key] = self._counters.get(key, 0) + value

    def gauge(self, name: str, value: float, labels: dict[str, str] | None = None) -> None:
        self._gauges[self._key(name, labels)] = value

    def get_counter(self, name: str, labels: dict[str, str] | None = None) -> int:
        return self._counters.get(self._key(name, labels), 0)

    def get_gauge(self, name: str, labels: dict[str, str] | None = None) -> float:
        return self._gauges.get(self._key(name, labels), 0.0)

    def reset(self) -> None:
        """清空（测试之间调用）"""
        self._counters.clear()
        self._gauges.clear()

    @staticmethod
    def _key(name: str, labels: dict[str, str] | None) -> str:
        # sink.errors{kind=unavailable}
        if not labels:
            return name
        label_str = ",".join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{label_str}}}"


# 进程内共享实例，METRICS_ENABLED 控制是否写入
metrics = Metrics()
