"""TAVS 配置

配置分为以下几类：
- 信号配置：启用开关、空闲延迟、调试输出
- Sink 配置：trigger 脚本路径、子进程超时
- 服务配置：HTTP 接收器监听地址
- 日志/指标配置
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .telemetry import get_logger

logger = get_logger(__name__)

# === 信号配置 ===
ENABLED = True  # False 时只做状态簿记，不调用 sink
IDLE_TIMEOUT_MS = 30000  # COMPLETE → IDLE 延迟（毫秒），0 禁用
DEBUG = False  # 调试模式（仅控制诊断输出）

# === Sink 配置 ===
TRIGGER_SCRIPT = ""  # 显式 trigger.sh 路径，空则自动查找
SINK_TIMEOUT_SECONDS = 5.0  # trigger 子进程超时（秒）

# === 服务配置 ===
SERVER_HOST = "127.0.0.1"
SERVER_PORT = 8766

# === 日志配置 ===
LOG_LEVEL = os.environ.get("TAVS_LOG_LEVEL", "INFO")  # 日志级别

# === 指标配置 ===
METRICS_ENABLED = True  # 是否启用指标收集

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"not a boolean: {value!r}")


@dataclass(frozen=True)
class SignalConfig:
    """协调器消费的配置值

    加载方式由调用方决定（from_env / 直接构造）。
    """

    enabled: bool = ENABLED
    idle_timeout_ms: int | None = IDLE_TIMEOUT_MS
    debug: bool = DEBUG
    trigger_script: str | None = TRIGGER_SCRIPT or None

    @property
    def idle_enabled(self) -> bool:
        """空闲转换是否启用（0 或缺省即禁用）"""
        return bool(self.idle_timeout_ms) and self.idle_timeout_ms > 0

    @property
    def idle_timeout_seconds(self) -> float:
        """空闲延迟（秒），供 Timer 使用"""
        if not self.idle_enabled:
            return 0.0
        return self.idle_timeout_ms / 1000.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SignalConfig":
        """从环境变量加载配置

        读取 TAVS_ENABLED / TAVS_IDLE_TIMEOUT_MS / TAVS_DEBUG / TAVS_TRIGGER_SCRIPT。
        无法解析的值回退默认值并打印 warning，不抛异常。

        Args:
            environ: 环境变量映射，None 使用 os.environ

        Returns:
            SignalConfig 实例
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        enabled = defaults.enabled
        raw = env.get("TAVS_ENABLED")
        if raw is not None:
            try:
                enabled = _parse_bool(raw)
            except ValueError:
                logger.warning(f"[Config] Invalid TAVS_ENABLED={raw!r}, using {enabled}")

        debug = defaults.debug
        raw = env.get("TAVS_DEBUG")
        if raw is not None:
            try:
                debug = _parse_bool(raw)
            except ValueError:
                logger.warning(f"[Config] Invalid TAVS_DEBUG={raw!r}, using {debug}")

        idle_timeout_ms = defaults.idle_timeout_ms
        raw = env.get("TAVS_IDLE_TIMEOUT_MS")
        if raw is not None:
            try:
                idle_timeout_ms = max(int(raw.strip() or "0"), 0)
            except ValueError:
                logger.warning(
                    f"[Config] Invalid TAVS_IDLE_TIMEOUT_MS={raw!r}, using {idle_timeout_ms}"
                )

        trigger_script = env.get("TAVS_TRIGGER_SCRIPT") or defaults.trigger_script

        return cls(
            enabled=enabled,
            idle_timeout_ms=idle_timeout_ms,
            debug=debug,
            trigger_script=trigger_script,
        )
