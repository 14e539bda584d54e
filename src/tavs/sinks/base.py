"""Signal Sink 抽象接口

Sink 负责把 SignalState 送到带外的视觉呈现机制（如 trigger.sh）。

设计原则：
1. 非阻塞：send 只发出请求，不等待完成
2. 不抛异常：失败以 SinkResult 返回，由协调器统一匹配
3. 可重入：允许重复、并发调用
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..types import SignalState


class SinkError(Exception):
    """Sink 错误基类"""

    kind = "error"


class SinkUnavailable(SinkError):
    """没有可用的 sink（未配置或脚本缺失）"""

    kind = "unavailable"


class SinkInvocationFailed(SinkError):
    """单次调用在边界处失败（spawn 失败、非零退出、超时）"""

    kind = "invocation_failed"


@dataclass(frozen=True)
class SinkResult:
    """一次发送的结果

    Attributes:
        ok: 请求是否成功发出
        error: 失败原因
    """

    ok: bool
    error: SinkError | None = None

    @classmethod
    def success(cls) -> "SinkResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: SinkError) -> "SinkResult":
        return cls(ok=False, error=error)


class SignalSink(ABC):
    """Signal Sink 基类"""

    name: str = "sink"

    @property
    def available(self) -> bool:
        """是否可投递"""
        return True

    @abstractmethod
    def send(self, state: SignalState) -> SinkResult:
        """发送信号（非阻塞，fire-and-forget）"""
        pass

    def send_sync(self, state: SignalState) -> SinkResult:
        """同步发送信号（阻塞到完成），默认等同 send"""
        return self.send(state)

    async def close(self) -> None:
        """释放资源"""
        pass


class NullSink(SignalSink):
    """无可用 sink 时的占位实现

    所有发送返回 SinkUnavailable，协调器照常簿记。
    """

    name = "null"

    def __init__(self, reason: str = "no sink configured"):
        self.reason = reason

    @property
    def available(self) -> bool:
        return False

    def send(self, state: SignalState) -> SinkResult:
        return SinkResult.failure(SinkUnavailable(self.reason))
