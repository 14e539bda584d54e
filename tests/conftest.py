"""Pytest 配置"""

import pytest

from tavs.config import SignalConfig
from tavs.sinks.base import SignalSink, SinkInvocationFailed, SinkResult
from tavs.telemetry import metrics
from tavs.types import SignalState


class RecordingSink(SignalSink):
    """记录收到的信号（测试用）"""

    name = "recording"

    def __init__(self):
        self.sent: list[SignalState] = []
        self.sent_sync: list[SignalState] = []

    def send(self, state: SignalState) -> SinkResult:
        self.sent.append(state)
        return SinkResult.success()

    def send_sync(self, state: SignalState) -> SinkResult:
        self.sent_sync.append(state)
        return SinkResult.success()


class FailingSink(RecordingSink):
    """每次发送都失败（测试用）"""

    name = "failing"

    def send(self, state: SignalState) -> SinkResult:
        self.sent.append(state)
        return SinkResult.failure(SinkInvocationFailed("boom"))


@pytest.fixture
def anyio_backend():
    """指定 anyio 只使用 asyncio backend"""
    return "asyncio"


@pytest.fixture(autouse=True)
def reset_metrics():
    """每次测试前重置指标"""
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def failing_sink():
    return FailingSink()


@pytest.fixture
def fast_config():
    """空闲延迟 50ms 的配置"""
    return SignalConfig(enabled=True, idle_timeout_ms=50, debug=False)
