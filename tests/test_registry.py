"""SessionRegistry 测试"""

import asyncio

import pytest

from conftest import RecordingSink
from tavs.hooks.events import HookName
from tavs.hooks.registry import SessionRegistry
from tavs.sinks import TriggerScriptSink
from tavs.telemetry import metrics
from tavs.types import SignalState


@pytest.fixture
def sinks():
    return {}


@pytest.fixture
def registry(fast_config, sinks):
    def factory(config):
        sink = RecordingSink()
        sinks[len(sinks)] = sink
        return sink

    return SessionRegistry(config=fast_config, sink_factory=factory)


class TestSessionRegistry:
    async def test_lazy_creation(self, registry):
        assert registry.get("s1") is None
        registry.dispatch("s1", "user_prompt", {"prompt": "x"})

        assert registry.get("s1") is not None
        assert registry.get_all_sessions() == {"s1"}
        assert metrics.get_gauge("sessions.active") == 1

    async def test_sessions_are_independent(self, registry, sinks):
        registry.dispatch("a", "user_prompt")
        registry.dispatch("b", "session_start")
        registry.dispatch("a", "stop")

        assert sinks[0].sent == [SignalState.PROCESSING, SignalState.COMPLETE]
        assert sinks[1].sent == [SignalState.RESET]
        assert registry.get("b").coordinator.is_processing is False

    async def test_session_end_removes(self, registry, sinks):
        registry.dispatch("a", "user_prompt")
        assert registry.dispatch("a", "session_end") is HookName.SESSION_END

        assert sinks[0].sent == [SignalState.PROCESSING, SignalState.RESET]
        assert len(registry) == 0

    async def test_unknown_event(self, registry, sinks):
        """未知事件不创建会话"""
        for i in range(20):
            assert registry.dispatch(f"s{i}", "what") is None

        assert len(registry) == 0
        assert sinks == {}

    async def test_idle_per_session(self, registry, sinks):
        registry.dispatch("a", "stop")
        registry.dispatch("b", "stop")
        registry.dispatch("b", "user_prompt")
        await asyncio.sleep(0.12)

        assert sinks[0].sent == [SignalState.COMPLETE, SignalState.IDLE]
        assert sinks[1].sent == [SignalState.COMPLETE, SignalState.PROCESSING]

    async def test_remove_cancels_idle(self, registry, sinks):
        registry.dispatch("a", "stop")
        assert registry.remove("a") is True
        assert registry.remove("a") is False
        await asyncio.sleep(0.12)

        assert sinks[0].sent == [SignalState.COMPLETE]

    async def test_close_all_resets_synchronously(self, registry, sinks):
        registry.dispatch("a", "user_prompt")
        registry.dispatch("b", "stop")
        await registry.close_all()

        assert sinks[0].sent_sync == [SignalState.RESET]
        assert sinks[1].sent_sync == [SignalState.RESET]
        assert len(registry) == 0

    async def test_get_all_states(self, registry):
        registry.dispatch("a", "user_prompt")
        registry.dispatch("b", "stop")

        states = registry.get_all_states()
        assert states["a"] == {
            "last_signal": "processing",
            "processing": True,
            "idle_pending": False,
            "available": True,
        }
        assert states["b"]["last_signal"] == "complete"
        assert states["b"]["idle_pending"] is True
        await registry.close_all()


class TestShutdownDrainsSinks:
    """关闭时等待在途的 trigger 调用"""

    @pytest.fixture
    def slow_script(self, tmp_path):
        log = tmp_path / "signals.log"
        script = tmp_path / "trigger.sh"
        script.write_text(f'#!/bin/bash\nsleep 0.2\necho "$1" >> "{log}"\n')
        return script, log

    async def test_close_all_waits_before_reset(self, slow_script, fast_config):
        script, log = slow_script
        created = []

        def factory(config):
            sink = TriggerScriptSink(script)
            created.append(sink)
            return sink

        registry = SessionRegistry(config=fast_config, sink_factory=factory)
        registry.dispatch("a", "user_prompt")
        registry.dispatch("a", "stop")
        assert created[0].in_flight == 2

        await registry.close_all()

        assert created[0].in_flight == 0
        # RESET 最后落地
        assert log.read_text().split()[-1] == "reset"
        assert sorted(log.read_text().split()[:2]) == ["complete", "processing"]

    async def test_removed_session_sink_drained(self, slow_script, fast_config):
        script, log = slow_script
        created = []

        def factory(config):
            sink = TriggerScriptSink(script)
            created.append(sink)
            return sink

        registry = SessionRegistry(config=fast_config, sink_factory=factory)
        registry.dispatch("a", "session_end")
        assert len(registry) == 0
        assert created[0].in_flight == 1

        await registry.close_all()

        assert created[0].in_flight == 0
        assert log.read_text().split() == ["reset"]
