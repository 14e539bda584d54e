"""数据类型测试"""

from datetime import datetime

import pytest

from tavs.types import AgentResponse, SessionInfo, SignalState, ToolCall, ToolResult


class TestSignalState:
    @pytest.mark.parametrize("raw,expected", [
        ("processing", SignalState.PROCESSING),
        ("COMPLETE", SignalState.COMPLETE),
        (" idle ", SignalState.IDLE),
        (SignalState.RESET, SignalState.RESET),
    ])
    def test_parse(self, raw, expected):
        assert SignalState.parse(raw) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            SignalState.parse("permission")

    def test_only_processing_exempt_from_debounce(self):
        assert [s for s in SignalState if not s.debounced] == [SignalState.PROCESSING]


class TestAgentResponse:
    @pytest.mark.parametrize("payload,done", [
        ({"content": "x", "done": True}, True),
        ({"content": "x", "done": False}, False),
        ({"content": "x"}, False),
        ({"isDone": "true"}, True),
        ({"done": "no"}, False),
        ({"done": 1}, True),
        ({"done": ["weird"]}, False),
        ({}, False),
    ])
    def test_done_flag(self, payload, done):
        assert AgentResponse.from_dict(payload).done is done

    def test_none_payload(self):
        response = AgentResponse.from_dict(None)
        assert response.content == ""
        assert response.done is False


class TestHostPayloads:
    def test_session_info_camel_case(self):
        info = SessionInfo.from_dict({
            "sessionId": "abc",
            "startTime": "2026-01-02T03:04:05",
            "model": "big",
        })

        assert info.id == "abc"
        assert info.start_time == datetime(2026, 1, 2, 3, 4, 5)
        assert info.model == "big"

    def test_session_info_bad_time(self):
        info = SessionInfo.from_dict({"id": "s", "start_time": "yesterday"})
        assert isinstance(info.start_time, datetime)

    def test_tool_call_snake_case(self):
        call = ToolCall.from_dict({"tool_name": "Read", "tool_input": {"path": "a.py"}})
        assert call.name == "Read"
        assert call.input == {"path": "a.py"}

    def test_tool_call_scalar_input(self):
        call = ToolCall.from_dict({"name": "Bash", "input": "ls"})
        assert call.input == {"value": "ls"}

    def test_tool_result(self):
        result = ToolResult.from_dict({"toolName": "Bash", "output": "ok", "error": "warn"})
        assert (result.name, result.output, result.error) == ("Bash", "ok", "warn")

    def test_session_info_millisecond_timestamp(self):
        """JS 宿主的 Date.now() 是毫秒"""
        millis = 1767225600000  # 2026-01-01T00:00:00Z
        info = SessionInfo.from_dict({"id": "s", "startTime": millis})

        assert info.start_time == datetime.fromtimestamp(millis / 1000)

    def test_session_info_seconds_timestamp(self):
        info = SessionInfo.from_dict({"id": "s", "start_time": 1767225600})
        assert info.start_time == datetime.fromtimestamp(1767225600)

    @pytest.mark.parametrize("value", [1e300, float("inf"), float("nan"), -1e300])
    def test_session_info_absurd_timestamp(self, value):
        """无法转换的时间戳回退到当前时间，不抛异常"""
        info = SessionInfo.from_dict({"id": "s", "startTime": value})
        assert isinstance(info.start_time, datetime)
