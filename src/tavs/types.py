"""TAVS 数据类型定义

包含：
- SignalState: 视觉信号状态
- SessionInfo / ToolCall / ToolResult / AgentResponse: 宿主事件 DTO

DTO 的 from_dict 容忍 camelCase/snake_case 与缺失字段，不会抛异常。
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class SignalState(Enum):
    """视觉信号状态

    - PROCESSING: Agent 正在工作
    - COMPLETE: Agent 完成响应
    - IDLE: Agent 等待输入（分级显示由 sink 负责）
    - RESET: 清除终端视觉状态
    """
    PROCESSING = "processing"
    COMPLETE = "complete"
    IDLE = "idle"
    RESET = "reset"

    @classmethod
    def parse(cls, value: "str | SignalState") -> "SignalState":
        """从字符串解析（大小写不敏感）

        Raises:
            ValueError: 未知状态
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())

    @property
    def debounced(self) -> bool:
        """重复发送时是否被抑制（PROCESSING 豁免）"""
        return self is not SignalState.PROCESSING


def _pick(payload: dict, *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


_TRUE_STRINGS = {"1", "true", "yes", "on"}


def _coerce_done(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


# 超过此值的时间戳按毫秒处理（JS 宿主的 Date.now()）
_MILLISECOND_THRESHOLD = 1e11


def _from_timestamp(value: float) -> datetime | None:
    if value > _MILLISECOND_THRESHOLD:
        value = value / 1000.0
    try:
        return datetime.fromtimestamp(value)
    except (ValueError, OverflowError, OSError):
        return None


@dataclass
class SessionInfo:
    """会话信息"""
    id: str = ""
    start_time: datetime = field(default_factory=datetime.now)
    model: str | None = None

    @classmethod
    def from_dict(cls, payload: dict | None) -> "SessionInfo":
        payload = payload or {}
        start = _pick(payload, "start_time", "startTime")
        if isinstance(start, (int, float)) and not isinstance(start, bool):
            start = _from_timestamp(start)
        elif isinstance(start, str):
            try:
                start = datetime.fromisoformat(start)
            except ValueError:
                start = None
        return cls(
            id=str(_pick(payload, "id", "session_id", "sessionId", default="")),
            start_time=start if isinstance(start, datetime) else datetime.now(),
            model=_pick(payload, "model"),
        )


@dataclass
class ToolCall:
    """工具调用"""
    name: str = ""
    input: dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: dict | None) -> "ToolCall":
        payload = payload or {}
        tool_input = _pick(payload, "input", "tool_input", "toolInput", default={})
        return cls(
            name=str(_pick(payload, "name", "tool_name", "toolName", default="")),
            input=tool_input if isinstance(tool_input, dict) else {"value": tool_input},
        )


@dataclass
class ToolResult:
    """工具结果"""
    name: str = ""
    output: Any = None
    error: str | None = None

    @classmethod
    def from_dict(cls, payload: dict | None) -> "ToolResult":
        payload = payload or {}
        return cls(
            name=str(_pick(payload, "name", "tool_name", "toolName", default="")),
            output=_pick(payload, "output", "tool_output", "toolOutput", "tool_response"),
            error=_pick(payload, "error"),
        )


@dataclass
class AgentResponse:
    """Agent 响应片段

    done=True 表示本轮响应结束；流式中间片段 done=False。
    """
    content: str = ""
    done: bool = False

    @classmethod
    def from_dict(cls, payload: dict | None) -> "AgentResponse":
        """缺少 done 标志的片段视为非终止片段"""
        payload = payload or {}
        return cls(
            content=str(_pick(payload, "content", "text", default="")),
            done=_coerce_done(_pick(payload, "done", "is_done", "isDone", default=False)),
        )
