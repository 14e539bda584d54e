"""TAVS - Terminal Agent Visual Signals

把 AI 编码 Agent 会话的生命周期事件映射为终端视觉信号
（processing / complete / idle / reset），交给外部 trigger 脚本呈现。
"""

from .config import SignalConfig
from .coordinator import SignalCoordinator
from .hooks import SessionRegistry, TavsPlugin, create_plugin
from .sinks import NullSink, SignalSink, SinkResult, TriggerScriptSink, create_sink
from .timer import Timer
from .types import AgentResponse, SessionInfo, SignalState, ToolCall, ToolResult

__all__ = [
    "AgentResponse",
    "NullSink",
    "SessionInfo",
    "SessionRegistry",
    "SignalConfig",
    "SignalCoordinator",
    "SignalSink",
    "SignalState",
    "SinkResult",
    "TavsPlugin",
    "Timer",
    "ToolCall",
    "ToolResult",
    "TriggerScriptSink",
    "create_plugin",
    "create_sink",
]
