"""TavsPlugin - 宿主适配器

负责：
- 暴露宿主插件 API 需要的六个 hook
- 把宿主原始 payload（dict）转换为核心 DTO
- 调用自己持有的 SignalCoordinator

每个插件实例持有独立的协调器，由 create_plugin 显式构造后注入宿主。
"""

from ..config import SignalConfig
from ..coordinator import SignalCoordinator
from ..sinks import SignalSink, create_sink
from ..telemetry import get_logger
from ..timer import Timer
from ..types import AgentResponse, SessionInfo, ToolCall, ToolResult
from .events import HookName, is_terminal_event, normalize_event_type

logger = get_logger(__name__)


def _prompt_text(prompt: str | dict | None) -> str:
    if isinstance(prompt, dict):
        for key in ("prompt", "text", "content"):
            value = prompt.get(key)
            if isinstance(value, str):
                return value
        return ""
    return prompt or ""


class TavsPlugin:
    """宿主插件

    使用示例:
        plugin = create_plugin(SignalConfig(idle_timeout_ms=60000, debug=True))

        plugin.on_session_start({"id": "s1"})
        plugin.on_user_prompt("fix bug")
        plugin.handle_event("PreToolUse", {"tool_name": "Read"})
        plugin.handle_event("Stop")
    """

    name = "tavs"

    def __init__(self, coordinator: SignalCoordinator):
        self.coordinator = coordinator

    # === 宿主 hooks ===

    def on_session_start(self, session: SessionInfo | dict | None = None) -> None:
        if not isinstance(session, SessionInfo):
            session = SessionInfo.from_dict(session)
        self.coordinator.on_session_start(session)

    def on_session_end(self, session: SessionInfo | dict | None = None) -> None:
        if not isinstance(session, SessionInfo):
            session = SessionInfo.from_dict(session)
        self.coordinator.on_session_end(session)

    def on_user_prompt(self, prompt: str | dict | None = None) -> None:
        self.coordinator.on_user_prompt(_prompt_text(prompt))

    def on_tool_call(self, call: ToolCall | dict | None = None) -> None:
        if not isinstance(call, ToolCall):
            call = ToolCall.from_dict(call)
        self.coordinator.on_tool_call(call)

    def on_tool_result(self, result: ToolResult | dict | None = None) -> None:
        if not isinstance(result, ToolResult):
            result = ToolResult.from_dict(result)
        self.coordinator.on_tool_result(result)

    def on_agent_response(self, response: AgentResponse | dict | None = None) -> None:
        if not isinstance(response, AgentResponse):
            response = AgentResponse.from_dict(response)
        self.coordinator.on_agent_response(response)

    # === 通用入口 ===

    def handle_event(self, event: str, data: dict | None = None) -> HookName | None:
        """按事件名分发

        Args:
            event: 宿主原始事件名（如 "PreToolUse"、"session.created"、"stop"）
            data: 事件 payload

        Returns:
            实际调用的标准 hook，未知事件返回 None（不抛异常）
        """
        hook = normalize_event_type(event)
        if hook is None:
            logger.warning(f"[Plugin] Unknown event type: {event}")
            return None

        data = dict(data or {})
        if is_terminal_event(event):
            data["done"] = True

        handler = getattr(self, f"on_{hook.value}")
        handler(data)
        return hook


def create_plugin(
    config: SignalConfig | None = None,
    sink: SignalSink | None = None,
    timer: Timer | None = None,
    session_id: str = "default",
) -> TavsPlugin:
    """构造带独立协调器的插件实例

    Args:
        config: 配置（None 时从环境变量加载）
        sink: 信号出口（None 时按配置自动查找 trigger 脚本）
        timer: 延迟任务服务（None 时创建独立实例）
        session_id: 会话标识

    Returns:
        TavsPlugin 实例
    """
    config = config or SignalConfig.from_env()
    coordinator = SignalCoordinator(
        sink=sink or create_sink(config),
        config=config,
        timer=timer,
        session_id=session_id,
    )
    return TavsPlugin(coordinator)
