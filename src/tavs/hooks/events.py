"""宿主事件名规范化

不同宿主（OpenCode 插件、Claude Code hooks、HTTP 调用方）对同一生命周期事件命名不同，
在这里统一映射到六个标准 hook。
"""

from enum import Enum


class HookName(str, Enum):
    """标准 hook 名"""
    SESSION_START = "session_start"
    SESSION_END = "session_end"
    USER_PROMPT = "user_prompt"
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"
    AGENT_RESPONSE = "agent_response"


# 事件类型映射表（key 为小写、"-" 替换为 "_" 后的事件名）
_EVENT_TYPE_MAP = {
    "session_start": HookName.SESSION_START,
    "sessionstart": HookName.SESSION_START,
    "onsessionstart": HookName.SESSION_START,
    "session.created": HookName.SESSION_START,
    "session_end": HookName.SESSION_END,
    "sessionend": HookName.SESSION_END,
    "onsessionend": HookName.SESSION_END,
    "session.deleted": HookName.SESSION_END,
    "user_prompt": HookName.USER_PROMPT,
    "userpromptsubmit": HookName.USER_PROMPT,
    "onuserprompt": HookName.USER_PROMPT,
    "prompt_submit": HookName.USER_PROMPT,
    "tool_call": HookName.TOOL_CALL,
    "ontoolcall": HookName.TOOL_CALL,
    "pre_tool": HookName.TOOL_CALL,
    "pre_tool_use": HookName.TOOL_CALL,
    "pretooluse": HookName.TOOL_CALL,
    "tool.execute.before": HookName.TOOL_CALL,
    "tool_result": HookName.TOOL_RESULT,
    "ontoolresult": HookName.TOOL_RESULT,
    "post_tool": HookName.TOOL_RESULT,
    "post_tool_use": HookName.TOOL_RESULT,
    "posttooluse": HookName.TOOL_RESULT,
    "tool.execute.after": HookName.TOOL_RESULT,
    "agent_response": HookName.AGENT_RESPONSE,
    "onagentresponse": HookName.AGENT_RESPONSE,
    "response": HookName.AGENT_RESPONSE,
}

# 这些事件本身就表示本轮响应结束，等价于 agent_response(done=True)
_TERMINAL_EVENTS = {"stop", "session.idle"}


def _key(event_type: str) -> str:
    return event_type.strip().lower().replace("-", "_")


def normalize_event_type(event_type: str) -> HookName | None:
    """规范化事件类型

    Args:
        event_type: 原始事件类型

    Returns:
        标准 hook 名，未知事件返回 None
    """
    key = _key(event_type)
    if key in _TERMINAL_EVENTS:
        return HookName.AGENT_RESPONSE
    return _EVENT_TYPE_MAP.get(key)


def is_terminal_event(event_type: str) -> bool:
    """是否为隐含 done=True 的结束事件（如 Claude Code 的 Stop）"""
    return _key(event_type) in _TERMINAL_EVENTS
