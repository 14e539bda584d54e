"""Hook 系统 - 接收宿主生命周期事件

模块结构：
- events: 事件名规范化
- plugin: TavsPlugin 宿主适配器
- registry: SessionRegistry 每会话一个协调器
- receiver: HookReceiver HTTP 接收器
"""

from .events import HookName, normalize_event_type
from .plugin import TavsPlugin, create_plugin
from .receiver import HookReceiver
from .registry import SessionRegistry

__all__ = [
    "HookName",
    "HookReceiver",
    "SessionRegistry",
    "TavsPlugin",
    "create_plugin",
    "normalize_event_type",
]
