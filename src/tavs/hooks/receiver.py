"""HTTP Hook 接收器 - 接收外部宿主的生命周期事件"""

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from fastapi import FastAPI

    from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class HookEventRequest(BaseModel):
    """Hook 事件请求体"""

    event: str  # 事件类型（宿主原始名）
    session_id: str = "default"  # 会话标识
    data: dict = {}  # 事件 payload


class HookEventResponse(BaseModel):
    """Hook 事件响应"""

    success: bool
    message: str


class HookReceiver:
    """HTTP Hook 接收器

    提供 `/api/hook` 端点，把事件分发给 SessionRegistry。
    """

    def __init__(self, registry: "SessionRegistry"):
        self.registry = registry

    def setup_routes(self, app: "FastAPI") -> None:
        """设置 API 路由"""

        @app.post("/api/hook", response_model=HookEventResponse)
        async def receive_hook(request: HookEventRequest):
            """接收 Hook 事件"""
            logger.debug(f"[HookReceiver] Event: {request.event} -> {request.session_id}")

            try:
                hook = self.registry.dispatch(request.session_id, request.event, request.data)
            except Exception as e:
                logger.error(f"[HookReceiver] Failed to handle event: {e}")
                return HookEventResponse(success=False, message=str(e))

            if hook is None:
                return HookEventResponse(success=False, message=f"Unknown event: {request.event}")
            return HookEventResponse(success=True, message=f"Dispatched {hook.value}")

        @app.get("/api/hook/status")
        async def hook_status():
            """获取所有会话的信号状态"""
            return {
                "config": {
                    "enabled": self.registry.config.enabled,
                    "idle_timeout_ms": self.registry.config.idle_timeout_ms,
                    "debug": self.registry.config.debug,
                },
                "sessions": self.registry.get_all_states(),
            }
