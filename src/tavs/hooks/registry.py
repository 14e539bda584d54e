"""SessionRegistry - 每个会话一个协调器

负责：
- 首个事件到达时惰性创建会话的插件/协调器
- 按 session_id 分发事件，会话之间无共享状态
- session_end 后丢弃会话
- 进程退出时对仍存活的会话同步 RESET
"""

import asyncio
from collections.abc import Callable

from ..config import METRICS_ENABLED, SignalConfig
from ..sinks import SignalSink, create_sink
from ..telemetry import get_logger, metrics
from ..timer import Timer
from .events import HookName, normalize_event_type
from .plugin import TavsPlugin, create_plugin

logger = get_logger(__name__)

SinkFactory = Callable[[SignalConfig], SignalSink]


class SessionRegistry:
    """会话注册表"""

    def __init__(
        self,
        config: SignalConfig | None = None,
        sink_factory: SinkFactory | None = None,
        timer: Timer | None = None,
    ):
        """初始化

        Args:
            config: 所有会话共用的配置值
            sink_factory: 为每个会话创建 sink（默认 create_sink）
            timer: 共享的延迟任务服务（空闲任务按 session_id 区分）
        """
        self._config = config or SignalConfig.from_env()
        self._sink_factory = sink_factory or create_sink
        self._timer = timer or Timer()
        self._plugins: dict[str, TavsPlugin] = {}
        self._closing: set[asyncio.Task] = set()

    def get(self, session_id: str) -> TavsPlugin | None:
        return self._plugins.get(session_id)

    def get_or_create(self, session_id: str) -> TavsPlugin:
        """获取会话插件，不存在则创建"""
        plugin = self._plugins.get(session_id)
        if plugin is None:
            plugin = create_plugin(
                config=self._config,
                sink=self._sink_factory(self._config),
                timer=self._timer,
                session_id=session_id,
            )
            self._plugins[session_id] = plugin
            logger.info(f"[Registry] Session opened: {session_id}")
            if METRICS_ENABLED:
                metrics.gauge("sessions.active", len(self._plugins))
        return plugin

    def dispatch(self, session_id: str, event: str, data: dict | None = None) -> HookName | None:
        """分发事件到会话

        Args:
            session_id: 会话标识
            event: 宿主原始事件名
            data: 事件 payload

        Returns:
            实际调用的标准 hook，未知事件返回 None
        """
        if normalize_event_type(event) is None:
            logger.warning(f"[Registry] Unknown event type: {event} ({session_id})")
            return None

        plugin = self.get_or_create(session_id)
        hook = plugin.handle_event(event, data)
        if hook is HookName.SESSION_END:
            self.remove(session_id)
        return hook

    def remove(self, session_id: str) -> bool:
        """丢弃会话（不发送信号）

        会话 sink 的在途调用在后台等待结束，close_all 时一并回收。
        """
        plugin = self._plugins.pop(session_id, None)
        if plugin is None:
            return False
        plugin.coordinator.cancel_idle_timer()
        self._close_sink_later(plugin.coordinator.sink)
        logger.info(f"[Registry] Session closed: {session_id}")
        if METRICS_ENABLED:
            metrics.gauge("sessions.active", len(self._plugins))
        return True

    def _close_sink_later(self, sink: SignalSink) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(sink.close())
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    async def close_all(self) -> None:
        """对所有存活会话同步 RESET 并清空

        先等待各 sink 的在途调用结束，再发送 RESET，避免旧信号在 RESET 之后落地。
        """
        plugins = list(self._plugins.items())
        self._plugins.clear()
        for _, plugin in plugins:
            plugin.coordinator.cancel_idle_timer()

        for session_id, plugin in plugins:
            await plugin.coordinator.sink.close()
            plugin.coordinator.shutdown()
            logger.debug(f"[Registry] Session reset on shutdown: {session_id}")

        if self._closing:
            await asyncio.gather(*list(self._closing), return_exceptions=True)
        self._timer.stop()

    # === 状态查询 ===

    @property
    def config(self) -> SignalConfig:
        return self._config

    def get_all_sessions(self) -> set[str]:
        return set(self._plugins.keys())

    def get_all_states(self) -> dict[str, dict]:
        """获取所有会话状态"""
        states = {}
        for session_id, plugin in self._plugins.items():
            coordinator = plugin.coordinator
            last = coordinator.last_sent_state
            states[session_id] = {
                "last_signal": last.value if last else None,
                "processing": coordinator.is_processing,
                "idle_pending": coordinator.has_pending_idle,
                "available": coordinator.is_available(),
            }
        return states

    def __len__(self) -> int:
        return len(self._plugins)
