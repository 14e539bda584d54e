"""SignalCoordinator - 生命周期事件到视觉信号的映射

职责：
- 把宿主的六类生命周期事件映射为 SignalState
- 去抖：相同的非 PROCESSING 信号不重复发送
- COMPLETE 之后调度唯一的 IDLE 延迟任务
- 通过 SignalSink 投递，sink 失败不影响状态簿记

状态流转:
    RESET --user_prompt--> PROCESSING
    PROCESSING --tool_call/tool_result--> PROCESSING（幂等）
    PROCESSING --agent_response(done)--> COMPLETE
    COMPLETE --(idle 延迟到期)--> IDLE
    任意 --session_start/session_end--> RESET

每个会话显式构造并持有一个实例，不存在全局默认实例。
"""

from dataclasses import replace

from .config import METRICS_ENABLED, SignalConfig
from .sinks.base import SignalSink, SinkError
from .telemetry import get_logger, metrics
from .timer import Timer
from .types import AgentResponse, SessionInfo, SignalState, ToolCall, ToolResult

logger = get_logger(__name__)

# Timer 中空闲任务的名字前缀（同名覆盖保证每个会话至多一个）
IDLE_TASK_PREFIX = "idle"


class SignalCoordinator:
    """信号协调器

    使用示例:
        coordinator = SignalCoordinator(sink=create_sink(config), config=config)

        coordinator.on_session_start()
        coordinator.on_user_prompt("fix bug")
        coordinator.on_tool_call(ToolCall(name="Read"))
        coordinator.on_agent_response(AgentResponse(content="done", done=True))
    """

    def __init__(
        self,
        sink: SignalSink,
        config: SignalConfig | None = None,
        timer: Timer | None = None,
        session_id: str = "default",
    ):
        """初始化

        Args:
            sink: 信号出口
            config: 配置（None 使用默认值）
            timer: 延迟任务服务（None 时创建独立实例，可在多个会话间共享）
            session_id: 会话标识，用于区分共享 Timer 中的空闲任务
        """
        self._sink = sink
        self._config = config or SignalConfig()
        self._timer = timer or Timer()
        self._session_id = session_id
        self._idle_task = f"{IDLE_TASK_PREFIX}:{session_id}"

        self._is_processing = False
        self._last_sent: SignalState | None = None

    # === 生命周期事件 ===

    def on_session_start(self, session: SessionInfo | None = None) -> None:
        """会话开始：无条件 RESET"""
        self.cancel_idle_timer()
        self.emit(SignalState.RESET, force=True)
        self._is_processing = False

    def on_session_end(self, session: SessionInfo | None = None) -> None:
        """会话结束：无条件 RESET，保证终端回到中性状态"""
        self.cancel_idle_timer()
        self.emit(SignalState.RESET, force=True)
        self._is_processing = False

    def on_user_prompt(self, prompt: str = "") -> None:
        """用户提交 prompt：新一轮工作，总是发送 PROCESSING"""
        self.cancel_idle_timer()
        self.emit(SignalState.PROCESSING)
        self._is_processing = True

    def on_tool_call(self, call: ToolCall | None = None) -> None:
        """工具调用：未处于 processing 时才发送"""
        self._enter_processing()

    def on_tool_result(self, result: ToolResult | None = None) -> None:
        """工具完成：不结束 processing（可能还有后续工具调用）"""
        self._enter_processing()

    def on_agent_response(self, response: AgentResponse | dict | None = None) -> None:
        """Agent 响应片段

        只有 done=True 才结束本轮；中间片段（或缺少 done 的片段）不产生视觉变化。
        """
        if not isinstance(response, AgentResponse):
            response = AgentResponse.from_dict(response if isinstance(response, dict) else None)
        if not response.done:
            return

        self.emit(SignalState.COMPLETE)
        self.start_idle_timer()
        self._is_processing = False

    def _enter_processing(self) -> None:
        if self._is_processing:
            return
        self.emit(SignalState.PROCESSING)
        self._is_processing = True

    # === 发送 ===

    def emit(self, state: SignalState, *, force: bool = False) -> bool:
        """发送信号（共享的 dispatch 原语）

        非 IDLE 信号会先取消待触发的空闲任务。相同的非 PROCESSING 信号被去抖，
        force=True 跳过去抖（会话边界）。

        Args:
            state: 信号状态
            force: 是否跳过去抖

        Returns:
            是否实际发送（被去抖时为 False）
        """
        if state is not SignalState.IDLE:
            self.cancel_idle_timer()

        if not force and state.debounced and state == self._last_sent:
            self._diag(f"[Coordinator] Suppressed duplicate signal: {state.value}")
            if METRICS_ENABLED:
                metrics.inc("signals.suppressed", {"state": state.value})
            return False

        self._last_sent = state

        if not self._config.enabled:
            self._diag(f"[Coordinator] Disabled, not sending: {state.value}")
            return True

        self._diag(f"[Coordinator] Sending signal: {state.value}")
        result = self._sink.send(state)
        if result.ok:
            if METRICS_ENABLED:
                metrics.inc("signals.sent", {"state": state.value})
        else:
            self._on_sink_failure(state, result.error)
        return True

    def _on_sink_failure(self, state: SignalState, error: SinkError | None) -> None:
        # 失败与成功走同一条路径：last_sent 已更新，不重试
        kind = error.kind if error else "unknown"
        message = f"[Coordinator] Signal {state.value} not delivered ({kind}): {error}"
        if self._config.debug:
            logger.warning(message)
        else:
            logger.debug(message)
        if METRICS_ENABLED:
            metrics.inc("sink.errors", {"kind": kind})

    # === 空闲定时器 ===

    def start_idle_timer(self) -> bool:
        """调度（或重新调度）COMPLETE → IDLE

        Returns:
            是否已调度（idle_timeout_ms 为 0/None 时禁用）
        """
        if not self._config.idle_enabled:
            return False
        return self._timer.register_delay(
            self._idle_task,
            self._config.idle_timeout_seconds,
            self._on_idle_timeout,
        )

    def cancel_idle_timer(self) -> bool:
        """取消空闲任务（幂等）"""
        return self._timer.cancel_delay(self._idle_task)

    def _on_idle_timeout(self) -> None:
        # Timer 触发前已摘除任务，has_pending_idle 此时为 False
        self.emit(SignalState.IDLE)

    # === 关闭 ===

    def shutdown(self) -> None:
        """进程退出前调用：取消定时器并同步发送 RESET"""
        self.cancel_idle_timer()
        self._is_processing = False
        self._last_sent = SignalState.RESET
        if not self._config.enabled:
            return
        result = self._sink.send_sync(SignalState.RESET)
        if not result.ok:
            self._on_sink_failure(SignalState.RESET, result.error)

    # === 状态查询 ===

    @property
    def is_processing(self) -> bool:
        return self._is_processing

    @property
    def last_sent_state(self) -> SignalState | None:
        return self._last_sent

    @property
    def has_pending_idle(self) -> bool:
        """是否有待触发的空闲任务"""
        return self._timer.has_delay(self._idle_task)

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def sink(self) -> SignalSink:
        return self._sink

    def is_available(self) -> bool:
        """是否可实际投递（启用且 sink 可用）"""
        return self._config.enabled and self._sink.available

    def get_config(self) -> SignalConfig:
        """返回配置副本"""
        return replace(self._config)

    def _diag(self, message: str) -> None:
        if self._config.debug:
            logger.info(message)
        else:
            logger.debug(message)
